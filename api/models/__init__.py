"""Pydantic models."""
from api.models.quiz import (
    AnswerRequest,
    FlagRequest,
    JumpRequest,
    SessionCreateRequest,
    SessionResultResponse,
    SessionStateResponse,
)

__all__ = [
    "AnswerRequest",
    "FlagRequest",
    "JumpRequest",
    "SessionCreateRequest",
    "SessionResultResponse",
    "SessionStateResponse",
]
