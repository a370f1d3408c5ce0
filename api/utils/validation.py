"""Validation utilities."""
from pathlib import Path

from fastapi import HTTPException

from quiz_engine.errors import (
    AnswerRequired,
    InvalidIndex,
    InvalidTransition,
    QuestionExpired,
    QuizError,
)


def validate_id(name: str, value: str) -> str:
    """Validate ID string (no path traversal)."""
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{name} is required")
    cleaned = value.strip()
    if not cleaned:
        raise HTTPException(status_code=400, detail=f"{name} is required")
    if Path(cleaned).name != cleaned or "/" in cleaned or "\\" in cleaned:
        raise HTTPException(status_code=400, detail=f"Invalid {name}")
    return cleaned


def quiz_error_to_http(error: QuizError) -> HTTPException:
    """Map a session error to the HTTP error shown to the client."""
    if isinstance(error, InvalidIndex):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (AnswerRequired, InvalidTransition, QuestionExpired)):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))
