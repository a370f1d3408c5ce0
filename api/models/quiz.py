"""Quiz session Pydantic models."""
from pydantic import BaseModel, Field


class SessionCreateRequest(BaseModel):
    """Model for starting a quiz session from generated questions."""

    questions: list[dict[str, object]]
    config: dict[str, object] | None = None


class AnswerRequest(BaseModel):
    """Model for answering the current question."""

    value: str
    questionIndex: int | None = None
    # Question the client was showing; a timeout since then rejects the answer
    expectedIndex: int | None = None


class JumpRequest(BaseModel):
    """Model for jumping to a question."""

    index: int = Field(..., ge=0)


class FlagRequest(BaseModel):
    """Model for flagging a question."""

    reason: str | None = None


class SessionStateResponse(BaseModel):
    """Model for the current session state."""

    sessionId: str
    mode: str
    currentIndex: int
    totalQuestions: int
    elapsedSeconds: int
    remainingSeconds: int | None = None
    answered: list[int]
    flagged: list[int]
    question: dict[str, object] | None = None


class SessionResultResponse(BaseModel):
    """Model for a graded session."""

    sessionId: str
    result: dict[str, object]
    certificate: dict[str, object]
    analytics: dict[str, object]
