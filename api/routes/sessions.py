"""Quiz session endpoints."""
from typing import Annotated, Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies.sessions import get_session_store
from api.models import (
    AnswerRequest,
    FlagRequest,
    JumpRequest,
    SessionCreateRequest,
    SessionResultResponse,
    SessionStateResponse,
)
from api.services.session_service import SessionStore
from api.utils import quiz_error_to_http, utc_now, validate_id
from quiz_engine.errors import QuizError
from quiz_engine.scoring import calculate_analytics
from quiz_engine.serialization import (
    serialize_analytics,
    serialize_certificate_claim,
    serialize_result,
    serialize_review_item,
    serialize_state,
)
from quiz_engine.session import QuizSession

T = TypeVar("T")

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

Store = Annotated[SessionStore, Depends(get_session_store)]


def _apply(store: SessionStore, session_id: str, operation: Callable[[QuizSession], T]) -> T:
    session_id = validate_id("sessionId", session_id)
    try:
        return store.run(session_id, operation)
    except QuizError as e:
        raise quiz_error_to_http(e)


def _state(session: QuizSession) -> dict[str, object]:
    return serialize_state(session.state())


@router.post("", status_code=201, response_model=SessionStateResponse)
def create_session(payload: SessionCreateRequest, store: Store) -> dict[str, object]:
    """Start a quiz session from generated questions."""
    session = store.create(payload.questions, payload.config)
    return store.run(session.session_id, _state)


@router.get("/{session_id}", response_model=SessionStateResponse)
def get_session(session_id: str, store: Store) -> dict[str, object]:
    """Get current session state. Applies any due timeouts first."""

    def operation(session: QuizSession) -> dict[str, object]:
        session.tick()
        return _state(session)

    return _apply(store, session_id, operation)


@router.post("/{session_id}/answer", response_model=SessionStateResponse)
def answer_question(session_id: str, payload: AnswerRequest, store: Store) -> dict[str, object]:
    """Answer the current question, or ``questionIndex`` when given."""

    def operation(session: QuizSession) -> dict[str, object]:
        if payload.questionIndex is None:
            session.answer(payload.value, expected_index=payload.expectedIndex)
        else:
            session.record_answer(payload.questionIndex, payload.value)
        return _state(session)

    return _apply(store, session_id, operation)


@router.post("/{session_id}/next")
def next_question(session_id: str, store: Store) -> dict[str, object]:
    """Advance; on the last question this submits the quiz."""

    def operation(session: QuizSession) -> dict[str, object]:
        result = session.next()
        response = {"state": _state(session)}
        if result is not None:
            response["result"] = serialize_result(result)
        return response

    return _apply(store, session_id, operation)


@router.post("/{session_id}/previous", response_model=SessionStateResponse)
def previous_question(session_id: str, store: Store) -> dict[str, object]:
    def operation(session: QuizSession) -> dict[str, object]:
        session.previous()
        return _state(session)

    return _apply(store, session_id, operation)


@router.post("/{session_id}/jump", response_model=SessionStateResponse)
def jump_to_question(session_id: str, payload: JumpRequest, store: Store) -> dict[str, object]:
    def operation(session: QuizSession) -> dict[str, object]:
        session.jump(payload.index)
        return _state(session)

    return _apply(store, session_id, operation)


@router.post("/{session_id}/flags/{index}", response_model=SessionStateResponse)
def flag_question(
    session_id: str,
    index: int,
    store: Store,
    payload: FlagRequest | None = None,
) -> dict[str, object]:
    def operation(session: QuizSession) -> dict[str, object]:
        session.flag(index, payload.reason if payload else None)
        return _state(session)

    return _apply(store, session_id, operation)


@router.delete("/{session_id}/flags/{index}", response_model=SessionStateResponse)
def unflag_question(session_id: str, index: int, store: Store) -> dict[str, object]:
    def operation(session: QuizSession) -> dict[str, object]:
        session.unflag(index)
        return _state(session)

    return _apply(store, session_id, operation)


@router.post("/{session_id}/submit")
def submit_session(session_id: str, store: Store) -> dict[str, object]:
    """Submit the quiz. Submitting again returns the same result."""

    def operation(session: QuizSession) -> dict[str, object]:
        result = session.submit()
        return {
            "state": _state(session),
            "result": serialize_result(result),
            "submittedAt": utc_now(),
        }

    return _apply(store, session_id, operation)


@router.post("/{session_id}/review", response_model=SessionStateResponse)
def start_review(session_id: str, store: Store) -> dict[str, object]:
    """Enter review mode on a completed session."""

    def operation(session: QuizSession) -> dict[str, object]:
        session.start_review()
        return _state(session)

    return _apply(store, session_id, operation)


@router.get("/{session_id}/review")
def get_review(session_id: str, store: Store) -> list[dict[str, object]]:
    """All questions with answers and explanations, after completion."""

    def operation(session: QuizSession) -> list[dict[str, object]]:
        return [serialize_review_item(item) for item in session.review_items()]

    return _apply(store, session_id, operation)


@router.get("/{session_id}/result", response_model=SessionResultResponse)
def get_result(session_id: str, store: Store) -> dict[str, object]:
    """Result, certificate eligibility and analytics of a completed session."""

    def operation(session: QuizSession) -> dict[str, object]:
        session.tick()
        result = session.result
        if result is None:
            raise HTTPException(status_code=409, detail="Session not completed")
        analytics = calculate_analytics(session.questions, session.answers, result)
        return {
            "sessionId": session.session_id,
            "result": serialize_result(result),
            "certificate": serialize_certificate_claim(result),
            "analytics": serialize_analytics(analytics),
        }

    return _apply(store, session_id, operation)


@router.delete("/{session_id}")
def dispose_session(session_id: str, store: Store) -> dict[str, str]:
    """Stop a session's timers and discard it."""
    session_id = validate_id("sessionId", session_id)
    if not store.dispose(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"status": "disposed", "sessionId": session_id}
