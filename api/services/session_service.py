"""Service layer for live quiz sessions held in memory."""
import logging
import threading
import time
from typing import Any, Callable, TypeVar

from fastapi import HTTPException

from api.config import MAX_QUESTIONS_PER_SESSION
from quiz_engine.errors import InvalidQuestionData
from quiz_engine.serialization import load_quiz
from quiz_engine.session import QuizSession, ResultSink
from quiz_engine.timers import Clock

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Registry of live sessions.

    Every operation on a session runs under one store lock, so request
    handlers and the ticker thread apply transitions strictly one at a time.
    """

    def __init__(
        self,
        result_sink: ResultSink | None = None,
        clock: Clock = time.monotonic,
    ):
        self._sessions: dict[str, QuizSession] = {}
        self._last_access: dict[str, float] = {}
        self._lock = threading.RLock()
        self._result_sink = result_sink
        self._clock = clock

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(
        self,
        questions: list[dict[str, Any]],
        config: dict[str, Any] | None = None,
    ) -> QuizSession:
        """Validate generator payload and start a new session."""
        if len(questions) > MAX_QUESTIONS_PER_SESSION:
            raise HTTPException(status_code=400, detail="Too many questions")
        try:
            parsed_questions, parsed_config = load_quiz(questions, config)
        except InvalidQuestionData as e:
            raise HTTPException(status_code=400, detail=str(e))

        session = QuizSession(
            parsed_questions,
            config=parsed_config,
            clock=self._clock,
            result_sink=self._result_sink,
        )
        with self._lock:
            self._sessions[session.session_id] = session
            self._last_access[session.session_id] = self._clock()
        return session

    def run(self, session_id: str, operation: Callable[[QuizSession], T]) -> T:
        """Run ``operation`` on a session while holding the store lock."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise HTTPException(status_code=404, detail="Session not found")
            self._last_access[session_id] = self._clock()
            return operation(session)

    def dispose(self, session_id: str) -> bool:
        """Stop a session's clocks and drop it."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._last_access.pop(session_id, None)
        if session is None:
            return False
        session.dispose()
        return True

    def tick_all(self) -> None:
        """Apply due timer effects to every live session."""
        with self._lock:
            sessions = list(self._sessions.values())
            for session in sessions:
                try:
                    session.tick()
                except Exception:
                    logger.exception(f"Tick failed for session {session.session_id}")

    def evict_idle(self, ttl_seconds: int) -> int:
        """Dispose sessions not touched for ``ttl_seconds``."""
        if ttl_seconds <= 0:
            return 0
        cutoff = self._clock() - ttl_seconds
        with self._lock:
            stale = [sid for sid, seen in self._last_access.items() if seen < cutoff]
        for session_id in stale:
            self.dispose(session_id)
        if stale:
            logger.info(f"Evicted {len(stale)} idle sessions")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            session_ids = list(self._sessions)
        for session_id in session_ids:
            self.dispose(session_id)
