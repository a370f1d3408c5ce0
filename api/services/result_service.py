"""Service layer for persisting graded quiz results."""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session as DBSession

from api.database import SessionLocal, session_scope
from api.models.db.result import QuizResultRecord
from quiz_engine.models import Result
from quiz_engine.serialization import serialize_performance_entry
from quiz_engine.session import QuizSession

logger = logging.getLogger(__name__)


def save_result(
    db: DBSession,
    session_id: str,
    result: Result,
    flags: list[int] | None = None,
) -> QuizResultRecord:
    """
    Store the result of a completed session.
    A session is stored once; later calls return the existing record.
    """
    record = db.get(QuizResultRecord, session_id)
    if record:
        return record

    record = QuizResultRecord(
        id=session_id,
        score=result.score,
        correct_answers=result.correct_answers,
        total_questions=result.total_questions,
        time_taken_seconds=result.time_taken_seconds,
        average_difficulty=result.average_difficulty.value,
        certification_eligible=result.certification_eligible,
        passed=result.passed,
    )
    record.answers = list(result.answers)
    record.flags = sorted(flags or [])
    record.performance_log = [
        serialize_performance_entry(entry) for entry in result.performance_log
    ]

    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def get_result_record(db: DBSession, session_id: str) -> QuizResultRecord | None:
    """Get stored result by session ID."""
    return db.get(QuizResultRecord, session_id)


def list_results(
    db: DBSession,
    eligible_only: bool = False,
    completed_after: datetime | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[QuizResultRecord]:
    """List stored results, newest first."""
    query = select(QuizResultRecord)
    if eligible_only:
        query = query.where(QuizResultRecord.certification_eligible.is_(True))
    if completed_after:
        query = query.where(QuizResultRecord.completed_at >= completed_after)
    query = query.order_by(QuizResultRecord.completed_at.desc()).limit(limit).offset(offset)
    return list(db.execute(query).scalars().all())


class ResultWriter:
    """
    Fire-and-forget result sink for quiz sessions.

    Results are written on a single worker thread so session progression
    never waits for the database. Write failures are logged; the session's
    in-memory result is unaffected.
    """

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory
        self._executor: ThreadPoolExecutor | None = None
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

    def _get_executor(self) -> ThreadPoolExecutor:
        # Created on first use and again after shutdown
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="result_writer"
                )
            return self._executor

    def __call__(self, session: QuizSession, result: Result) -> None:
        flags = sorted(session.flags)
        future = self._get_executor().submit(self._write, session.session_id, result, flags)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _write(self, session_id: str, result: Result, flags: list[int]) -> None:
        try:
            with session_scope(self._session_factory) as db:
                save_result(db, session_id, result, flags)
            logger.info(f"Stored result for session {session_id}")
        except Exception:
            logger.exception(f"Failed to store result for session {session_id}")

    def drain(self, timeout: float | None = None) -> None:
        """Wait for queued writes to finish."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self) -> None:
        """Finish queued writes and stop the worker thread."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    @property
    def running(self) -> bool:
        return self._executor is not None
