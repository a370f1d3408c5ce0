"""
Quiz session state machine.

A QuizSession owns the answers, flags, timers and performance log of one
learner's run through a fixed list of questions. All mutation goes through
its public operations; front ends (HTTP routes, the CLI, tests) call those
operations the same way.

Modes:
    active     answering; navigation, answers and flags are allowed
    completed  terminal; answers, flags and difficulties are frozen
    reviewing  read-only walk over a completed session
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Iterable

from quiz_engine.errors import AnswerRequired, InvalidIndex, InvalidTransition, QuestionExpired
from quiz_engine.models import (
    Difficulty,
    PerformanceEntry,
    Question,
    QuizConfig,
    Result,
    ReviewItem,
    SessionMode,
    SessionSnapshot,
)
from quiz_engine.policy import is_correct, next_difficulty
from quiz_engine.scoring import compute_result
from quiz_engine.timers import Clock, QuestionClock, SessionClock

logger = logging.getLogger(__name__)

ResultSink = Callable[["QuizSession", Result], None]


class QuizSession:
    def __init__(
        self,
        questions: Iterable[Question],
        config: QuizConfig | None = None,
        clock: Clock = time.monotonic,
        result_sink: ResultSink | None = None,
        session_id: str | None = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.config = config or QuizConfig()
        self._questions: list[Question] = list(questions)
        self._answers: list[str | None] = [None] * len(self._questions)
        self._flags: set[int] = set()
        self._flag_reasons: dict[int, str] = {}
        self._review_flags: set[int] = set()
        self._review_flag_reasons: dict[int, str] = {}
        self._performance_log: list[PerformanceEntry] = []
        self._finalized: set[int] = set()
        self._result: Result | None = None
        self._result_sink = result_sink
        self._disposed = False

        self._clock = clock
        self._session_clock = SessionClock(clock)
        self._question_clock = QuestionClock(clock)

        self.mode = SessionMode.ACTIVE
        self.current_index = 0
        self._furthest_index = 0
        self._presented_at = 0.0

        self._session_clock.start()
        self._present(0)
        logger.info(
            f"Session {self.session_id} started with {len(self._questions)} questions"
        )

    # Read access

    @property
    def questions(self) -> tuple[Question, ...]:
        return tuple(self._questions)

    @property
    def total_questions(self) -> int:
        return len(self._questions)

    @property
    def answers(self) -> tuple[str | None, ...]:
        return tuple(self._answers)

    @property
    def flags(self) -> frozenset[int]:
        """Flags set while answering. Frozen once the session completes."""
        return frozenset(self._flags)

    @property
    def flag_reasons(self) -> dict[int, str]:
        return dict(self._flag_reasons)

    @property
    def review_flags(self) -> frozenset[int]:
        return frozenset(self._review_flags)

    @property
    def performance_log(self) -> tuple[PerformanceEntry, ...]:
        return tuple(self._performance_log)

    @property
    def result(self) -> Result | None:
        return self._result

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def elapsed_seconds(self) -> int:
        return self._session_clock.elapsed_seconds()

    @property
    def remaining_seconds(self) -> int | None:
        """Seconds left on the question clock, None outside active mode."""
        if self.mode is not SessionMode.ACTIVE:
            return None
        return self._question_clock.remaining_seconds()

    @property
    def current_question(self) -> Question | None:
        if not self._questions:
            return None
        return self._questions[self.current_index]

    def is_flagged(self, index: int) -> bool:
        return index in self._flags or index in self._review_flags

    def state(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            mode=self.mode,
            current_index=self.current_index,
            total_questions=self.total_questions,
            elapsed_seconds=self.elapsed_seconds,
            remaining_seconds=self.remaining_seconds,
            answered=tuple(i for i, a in enumerate(self._answers) if a is not None),
            flagged=tuple(sorted(self._flags | self._review_flags)),
            current_question=self.current_question,
        )

    def compute_result(self) -> Result:
        """Grade the answers as they stand, without changing the session."""
        if self._result is not None:
            return self._result
        return compute_result(
            self._questions,
            self._answers,
            time_taken_seconds=self.elapsed_seconds,
            performance_log=self._performance_log,
            passing_score=self.config.passing_score,
        )

    def review_items(self) -> tuple[ReviewItem, ...]:
        if self._result is None:
            raise InvalidTransition("review", self.mode.value)
        return tuple(
            ReviewItem(
                index=index,
                question=question,
                answer=self._answers[index],
                correct=is_correct(question, self._answers[index]),
                flagged=self.is_flagged(index),
                flag_reason=self._review_flag_reasons.get(
                    index, self._flag_reasons.get(index)
                ),
            )
            for index, question in enumerate(self._questions)
        )

    # Answer store

    def record_answer(self, index: int, value: str) -> None:
        """Overwrite the answer at ``index``. Only while active."""
        self.tick()
        if self.mode is not SessionMode.ACTIVE or self._disposed:
            raise InvalidIndex(index, f"Cannot record answer {index} while {self.mode.value}")
        self._check_index(index)
        if not isinstance(value, str):
            raise TypeError("Answer must be a string")
        self._answers[index] = value
        logger.debug(f"Session {self.session_id}: answer recorded for {index + 1}")

    def toggle_flag(self, index: int, reason: str | None = None) -> bool:
        """Flip the flag on ``index``; returns True if it is now flagged."""
        flags, _ = self._flag_target("toggle flag")
        if index in flags:
            self.unflag(index)
            return False
        self.flag(index, reason)
        return True

    def flag(self, index: int, reason: str | None = None) -> None:
        flags, reasons = self._flag_target("flag")
        self._check_index(index)
        flags.add(index)
        if reason:
            reasons[index] = reason

    def unflag(self, index: int) -> None:
        flags, reasons = self._flag_target("unflag")
        self._check_index(index)
        flags.discard(index)
        reasons.pop(index, None)

    # Transitions

    def answer(self, value: str, expected_index: int | None = None) -> None:
        """
        Answer the current question.

        ``expected_index`` is the question the caller was showing. If a
        timeout has moved the session past it, the answer is dropped and
        QuestionExpired is raised instead of landing on an unseen question.
        """
        self.tick()
        if expected_index is not None and (
            self.mode is not SessionMode.ACTIVE or expected_index != self.current_index
        ):
            raise QuestionExpired(expected_index, self.current_index)
        self._require(SessionMode.ACTIVE, "answer")
        if not self._questions:
            raise InvalidIndex(0)
        self.record_answer(self.current_index, value)

    def next(self) -> Result | None:
        """
        Advance one question.

        While active the current question must be answered first; moving
        past the last question submits the quiz and returns the Result.
        During review this steps forward and ends the review after the
        last question.
        """
        self.tick()
        if self.mode is SessionMode.REVIEWING:
            self._review_next()
            return None
        self._require(SessionMode.ACTIVE, "advance")
        if self._questions and self._answers[self.current_index] is None:
            raise AnswerRequired(self.current_index)
        return self._advance()

    def previous(self) -> None:
        self.tick()
        self._require_navigable("go back")
        if self.current_index > 0:
            self._present(self.current_index - 1)

    def jump(self, index: int) -> None:
        """Move to ``index``; while active only questions already reached."""
        self.tick()
        self._require_navigable("jump")
        self._check_index(index)
        if self.mode is SessionMode.ACTIVE and index > self._furthest_index:
            raise InvalidIndex(index, f"Question {index + 1} has not been reached yet")
        if index != self.current_index:
            self._present(index)

    def submit(self) -> Result:
        """Finish the quiz. Repeated calls return the first Result."""
        if self._result is not None:
            return self._result
        self.tick()
        if self._result is not None:
            return self._result
        self._require(SessionMode.ACTIVE, "submit")
        return self._complete()

    def start_review(self) -> None:
        self.tick()
        if self.mode is SessionMode.REVIEWING:
            return
        self._require(SessionMode.COMPLETED, "start review")
        self.mode = SessionMode.REVIEWING
        self.current_index = 0
        logger.info(f"Session {self.session_id}: review started")

    def tick(self) -> None:
        """
        Apply timer effects that are due.

        Expired deadlines are processed in order, each at its own
        timestamp, so a long suspension can time out several questions in
        one call.
        """
        if self._disposed:
            return
        while self.mode is SessionMode.ACTIVE:
            now = self._clock()
            session_deadline = self._session_deadline()
            question_deadline = self._question_clock.deadline
            if session_deadline is not None and now >= session_deadline and (
                question_deadline is None or session_deadline <= question_deadline
            ):
                logger.info(f"Session {self.session_id}: time limit reached")
                self._complete(at=session_deadline)
                return
            if question_deadline is None or now < question_deadline:
                return
            logger.info(
                f"Session {self.session_id}: question {self.current_index + 1} timed out"
            )
            self._advance(at=question_deadline)

    def dispose(self) -> None:
        """Stop both clocks; the session no longer reacts to ticks."""
        if self._disposed:
            return
        self._question_clock.stop()
        self._session_clock.stop()
        self._disposed = True
        logger.debug(f"Session {self.session_id} disposed")

    # Internals

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or not 0 <= index < len(self._questions):
            raise InvalidIndex(index)

    def _require(self, mode: SessionMode, operation: str) -> None:
        if self._disposed:
            raise InvalidTransition(operation, "disposed")
        if self.mode is not mode:
            raise InvalidTransition(operation, self.mode.value)

    def _require_navigable(self, operation: str) -> None:
        if self._disposed:
            raise InvalidTransition(operation, "disposed")
        if self.mode is SessionMode.COMPLETED:
            raise InvalidTransition(operation, self.mode.value)

    def _flag_target(self, operation: str) -> tuple[set[int], dict[int, str]]:
        self.tick()
        self._require_navigable(operation)
        if self.mode is SessionMode.REVIEWING:
            return self._review_flags, self._review_flag_reasons
        return self._flags, self._flag_reasons

    def _session_deadline(self) -> float | None:
        limit = self.config.time_limit_seconds
        started = self._session_clock.started_at
        if not limit or started is None:
            return None
        return started + limit

    def _present(self, index: int, start: float | None = None) -> None:
        self.current_index = index
        self._furthest_index = max(self._furthest_index, index)
        self._presented_at = self._clock() if start is None else start
        if self.mode is SessionMode.ACTIVE and self._questions:
            limit = self._questions[index].time_limit_seconds
            self._question_clock.reset(limit, self._presented_at)

    def _advance(self, at: float | None = None) -> Result | None:
        if not self._questions:
            return self._complete(at)
        self._finalize(self.current_index, at)
        if self.current_index >= len(self._questions) - 1:
            return self._complete(at)
        self._present(self.current_index + 1, start=at)
        return None

    def _finalize(self, index: int, at: float | None = None) -> None:
        """Log performance for ``index`` and adapt the next question, once."""
        if index in self._finalized:
            return
        question = self._questions[index]
        answer = self._answers[index]
        correct = is_correct(question, answer)
        now = self._clock() if at is None else at
        entry = PerformanceEntry(
            question_index=index,
            difficulty_at_attempt=Difficulty(question.difficulty),
            correct=correct,
            response_time_seconds=max(0, int(now - self._presented_at)),
        )
        self._performance_log.append(entry)
        self._finalized.add(index)

        target = index + 1
        if (
            self.config.enable_adaptive
            and target < len(self._questions)
            and target > self.current_index
        ):
            upcoming = self._questions[target]
            new_level = next_difficulty(entry.difficulty_at_attempt, correct)
            if upcoming.difficulty != new_level:
                logger.debug(
                    f"Session {self.session_id}: question {target + 1} "
                    f"adapted {Difficulty(upcoming.difficulty).value} -> {new_level.value}"
                )
            upcoming.difficulty = new_level

    def _complete(self, at: float | None = None) -> Result:
        if self._questions:
            self._finalize(self.current_index, at)
        self._question_clock.stop()
        self._session_clock.stop(at)
        self.mode = SessionMode.COMPLETED
        self._result = compute_result(
            self._questions,
            self._answers,
            time_taken_seconds=self._session_clock.elapsed_seconds(),
            performance_log=self._performance_log,
            passing_score=self.config.passing_score,
        )
        logger.info(
            f"Session {self.session_id} completed: {self._result.correct_answers}/"
            f"{self._result.total_questions} ({self._result.score}%)"
        )
        self._emit(self._result)
        return self._result

    def _emit(self, result: Result) -> None:
        if self._result_sink is None:
            return
        try:
            self._result_sink(self, result)
        except Exception:
            logger.exception(f"Session {self.session_id}: result sink failed")

    def _review_next(self) -> None:
        if self.current_index >= len(self._questions) - 1:
            self.mode = SessionMode.COMPLETED
            logger.info(f"Session {self.session_id}: review finished")
            return
        self.current_index += 1
