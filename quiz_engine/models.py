from __future__ import annotations

import enum
from dataclasses import dataclass, field

from quiz_engine.errors import InvalidQuestionData


class QuestionType(str, enum.Enum):
    """Kind of question presented to the learner."""

    MULTIPLE_CHOICE = "MultipleChoice"
    TRUE_FALSE = "TrueFalse"
    FILL_BLANK = "FillBlank"
    SHORT_ANSWER = "ShortAnswer"

    @property
    def has_options(self) -> bool:
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE)


class Difficulty(str, enum.Enum):
    """Difficulty tag. Declaration order is the tie-break order."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionMode(str, enum.Enum):
    """Lifecycle mode of a quiz session."""

    ACTIVE = "active"
    REVIEWING = "reviewing"
    COMPLETED = "completed"


DEFAULT_TIME_LIMITS: dict[QuestionType, int] = {
    QuestionType.MULTIPLE_CHOICE: 45,
    QuestionType.TRUE_FALSE: 30,
    QuestionType.FILL_BLANK: 60,
    QuestionType.SHORT_ANSWER: 90,
}

TRUE_FALSE_OPTIONS = ("True", "False")

CERTIFICATION_THRESHOLD = 70


@dataclass
class Question:
    id: int | str
    type: QuestionType
    prompt: str
    correct_answer: str
    options: tuple[str, ...] = ()
    explanation: str | None = None
    difficulty: Difficulty = Difficulty.MEDIUM  # rewritten by adaptation
    time_limit_seconds: int | None = None

    def __post_init__(self) -> None:
        if self.time_limit_seconds is None:
            self.time_limit_seconds = DEFAULT_TIME_LIMITS[self.type]
        elif (
            isinstance(self.time_limit_seconds, bool)
            or not isinstance(self.time_limit_seconds, int)
            or self.time_limit_seconds <= 0
        ):
            raise InvalidQuestionData(
                f"Question {self.id} time limit must be a positive integer"
            )


@dataclass
class QuizConfig:
    question_count: int | None = None
    time_limit_seconds: int | None = None  # whole-session limit
    difficulty: str = "mixed"
    question_types: frozenset[QuestionType] = frozenset(QuestionType)
    enable_adaptive: bool = True
    passing_score: int = 70

    @property
    def starting_difficulty(self) -> Difficulty:
        """Level given to questions that arrive without one."""
        if self.difficulty == "mixed":
            return Difficulty.MEDIUM
        return Difficulty(self.difficulty)


@dataclass(frozen=True)
class PerformanceEntry:
    question_index: int
    difficulty_at_attempt: Difficulty
    correct: bool
    response_time_seconds: int


@dataclass(frozen=True)
class Result:
    score: int
    correct_answers: int
    total_questions: int
    time_taken_seconds: int
    average_difficulty: Difficulty
    certification_eligible: bool
    passed: bool
    performance_log: tuple[PerformanceEntry, ...] = ()
    answers: tuple[str | None, ...] = ()

    @property
    def percentage(self) -> int:
        return self.score

    def certificate_claim(self) -> CertificateClaim:
        return CertificateClaim(
            eligible=self.certification_eligible, percentage=self.score
        )


@dataclass(frozen=True)
class CertificateClaim:
    eligible: bool
    percentage: int


@dataclass(frozen=True)
class ReviewItem:
    """One question of a completed session, as shown during review."""

    index: int
    question: Question
    answer: str | None
    correct: bool
    flagged: bool
    flag_reason: str | None = None


@dataclass(frozen=True)
class SessionSnapshot:
    session_id: str
    mode: SessionMode
    current_index: int
    total_questions: int
    elapsed_seconds: int
    remaining_seconds: int | None
    answered: tuple[int, ...]
    flagged: tuple[int, ...]
    current_question: Question | None


@dataclass
class Analytics:
    question_types: dict[str, int] = field(default_factory=dict)
    question_types_correct: dict[str, int] = field(default_factory=dict)
    difficulty_breakdown: dict[str, int] = field(default_factory=dict)
    difficulty_correct: dict[str, int] = field(default_factory=dict)
    suggestions: list[str] = field(default_factory=list)
