"""Adaptive quiz session engine."""
from quiz_engine.errors import (
    AnswerRequired,
    InvalidIndex,
    InvalidQuestionData,
    InvalidTransition,
    QuestionExpired,
    QuizError,
)
from quiz_engine.models import (
    Difficulty,
    PerformanceEntry,
    Question,
    QuestionType,
    QuizConfig,
    Result,
    SessionMode,
)
from quiz_engine.policy import next_difficulty
from quiz_engine.scoring import calculate_analytics, compute_result
from quiz_engine.session import QuizSession

__all__ = [
    "AnswerRequired",
    "InvalidIndex",
    "InvalidQuestionData",
    "InvalidTransition",
    "QuestionExpired",
    "QuizError",
    "Difficulty",
    "PerformanceEntry",
    "Question",
    "QuestionType",
    "QuizConfig",
    "Result",
    "SessionMode",
    "next_difficulty",
    "calculate_analytics",
    "compute_result",
    "QuizSession",
]
