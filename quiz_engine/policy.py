"""Adaptive difficulty policy."""
from __future__ import annotations

from quiz_engine.models import Difficulty, Question

_RAISE = {
    Difficulty.EASY: Difficulty.MEDIUM,
    Difficulty.MEDIUM: Difficulty.HARD,
    Difficulty.HARD: Difficulty.HARD,
}

_LOWER = {
    Difficulty.EASY: Difficulty.EASY,
    Difficulty.MEDIUM: Difficulty.EASY,
    Difficulty.HARD: Difficulty.MEDIUM,
}


def next_difficulty(current: Difficulty, was_correct: bool) -> Difficulty:
    """Difficulty for the question after one answered at ``current``."""
    current = Difficulty(current)
    return _RAISE[current] if was_correct else _LOWER[current]


def is_correct(question: Question, answer: str | None) -> bool:
    """Exact string match against the correct answer; None never matches."""
    return answer is not None and answer == question.correct_answer
