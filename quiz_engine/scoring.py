"""Scoring, certification eligibility and post-quiz analytics."""
from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from quiz_engine.models import (
    CERTIFICATION_THRESHOLD,
    Analytics,
    Difficulty,
    PerformanceEntry,
    Question,
    QuestionType,
    Result,
)
from quiz_engine.policy import is_correct

SLOW_SECONDS_PER_QUESTION = 60


def percentage(correct: int, total: int) -> int:
    """Percent correct rounded half up; 0 for an empty quiz."""
    if total <= 0:
        return 0
    return (correct * 200 + total) // (total * 2)


def average_difficulty(questions: Iterable[Question]) -> Difficulty:
    """
    Most frequent difficulty tag.

    Ties go to the first level in easy, medium, hard order. An empty
    question list counts as medium.
    """
    counts = Counter(Difficulty(q.difficulty) for q in questions)
    if not counts:
        return Difficulty.MEDIUM
    best = max(counts.values())
    return next(level for level in Difficulty if counts[level] == best)


def count_correct(
    questions: Sequence[Question], answers: Sequence[str | None]
) -> int:
    return sum(
        1 for question, answer in zip(questions, answers) if is_correct(question, answer)
    )


def compute_result(
    questions: Sequence[Question],
    answers: Sequence[str | None],
    time_taken_seconds: int = 0,
    performance_log: Iterable[PerformanceEntry] = (),
    passing_score: int = CERTIFICATION_THRESHOLD,
) -> Result:
    """Grade a quiz run. Pure: the inputs are never modified."""
    correct = count_correct(questions, answers)
    score = percentage(correct, len(questions))
    return Result(
        score=score,
        correct_answers=correct,
        total_questions=len(questions),
        time_taken_seconds=time_taken_seconds,
        average_difficulty=average_difficulty(questions),
        certification_eligible=score >= CERTIFICATION_THRESHOLD,
        passed=score >= passing_score,
        performance_log=tuple(performance_log),
        answers=tuple(answers),
    )


def performance_feedback(score: int) -> str:
    if score >= 80:
        return "Excellent! You have mastered this topic!"
    if score >= 60:
        return "Good job! Keep practicing to improve further."
    return "Keep learning! Review the material and try again."


def format_time(seconds: int) -> str:
    minutes, rest = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{rest:02d}"


def calculate_analytics(
    questions: Sequence[Question],
    answers: Sequence[str | None],
    result: Result,
) -> Analytics:
    """Per-type and per-difficulty breakdown plus study suggestions."""
    analytics = Analytics(
        question_types={t.value: 0 for t in QuestionType},
        question_types_correct={t.value: 0 for t in QuestionType},
        difficulty_breakdown={d.value: 0 for d in Difficulty},
        difficulty_correct={d.value: 0 for d in Difficulty},
    )
    for question, answer in zip(questions, answers):
        type_key = QuestionType(question.type).value
        level_key = Difficulty(question.difficulty).value
        analytics.question_types[type_key] += 1
        analytics.difficulty_breakdown[level_key] += 1
        if is_correct(question, answer):
            analytics.question_types_correct[type_key] += 1
            analytics.difficulty_correct[level_key] += 1

    suggestions = analytics.suggestions
    if not result.certification_eligible:
        suggestions.append("Review the explanations for incorrect answers")
        suggestions.append("Practice more quizzes on this topic")

    hard_total = analytics.difficulty_breakdown[Difficulty.HARD.value]
    if hard_total and analytics.difficulty_correct[Difficulty.HARD.value] / hard_total < 0.5:
        suggestions.append("Focus on understanding harder concepts")

    if (
        result.total_questions
        and result.time_taken_seconds / result.total_questions > SLOW_SECONDS_PER_QUESTION
    ):
        suggestions.append("Try to improve your response time")

    mcq_key = QuestionType.MULTIPLE_CHOICE.value
    mcq_total = analytics.question_types[mcq_key]
    if mcq_total and analytics.question_types_correct[mcq_key] / mcq_total < 0.6:
        suggestions.append("Practice more multiple choice questions")

    if not suggestions:
        suggestions.append("Great job! Keep up the excellent work!")
        suggestions.append("Try harder difficulty levels to challenge yourself")
    return analytics
