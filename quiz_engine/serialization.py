from __future__ import annotations

from typing import Any, Iterable

from quiz_engine.errors import InvalidQuestionData
from quiz_engine.models import (
    TRUE_FALSE_OPTIONS,
    Analytics,
    Difficulty,
    PerformanceEntry,
    Question,
    QuestionType,
    QuizConfig,
    Result,
    ReviewItem,
    SessionMode,
    SessionSnapshot,
)
from quiz_engine.scoring import format_time, performance_feedback


# Generator payloads use several spellings for the same question type.
TYPE_ALIASES: dict[str, QuestionType] = {
    "multiplechoice": QuestionType.MULTIPLE_CHOICE,
    "multiple_choice": QuestionType.MULTIPLE_CHOICE,
    "mcq": QuestionType.MULTIPLE_CHOICE,
    "truefalse": QuestionType.TRUE_FALSE,
    "true_false": QuestionType.TRUE_FALSE,
    "tf": QuestionType.TRUE_FALSE,
    "fillblank": QuestionType.FILL_BLANK,
    "fill_blank": QuestionType.FILL_BLANK,
    "fill_in_the_blank": QuestionType.FILL_BLANK,
    "shortanswer": QuestionType.SHORT_ANSWER,
    "short_answer": QuestionType.SHORT_ANSWER,
}


def _first(payload: dict[str, Any], keys: list[str]) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def parse_question_type(value: object) -> QuestionType:
    if isinstance(value, QuestionType):
        return value
    if value is None:
        return QuestionType.MULTIPLE_CHOICE
    key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return TYPE_ALIASES[key]
    except KeyError:
        raise InvalidQuestionData(f"Unknown question type: {value}") from None


def parse_difficulty(value: object, default: Difficulty = Difficulty.MEDIUM) -> Difficulty:
    if value is None or value == "":
        return default
    try:
        return Difficulty(str(value).strip().lower())
    except ValueError:
        raise InvalidQuestionData(f"Unknown difficulty: {value}") from None


def _parse_positive_int(value: object, name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise InvalidQuestionData(f"{name} must be a positive integer")
    try:
        number = int(value)
    except ValueError:
        raise InvalidQuestionData(f"{name} must be a positive integer") from None
    if number <= 0:
        raise InvalidQuestionData(f"{name} must be a positive integer")
    return number


def parse_question(
    payload: dict[str, Any],
    position: int,
    default_difficulty: Difficulty = Difficulty.MEDIUM,
) -> Question:
    """Build a Question from one generator record (1-based ``position``)."""
    if not isinstance(payload, dict):
        raise InvalidQuestionData(f"Question {position} must be an object")

    question_type = parse_question_type(_first(payload, ["type", "questionType"]))
    prompt = _first(payload, ["prompt", "question", "text"])
    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidQuestionData(f"Question {position} has no prompt")

    correct = _first(payload, ["correctAnswer", "correct_answer", "answer"])
    if isinstance(correct, bool):
        correct = "True" if correct else "False"
    if correct is None or str(correct) == "":
        raise InvalidQuestionData(f"Question {position} has no correct answer")
    correct = str(correct)

    raw_options = payload.get("options")
    options: tuple[str, ...] = ()
    if question_type.has_options:
        if raw_options is None and question_type is QuestionType.TRUE_FALSE:
            options = TRUE_FALSE_OPTIONS
        elif isinstance(raw_options, list) and raw_options:
            options = tuple(str(option) for option in raw_options)
        else:
            raise InvalidQuestionData(f"Question {position} requires options")
        if correct not in options:
            raise InvalidQuestionData(
                f"Question {position}: correct answer is not one of the options"
            )

    question_id = payload.get("id")
    if question_id is None:
        question_id = position
    if isinstance(question_id, bool) or not isinstance(question_id, (int, str)):
        raise InvalidQuestionData(f"Question {position} id must be a string or integer")

    explanation = payload.get("explanation")
    return Question(
        id=question_id,
        type=question_type,
        prompt=prompt,
        options=options,
        correct_answer=correct,
        explanation=str(explanation) if explanation else None,
        difficulty=parse_difficulty(payload.get("difficulty"), default_difficulty),
        time_limit_seconds=_parse_positive_int(
            _first(payload, ["timeLimitSeconds", "timeLimit"]),
            f"Question {position} time limit",
        ),
    )


def parse_questions(
    items: Iterable[dict[str, Any]],
    default_difficulty: Difficulty = Difficulty.MEDIUM,
) -> list[Question]:
    questions = [
        parse_question(item, index, default_difficulty)
        for index, item in enumerate(items, start=1)
    ]
    seen: set[object] = set()
    for question in questions:
        if question.id in seen:
            raise InvalidQuestionData(f"Duplicate question id: {question.id}")
        seen.add(question.id)
    return questions


def parse_config(payload: dict[str, Any] | None) -> QuizConfig:
    if not payload:
        return QuizConfig()
    if not isinstance(payload, dict):
        raise InvalidQuestionData("Config must be an object")

    difficulty = str(payload.get("difficulty") or "mixed").lower()
    if difficulty != "mixed":
        difficulty = parse_difficulty(difficulty).value

    raw_types = payload.get("questionTypes")
    question_types = (
        frozenset(parse_question_type(item) for item in raw_types)
        if raw_types
        else frozenset(QuestionType)
    )

    passing_score = payload.get("passingScore", 70)
    if isinstance(passing_score, bool) or not isinstance(passing_score, int):
        raise InvalidQuestionData("passingScore must be an integer")

    return QuizConfig(
        question_count=_parse_positive_int(payload.get("questionCount"), "questionCount"),
        time_limit_seconds=_parse_positive_int(
            payload.get("timeLimitSeconds") or None, "timeLimitSeconds"
        ),
        difficulty=difficulty,
        question_types=question_types,
        enable_adaptive=payload.get("enableAdaptive") is not False,
        passing_score=passing_score,
    )


def check_questions(questions: list[Question], config: QuizConfig) -> None:
    """Reject a question list that does not match what the config asked for."""
    if config.question_count is not None and len(questions) != config.question_count:
        raise InvalidQuestionData(
            f"questionCount is {config.question_count} but {len(questions)} questions were given"
        )
    for position, question in enumerate(questions, start=1):
        if question.type not in config.question_types:
            raise InvalidQuestionData(
                f"Question {position}: type {QuestionType(question.type).value} "
                "is not enabled in questionTypes"
            )


def load_quiz(
    questions: Iterable[dict[str, Any]],
    config: dict[str, Any] | None = None,
) -> tuple[list[Question], QuizConfig]:
    """Parse a generator payload into questions and the config they run under."""
    parsed_config = parse_config(config)
    parsed_questions = parse_questions(questions, parsed_config.starting_difficulty)
    check_questions(parsed_questions, parsed_config)
    return parsed_questions, parsed_config


def serialize_question(question: Question, include_answer: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": question.id,
        "type": QuestionType(question.type).value,
        "prompt": question.prompt,
        "difficulty": Difficulty(question.difficulty).value,
        "timeLimitSeconds": question.time_limit_seconds,
    }
    if question.options:
        data["options"] = list(question.options)
    if include_answer:
        data["correctAnswer"] = question.correct_answer
        data["explanation"] = question.explanation
    return data


def serialize_performance_entry(entry: PerformanceEntry) -> dict[str, Any]:
    return {
        "questionIndex": entry.question_index,
        "difficultyAtAttempt": entry.difficulty_at_attempt.value,
        "correct": entry.correct,
        "responseTimeSeconds": entry.response_time_seconds,
    }


def serialize_state(snapshot: SessionSnapshot) -> dict[str, Any]:
    question = snapshot.current_question
    return {
        "sessionId": snapshot.session_id,
        "mode": snapshot.mode.value,
        "currentIndex": snapshot.current_index,
        "totalQuestions": snapshot.total_questions,
        "elapsedSeconds": snapshot.elapsed_seconds,
        "remainingSeconds": snapshot.remaining_seconds,
        "answered": list(snapshot.answered),
        "flagged": list(snapshot.flagged),
        "question": (
            serialize_question(
                question, include_answer=snapshot.mode is SessionMode.REVIEWING
            )
            if question is not None
            else None
        ),
    }


def serialize_result(result: Result) -> dict[str, Any]:
    return {
        "score": result.score,
        "correctAnswers": result.correct_answers,
        "totalQuestions": result.total_questions,
        "timeTakenSeconds": result.time_taken_seconds,
        "timeTaken": format_time(result.time_taken_seconds),
        "averageDifficulty": result.average_difficulty.value,
        "certificationEligible": result.certification_eligible,
        "passed": result.passed,
        "feedback": performance_feedback(result.score),
        "performanceLog": [
            serialize_performance_entry(entry) for entry in result.performance_log
        ],
        "answers": list(result.answers),
    }


def serialize_certificate_claim(result: Result) -> dict[str, Any]:
    claim = result.certificate_claim()
    return {"eligible": claim.eligible, "percentage": claim.percentage}


def serialize_review_item(item: ReviewItem) -> dict[str, Any]:
    return {
        "index": item.index,
        "question": serialize_question(item.question, include_answer=True),
        "answer": item.answer,
        "isCorrect": item.correct,
        "flagged": item.flagged,
        "flagReason": item.flag_reason,
    }


def serialize_analytics(analytics: Analytics) -> dict[str, Any]:
    return {
        "questionTypes": analytics.question_types,
        "questionTypesCorrect": analytics.question_types_correct,
        "difficultyBreakdown": analytics.difficulty_breakdown,
        "difficultyCorrect": analytics.difficulty_correct,
        "suggestions": analytics.suggestions,
    }
