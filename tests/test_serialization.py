import pytest

from quiz_engine.errors import InvalidQuestionData
from quiz_engine.models import Difficulty, QuestionType
from quiz_engine.serialization import (
    load_quiz,
    parse_config,
    parse_question,
    parse_questions,
    serialize_result,
    serialize_state,
)
from quiz_engine.session import QuizSession


def test_parse_generator_question_with_aliases() -> None:
    question = parse_question(
        {
            "id": "q-1",
            "type": "MCQ",
            "question": "2 + 2 = ?",
            "options": ["3", "4", "5"],
            "correctAnswer": "4",
            "explanation": "Basic addition",
            "difficulty": "Easy",
            "timeLimit": 20,
        },
        1,
    )

    assert question.id == "q-1"
    assert question.type is QuestionType.MULTIPLE_CHOICE
    assert question.prompt == "2 + 2 = ?"
    assert question.options == ("3", "4", "5")
    assert question.difficulty is Difficulty.EASY
    assert question.time_limit_seconds == 20


@pytest.mark.parametrize(
    ("question_type", "limit"),
    [("MultipleChoice", 45), ("TrueFalse", 30), ("FillBlank", 60), ("ShortAnswer", 90)],
)
def test_default_time_limit_by_type(question_type: str, limit: int) -> None:
    payload = {"type": question_type, "prompt": "Q", "correctAnswer": "True"}
    if question_type == "MultipleChoice":
        payload["options"] = ["True", "Other"]
    question = parse_question(payload, 1)
    assert question.time_limit_seconds == limit


def test_true_false_defaults_options_and_bool_answers() -> None:
    question = parse_question({"type": "TrueFalse", "prompt": "Sky is blue", "correctAnswer": True}, 1)
    assert question.options == ("True", "False")
    assert question.correct_answer == "True"


def test_open_questions_drop_options() -> None:
    question = parse_question(
        {"type": "FillBlank", "prompt": "___ is H2O", "options": ["x"], "correctAnswer": "Water"}, 1
    )
    assert question.options == ()
    assert question.difficulty is Difficulty.MEDIUM


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "MCQ", "prompt": "Q", "correctAnswer": "A"},
        {"type": "MCQ", "prompt": "Q", "options": ["A", "B"], "correctAnswer": "C"},
        {"type": "Essay", "prompt": "Q", "correctAnswer": "A"},
        {"type": "FillBlank", "prompt": "", "correctAnswer": "A"},
        {"type": "FillBlank", "prompt": "Q"},
        {"type": "FillBlank", "prompt": "Q", "correctAnswer": "A", "timeLimit": 0},
        {"type": "FillBlank", "prompt": "Q", "correctAnswer": "A", "difficulty": "extreme"},
        {"id": ["x"], "type": "FillBlank", "prompt": "Q", "correctAnswer": "A"},
        {"id": {"k": 1}, "type": "FillBlank", "prompt": "Q", "correctAnswer": "A"},
        {"id": True, "type": "FillBlank", "prompt": "Q", "correctAnswer": "A"},
    ],
)
def test_invalid_questions_are_rejected(payload: dict) -> None:
    with pytest.raises(InvalidQuestionData):
        parse_question(payload, 1)


def test_duplicate_ids_are_rejected() -> None:
    item = {"id": 1, "type": "FillBlank", "prompt": "Q", "correctAnswer": "A"}
    with pytest.raises(InvalidQuestionData):
        parse_questions([item, dict(item)])


def test_parse_config_defaults_and_overrides() -> None:
    default = parse_config(None)
    assert default.enable_adaptive
    assert default.passing_score == 70
    assert default.time_limit_seconds is None

    config = parse_config(
        {
            "questionCount": 5,
            "timeLimitSeconds": 600,
            "difficulty": "hard",
            "questionTypes": ["MCQ", "TrueFalse"],
            "enableAdaptive": False,
            "passingScore": 80,
        }
    )
    assert config.question_count == 5
    assert config.time_limit_seconds == 600
    assert config.difficulty == "hard"
    assert config.question_types == frozenset({QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE})
    assert not config.enable_adaptive
    assert config.passing_score == 80


def test_state_hides_answer_until_review(make_questions, clock) -> None:
    session = QuizSession(make_questions(1), clock=clock)
    state = serialize_state(session.state())
    assert state["mode"] == "active"
    assert state["remainingSeconds"] == 45
    assert "correctAnswer" not in state["question"]

    session.answer("A")
    session.submit()
    session.start_review()
    state = serialize_state(session.state())
    assert state["mode"] == "reviewing"
    assert state["remainingSeconds"] is None
    assert state["question"]["correctAnswer"] == "A"
    assert state["answered"] == [0]


def test_serialize_result(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    session.answer("A")
    clock.advance(65)
    session.submit()

    data = serialize_result(session.result)

    assert data["score"] == 50
    assert data["correctAnswers"] == 1
    assert data["timeTakenSeconds"] == 65
    assert data["timeTaken"] == "01:05"
    assert data["averageDifficulty"] == "medium"
    assert data["answers"] == ["A", None]
    assert data["performanceLog"][0] == {
        "questionIndex": 0,
        "difficultyAtAttempt": "medium",
        "correct": True,
        "responseTimeSeconds": 45,
    }


def test_load_quiz_uses_config_difficulty_as_default() -> None:
    questions, config = load_quiz(
        [
            {"type": "FillBlank", "prompt": "Q1", "correctAnswer": "A"},
            {"type": "FillBlank", "prompt": "Q2", "correctAnswer": "B", "difficulty": "easy"},
        ],
        {"difficulty": "hard", "questionCount": 2},
    )

    assert config.starting_difficulty is Difficulty.HARD
    assert [q.difficulty for q in questions] == [Difficulty.HARD, Difficulty.EASY]

    mixed, _ = load_quiz([{"type": "FillBlank", "prompt": "Q", "correctAnswer": "A"}])
    assert mixed[0].difficulty is Difficulty.MEDIUM


@pytest.mark.parametrize(
    "config",
    [
        {"questionCount": 3},
        {"questionTypes": ["MCQ", "TrueFalse"]},
    ],
)
def test_load_quiz_rejects_questions_outside_config(config: dict) -> None:
    items = [
        {"type": "FillBlank", "prompt": "Q1", "correctAnswer": "A"},
        {"type": "TrueFalse", "prompt": "Q2", "correctAnswer": "True"},
    ]
    with pytest.raises(InvalidQuestionData):
        load_quiz(items, config)
