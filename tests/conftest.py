import os
import tempfile

# Keep the API's SQLite file out of the working tree.
os.environ.setdefault("DB_DIR", tempfile.mkdtemp(prefix="quiz_engine_tests_"))

import pytest

from quiz_engine.models import Difficulty, Question, QuestionType


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def build_question(
    index: int,
    difficulty: Difficulty = Difficulty.MEDIUM,
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE,
) -> Question:
    if question_type is QuestionType.TRUE_FALSE:
        options, correct = ("True", "False"), "True"
    elif question_type is QuestionType.MULTIPLE_CHOICE:
        options, correct = ("A", "B", "C", "D"), "A"
    else:
        options, correct = (), f"answer {index}"
    return Question(
        id=index + 1,
        type=question_type,
        prompt=f"Question {index + 1}?",
        options=options,
        correct_answer=correct,
        explanation=f"Because of rule {index + 1}",
        difficulty=difficulty,
    )


@pytest.fixture
def make_questions():
    def factory(count: int, **kwargs) -> list[Question]:
        return [build_question(index, **kwargs) for index in range(count)]

    return factory
