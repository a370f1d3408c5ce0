import random

import pytest

from quiz_engine.errors import (
    AnswerRequired,
    InvalidIndex,
    InvalidQuestionData,
    InvalidTransition,
    QuestionExpired,
    QuizError,
)
from quiz_engine.models import Difficulty, Question, QuestionType, QuizConfig, SessionMode
from quiz_engine.session import QuizSession


def answer_and_next(session: QuizSession, value: str):
    session.answer(value)
    return session.next()


def test_new_session_starts_active(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)

    assert session.mode is SessionMode.ACTIVE
    assert session.current_index == 0
    assert session.answers == (None, None, None)
    assert session.remaining_seconds == 45
    assert session.elapsed_seconds == 0


def test_next_requires_an_answer(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)

    with pytest.raises(AnswerRequired):
        session.next()

    assert session.current_index == 0
    assert session.performance_log == ()


def test_answer_then_next_finalizes_once(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)
    session.answer("B")
    session.answer("A")
    clock.advance(7)
    session.next()

    assert session.current_index == 1
    assert session.answers[0] == "A"
    [entry] = session.performance_log
    assert entry.question_index == 0
    assert entry.correct
    assert entry.response_time_seconds == 7

    session.previous()
    assert session.current_index == 0
    session.answer("C")
    session.next()

    assert session.current_index == 1
    assert len(session.performance_log) == 1
    assert session.answers[0] == "C"


def test_previous_at_first_question_is_noop(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    session.previous()
    assert session.current_index == 0
    assert session.performance_log == ()


def test_next_on_last_question_submits(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    answer_and_next(session, "A")

    with pytest.raises(AnswerRequired):
        session.next()
    assert session.current_index == 1

    session.answer("A")
    result = session.next()

    assert result is not None
    assert session.mode is SessionMode.COMPLETED
    assert result.correct_answers == 2
    assert result.score == 100
    assert session.result is result


def test_all_correct_scores_full_marks(make_questions, clock) -> None:
    session = QuizSession(make_questions(5), clock=clock)
    for _ in range(4):
        answer_and_next(session, "A")
    session.answer("A")
    result = session.submit()

    assert result.correct_answers == 5
    assert result.score == 100
    assert result.certification_eligible


def test_seven_correct_of_ten(make_questions, clock) -> None:
    session = QuizSession(make_questions(10), clock=clock)
    for index in range(10):
        session.answer("A" if index < 7 else "B")
        session.next()

    result = session.result
    assert session.mode is SessionMode.COMPLETED
    assert result.correct_answers == 7
    assert result.score == 70
    assert result.certification_eligible


def test_submit_is_idempotent(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)
    session.answer("A")
    clock.advance(5)
    first = session.submit()
    clock.advance(100)
    second = session.submit()

    assert first is second
    assert first.time_taken_seconds == 5
    assert session.elapsed_seconds == 5
    assert len(session.performance_log) == 1


def test_empty_session_submits_to_zero(clock) -> None:
    session = QuizSession([], clock=clock)
    assert session.current_question is None
    assert session.remaining_seconds is None

    result = session.submit()

    assert result.score == 0
    assert not result.certification_eligible
    assert session.mode is SessionMode.COMPLETED


def test_empty_session_next_submits(clock) -> None:
    session = QuizSession([], clock=clock)
    result = session.next()
    assert result is not None
    assert result.total_questions == 0
    with pytest.raises(InvalidIndex):
        session.record_answer(0, "A")


def test_question_timeout_auto_advances(make_questions, clock) -> None:
    session = QuizSession(make_questions(5), clock=clock)
    answer_and_next(session, "A")
    answer_and_next(session, "A")
    assert session.current_index == 2

    clock.advance(45)
    session.tick()

    assert session.current_index == 3
    assert session.answers[2] is None
    entry = session.performance_log[2]
    assert entry.question_index == 2
    assert not entry.correct
    assert entry.response_time_seconds == 45
    assert session.remaining_seconds == 45


def test_timeout_advances_even_when_answered(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    session.answer("A")
    clock.advance(50)
    session.tick()

    assert session.current_index == 1
    assert session.performance_log[0].correct


def test_timeout_on_last_question_submits(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    answer_and_next(session, "A")
    clock.advance(45)
    session.tick()

    assert session.mode is SessionMode.COMPLETED
    assert session.result.correct_answers == 1
    assert session.answers == ("A", None)


def test_operation_after_timeout_sees_new_question(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)
    clock.advance(46)
    session.answer("A")

    assert session.answers == (None, "A", None)


def test_answer_for_expired_question_is_rejected(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)
    clock.advance(46)

    with pytest.raises(QuestionExpired) as excinfo:
        session.answer("A", expected_index=0)

    assert excinfo.value.current_index == 1
    assert session.answers == (None, None, None)
    session.answer("B", expected_index=1)
    assert session.answers == (None, "B", None)


def test_answer_after_time_limit_with_expected_index(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), config=QuizConfig(time_limit_seconds=30), clock=clock)
    clock.advance(31)

    with pytest.raises(QuestionExpired):
        session.answer("A", expected_index=0)
    assert session.mode is SessionMode.COMPLETED


def test_suspension_times_out_each_question_in_turn(make_questions, clock) -> None:
    session = QuizSession(make_questions(3, question_type=QuestionType.TRUE_FALSE), clock=clock)
    clock.advance(100)
    session.tick()

    assert session.mode is SessionMode.COMPLETED
    assert [e.question_index for e in session.performance_log] == [0, 1, 2]
    assert [e.response_time_seconds for e in session.performance_log] == [30, 30, 30]
    assert session.result.time_taken_seconds == 90


def test_session_time_limit_submits(make_questions, clock) -> None:
    config = QuizConfig(time_limit_seconds=60)
    session = QuizSession(make_questions(3), config=config, clock=clock)
    session.answer("A")
    clock.advance(61)
    session.tick()

    assert session.mode is SessionMode.COMPLETED
    assert session.current_index == 1
    assert session.result.time_taken_seconds == 60
    assert [e.question_index for e in session.performance_log] == [0, 1]
    with pytest.raises(InvalidTransition):
        session.answer("A")


def test_adaptive_difficulty_sequence(clock, make_questions) -> None:
    questions = make_questions(4)
    for question, level in zip(questions, ["easy", "easy", "medium", "hard"]):
        question.difficulty = Difficulty(level)
    session = QuizSession(questions, clock=clock)

    for correct in [True, False, True, True]:
        session.answer("A" if correct else "B")
        session.next()

    assert [q.difficulty for q in questions] == [
        Difficulty.EASY,
        Difficulty.MEDIUM,
        Difficulty.EASY,
        Difficulty.MEDIUM,
    ]
    assert [e.difficulty_at_attempt for e in session.performance_log] == [
        Difficulty.EASY,
        Difficulty.MEDIUM,
        Difficulty.EASY,
        Difficulty.MEDIUM,
    ]


def test_adaptation_disabled_keeps_difficulties(make_questions, clock) -> None:
    questions = make_questions(3, difficulty=Difficulty.EASY)
    session = QuizSession(questions, config=QuizConfig(enable_adaptive=False), clock=clock)
    answer_and_next(session, "A")
    answer_and_next(session, "A")

    assert [q.difficulty for q in questions] == [Difficulty.EASY] * 3


def test_revisited_question_does_not_readapt(make_questions, clock) -> None:
    questions = make_questions(3)
    session = QuizSession(questions, clock=clock)
    answer_and_next(session, "A")
    assert questions[1].difficulty is Difficulty.HARD

    session.previous()
    session.answer("B")
    session.next()

    assert questions[1].difficulty is Difficulty.HARD
    assert session.performance_log[0].correct


def test_failed_operations_leave_state_unchanged(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)
    session.answer("A")
    before = (session.answers, session.current_index, session.flags, session.performance_log)

    with pytest.raises(InvalidIndex):
        session.record_answer(3, "A")
    with pytest.raises(InvalidIndex):
        session.record_answer(-1, "A")
    with pytest.raises(InvalidIndex):
        session.flag(7)
    with pytest.raises(InvalidIndex):
        session.jump(2)
    with pytest.raises(InvalidTransition):
        session.start_review()

    assert (session.answers, session.current_index, session.flags, session.performance_log) == before


def test_completed_session_is_frozen(make_questions, clock) -> None:
    questions = make_questions(2)
    session = QuizSession(questions, clock=clock)
    session.flag(0, "unclear")
    session.submit()

    with pytest.raises(InvalidTransition):
        session.answer("A")
    with pytest.raises(InvalidIndex):
        session.record_answer(0, "A")
    with pytest.raises(InvalidTransition):
        session.previous()
    with pytest.raises(InvalidTransition):
        session.flag(1)
    with pytest.raises(InvalidTransition):
        session.next()

    assert session.answers == (None, None)
    assert session.flags == frozenset({0})


def test_flags_and_reasons(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)
    session.flag(1, "typo in prompt")
    assert session.flags == frozenset({1})
    assert session.flag_reasons == {1: "typo in prompt"}

    assert session.toggle_flag(2) is True
    assert session.toggle_flag(1) is False
    assert session.flags == frozenset({2})
    assert session.flag_reasons == {}

    session.unflag(2)
    assert session.flags == frozenset()


def test_jump_only_to_reached_questions(make_questions, clock) -> None:
    session = QuizSession(make_questions(4), clock=clock)
    answer_and_next(session, "A")
    answer_and_next(session, "A")

    session.jump(0)
    assert session.current_index == 0
    session.jump(2)
    assert session.current_index == 2
    with pytest.raises(InvalidIndex):
        session.jump(3)
    assert len(session.performance_log) == 2


def test_review_walks_completed_session(make_questions, clock) -> None:
    session = QuizSession(make_questions(3), clock=clock)
    session.flag(2, "check later")
    answer_and_next(session, "A")
    answer_and_next(session, "B")
    result = session.submit()

    session.start_review()
    assert session.mode is SessionMode.REVIEWING
    assert session.current_index == 0
    assert session.remaining_seconds is None

    session.previous()
    assert session.current_index == 0

    session.flag(0, "review note")
    assert session.flags == frozenset({2})
    assert session.review_flags == frozenset({0})

    items = session.review_items()
    assert [item.correct for item in items] == [True, False, False]
    assert [item.flagged for item in items] == [True, False, True]
    assert items[2].flag_reason == "check later"
    assert items[0].question.explanation == "Because of rule 1"

    session.next()
    session.next()
    assert session.current_index == 2
    session.next()
    assert session.mode is SessionMode.COMPLETED
    assert session.submit() is result
    assert session.answers == ("A", "B", None)


def test_review_requires_completion(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    with pytest.raises(InvalidTransition):
        session.review_items()


def test_result_sink_receives_result_once(make_questions, clock) -> None:
    received = []
    session = QuizSession(
        make_questions(2),
        clock=clock,
        result_sink=lambda s, r: received.append((s.session_id, r)),
    )
    session.answer("A")
    result = session.submit()
    session.submit()

    assert received == [(session.session_id, result)]


def test_result_sink_failure_keeps_result(make_questions, clock, caplog) -> None:
    def broken_sink(session, result):
        raise RuntimeError("database down")

    session = QuizSession(make_questions(1), clock=clock, result_sink=broken_sink)
    session.answer("A")
    result = session.submit()

    assert result.score == 100
    assert session.result is result
    assert "result sink failed" in caplog.text


def test_disposed_session_ignores_ticks(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    session.dispose()
    clock.advance(500)
    session.tick()

    assert session.mode is SessionMode.ACTIVE
    assert session.current_index == 0
    with pytest.raises(InvalidTransition):
        session.submit()


def test_compute_result_does_not_complete(make_questions, clock) -> None:
    session = QuizSession(make_questions(2), clock=clock)
    session.answer("A")

    first = session.compute_result()
    second = session.compute_result()

    assert first == second
    assert first.correct_answers == 1
    assert session.mode is SessionMode.ACTIVE
    assert session.result is None


def test_answers_stay_aligned_under_random_operations(make_questions, clock) -> None:
    rng = random.Random(20240501)
    for _ in range(25):
        count = rng.randint(1, 6)
        session = QuizSession(make_questions(count), clock=clock)
        for _ in range(40):
            operation = rng.choice(["answer", "next", "previous", "flag", "jump", "tick", "submit"])
            try:
                if operation == "answer":
                    session.answer(rng.choice(["A", "B"]))
                elif operation == "next":
                    session.next()
                elif operation == "previous":
                    session.previous()
                elif operation == "flag":
                    session.toggle_flag(rng.randrange(count))
                elif operation == "jump":
                    session.jump(rng.randrange(count))
                elif operation == "tick":
                    clock.advance(rng.choice([1, 20, 50]))
                    session.tick()
                else:
                    session.submit()
            except QuizError:
                pass
            assert len(session.answers) == count
            indices = [e.question_index for e in session.performance_log]
            assert len(indices) == len(set(indices))


@pytest.mark.parametrize("limit", [0, -5, 1.5, True])
def test_question_rejects_invalid_time_limit(limit) -> None:
    with pytest.raises(InvalidQuestionData):
        Question(
            id=1,
            type=QuestionType.FILL_BLANK,
            prompt="Capital of France?",
            correct_answer="Paris",
            time_limit_seconds=limit,
        )


def test_question_keeps_explicit_time_limit() -> None:
    question = Question(
        id=1, type=QuestionType.SHORT_ANSWER, prompt="Explain", correct_answer="x", time_limit_seconds=5
    )
    assert question.time_limit_seconds == 5
