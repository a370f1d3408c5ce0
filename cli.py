import argparse
import json
from pathlib import Path
from typing import Callable

from quiz_engine.errors import InvalidQuestionData, QuizError
from quiz_engine.logging_setup import setup_console_logging
from quiz_engine.models import SessionMode
from quiz_engine.scoring import calculate_analytics, format_time, performance_feedback
from quiz_engine.serialization import load_quiz
from quiz_engine.session import QuizSession

HELP = (
    "Type an answer (or an option number) and press Enter.\n"
    "Commands: :next  :prev  :jump N  :flag [reason]  :unflag  :submit  :quit"
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Take an adaptive quiz in the terminal")
    parser.add_argument("file", type=Path, help="Quiz JSON with questions and optional config")
    parser.add_argument(
        "--no-adaptive",
        action="store_true",
        help="Keep question difficulties fixed",
    )
    parser.add_argument(
        "--review",
        action="store_true",
        help="Walk through explanations after submitting",
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args()


def load_session(path: Path, adaptive: bool = True) -> QuizSession:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        payload = {"questions": payload}
    questions, config = load_quiz(payload.get("questions", []), payload.get("config"))
    if not adaptive:
        config.enable_adaptive = False
    return QuizSession(questions, config=config)


def _render_question(session: QuizSession, write: Callable[[str], None]) -> None:
    question = session.current_question
    if question is None:
        return
    number = session.current_index + 1
    flag = " [flagged]" if session.is_flagged(session.current_index) else ""
    header = f"\nQuestion {number}/{session.total_questions} ({question.difficulty.value}){flag}"
    if session.mode is SessionMode.ACTIVE:
        header += f"  {session.remaining_seconds}s left, elapsed {format_time(session.elapsed_seconds)}"
    write(header)
    write(question.prompt)
    for index, option in enumerate(question.options, start=1):
        write(f"  {index}. {option}")
    answer = session.answers[session.current_index]
    if answer is not None:
        write(f"Your answer: {answer}")
    if session.mode is SessionMode.REVIEWING:
        write(f"Correct answer: {question.correct_answer}")
        if question.explanation:
            write(f"Explanation: {question.explanation}")


def _resolve_answer(session: QuizSession, text: str) -> str:
    question = session.current_question
    if question is not None and question.options and text.isdigit():
        choice = int(text) - 1
        if 0 <= choice < len(question.options):
            return question.options[choice]
    return text


def run_command(session: QuizSession, line: str, expected_index: int | None = None) -> bool:
    """Apply one line of input. Returns False when the user quits."""
    text = line.strip()
    if not text:
        return True
    if not text.startswith(":"):
        session.answer(_resolve_answer(session, text), expected_index=expected_index)
        return True

    command, _, argument = text[1:].partition(" ")
    if command == "quit":
        return False
    if command == "next":
        session.next()
    elif command == "prev":
        session.previous()
    elif command == "jump":
        session.jump(int(argument) - 1)
    elif command == "flag":
        session.flag(session.current_index, argument or None)
    elif command == "unflag":
        session.unflag(session.current_index)
    elif command == "submit":
        session.submit()
    else:
        raise ValueError(f"Unknown command: {command}")
    return True


def play(
    session: QuizSession,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    review: bool = False,
) -> None:
    write(HELP)
    while session.mode is SessionMode.ACTIVE:
        _render_question(session, write)
        shown = session.current_index
        line = read("> ")
        session.tick()
        if session.mode is not SessionMode.ACTIVE or session.current_index != shown:
            write(f"Time's up for question {shown + 1}; input ignored.")
            continue
        try:
            if not run_command(session, line, expected_index=shown):
                session.dispose()
                write("Quiz abandoned.")
                return
        except (QuizError, ValueError) as e:
            write(str(e))

    result = session.submit()
    write(f"\nScore: {result.correct_answers}/{result.total_questions} ({result.score}%)")
    write(f"Time: {format_time(result.time_taken_seconds)}  Difficulty: {result.average_difficulty.value}")
    write(performance_feedback(result.score))
    if result.certification_eligible:
        write("You are eligible for a certificate.")
    for suggestion in calculate_analytics(session.questions, session.answers, result).suggestions:
        write(f"- {suggestion}")

    if review and session.total_questions:
        session.start_review()
        while session.mode is SessionMode.REVIEWING:
            _render_question(session, write)
            read("(Enter for next) ")
            session.next()


def main() -> None:
    args = parse_args()
    setup_console_logging(args.log_level)
    try:
        session = load_session(args.file, adaptive=not args.no_adaptive)
    except (OSError, json.JSONDecodeError, InvalidQuestionData) as e:
        raise SystemExit(f"Cannot load quiz: {e}")
    play(session, review=args.review)


if __name__ == "__main__":
    main()
