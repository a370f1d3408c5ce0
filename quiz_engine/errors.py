"""Errors raised by the quiz engine."""


class QuizError(Exception):
    """Base class for recoverable session errors."""


class InvalidIndex(QuizError):
    """Question index outside the session, or not reachable in this mode."""

    def __init__(self, index: int, message: str | None = None):
        self.index = index
        super().__init__(message or f"Invalid question index: {index}")


class AnswerRequired(QuizError):
    """Advancing past an unanswered question outside of a timeout."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Question {index + 1} must be answered before advancing")


class InvalidTransition(QuizError):
    """Operation not allowed in the session's current mode."""

    def __init__(self, operation: str, mode: str):
        self.operation = operation
        self.mode = mode
        super().__init__(f"Cannot {operation} while session is {mode}")


class QuestionExpired(QuizError):
    """An answer arrived for a question the session has already left."""

    def __init__(self, index: int, current_index: int):
        self.index = index
        self.current_index = current_index
        super().__init__(
            f"Time's up for question {index + 1}; now on question {current_index + 1}"
        )


class InvalidQuestionData(ValueError):
    """Malformed question or config payload from the generator."""
