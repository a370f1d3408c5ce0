"""
QuizResultRecord database model for completed quiz sessions.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from api.database import Base


def _load_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return default


class QuizResultRecord(Base):
    """
    Graded result of one quiz session.
    Stores the score summary plus snapshots of the answers and performance log.
    """

    __tablename__ = "quiz_results"

    # Primary key - session id issued by the API
    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)

    # Results
    score: Mapped[int] = mapped_column(default=0, nullable=False)
    correct_answers: Mapped[int] = mapped_column(default=0, nullable=False)
    total_questions: Mapped[int] = mapped_column(default=0, nullable=False)
    time_taken_seconds: Mapped[int] = mapped_column(default=0, nullable=False)
    average_difficulty: Mapped[str] = mapped_column(String(16), nullable=False)
    certification_eligible: Mapped[bool] = mapped_column(default=False, nullable=False)
    passed: Mapped[bool] = mapped_column(default=False, nullable=False)

    completed_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Snapshots (stored as JSON strings)
    answers_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    flags_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    performance_log_json: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def answers(self) -> list[str | None]:
        """Parse answers from JSON."""
        return _load_json(self.answers_json, [])

    @answers.setter
    def answers(self, value: list[str | None]) -> None:
        """Serialize answers to JSON."""
        self.answers_json = json.dumps(value)

    @property
    def flags(self) -> list[int]:
        return _load_json(self.flags_json, [])

    @flags.setter
    def flags(self, value: list[int]) -> None:
        self.flags_json = json.dumps(value) if value else None

    @property
    def performance_log(self) -> list[dict[str, Any]]:
        """Parse performance log from JSON."""
        return _load_json(self.performance_log_json, [])

    @performance_log.setter
    def performance_log(self, value: list[dict[str, Any]]) -> None:
        """Serialize performance log to JSON."""
        self.performance_log_json = json.dumps(value) if value else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.id,
            "score": self.score,
            "correctAnswers": self.correct_answers,
            "totalQuestions": self.total_questions,
            "timeTakenSeconds": self.time_taken_seconds,
            "averageDifficulty": self.average_difficulty,
            "certificationEligible": self.certification_eligible,
            "passed": self.passed,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "answers": self.answers,
            "flags": self.flags,
            "performanceLog": self.performance_log,
        }
