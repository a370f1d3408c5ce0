"""Database models."""
from api.models.db.result import QuizResultRecord

__all__ = ["QuizResultRecord"]
