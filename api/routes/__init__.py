"""API route modules."""
from api.routes import results, sessions

__all__ = ["results", "sessions"]
