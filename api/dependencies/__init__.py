"""FastAPI dependencies."""
from api.dependencies.sessions import get_session_store, result_writer, session_store

__all__ = ["get_session_store", "result_writer", "session_store"]
