"""Shared session store and result writer for FastAPI routes."""
from api.services.result_service import ResultWriter
from api.services.session_service import SessionStore

result_writer = ResultWriter()
session_store = SessionStore(result_sink=result_writer)


def get_session_store() -> SessionStore:
    """Dependency to get the live session store."""
    return session_store
