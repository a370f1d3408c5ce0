"""Engine and session handling for the quiz results store."""
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from api.config import DATABASE_URL


def build_engine(url: str = DATABASE_URL) -> Engine:
    """
    Create the results engine.

    The result writer thread and request threads share SQLite connections,
    so SQLite runs with check_same_thread off, WAL journaling and a busy
    timeout.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    engine = create_engine(url, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _configure_sqlite(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    return engine


engine = build_engine()

# Records stay readable after the writer's session closes
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


def get_db() -> Iterator[Session]:
    """Request-scoped session for read routes."""
    with SessionLocal() as db:
        yield db


@contextmanager
def session_scope(factory: Callable[[], Session] = SessionLocal) -> Iterator[Session]:
    """Session that commits on success and rolls back if the block raises."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create the results table if it does not exist yet."""
    from api.models.db import QuizResultRecord  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
