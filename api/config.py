"""Application configuration and constants."""
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DB_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DB_DIR / 'quizzes.db'}"
)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Session timers
TICK_INTERVAL_SECONDS = _parse_int_env("TICK_INTERVAL_SECONDS", 1)
SESSION_IDLE_TTL_SECONDS = _parse_int_env("SESSION_IDLE_TTL_SECONDS", 6 * 60 * 60)
MAX_QUESTIONS_PER_SESSION = _parse_int_env("MAX_QUESTIONS_PER_SESSION", 200)
