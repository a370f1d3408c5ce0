"""Background ticker that drives session timers."""
import logging
import threading

from api.config import SESSION_IDLE_TTL_SECONDS, TICK_INTERVAL_SECONDS
from api.services.session_service import SessionStore

logger = logging.getLogger(__name__)

# Idle sessions are checked once a minute
EVICT_EVERY_TICKS = 60


def schedule_session_ticker(store: SessionStore) -> threading.Event:
    """
    Tick every live session once per interval until the returned event is set.
    Question timeouts and session time limits fire from this thread.
    """
    stop = threading.Event()
    interval = max(1, TICK_INTERVAL_SECONDS)

    def _worker() -> None:
        ticks = 0
        while not stop.wait(interval):
            try:
                store.tick_all()
                ticks += 1
                if ticks % EVICT_EVERY_TICKS == 0:
                    store.evict_idle(SESSION_IDLE_TTL_SECONDS)
            except Exception:
                logger.exception("Session ticker iteration failed")

    thread = threading.Thread(
        target=_worker,
        name="session_ticker",
        daemon=True,
    )
    thread.start()
    return stop
