"""Main FastAPI application with modularized routes."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import LOG_LEVEL
from api.database import init_db
from api.dependencies.sessions import result_writer, session_store
from api.routes import results, sessions
from api.services.ticker_service import schedule_session_ticker
from quiz_engine.logging_setup import setup_console_logging

setup_console_logging(LOG_LEVEL)

app = FastAPI(title="Adaptive Quiz API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Initialize database and start the session ticker on startup."""
    init_db()
    app.state.ticker_stop = schedule_session_ticker(session_store)


@app.on_event("shutdown")
def shutdown_events() -> None:
    """Stop timers and flush pending result writes."""
    stop = getattr(app.state, "ticker_stop", None)
    if stop is not None:
        stop.set()
    session_store.clear()
    result_writer.drain(timeout=5)
    result_writer.shutdown()


@app.get("/api/health")
def health() -> dict[str, object]:
    return {"status": "ok", "liveSessions": len(session_store)}


# Include routers
app.include_router(sessions.router)
app.include_router(results.router)
