"""
Session and question clocks.

Both clocks keep timestamps instead of counting ticks, so elapsed and
remaining time stay correct when the process is suspended or a tick is
late. Time comes from an injectable ``clock`` callable returning seconds.
"""
from __future__ import annotations

import math
import time
from typing import Callable

Clock = Callable[[], float]


class SessionClock:
    """Counts whole seconds since the session started. Stops once."""

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._started_at: float | None = None
        self._stopped_at: float | None = None

    @property
    def running(self) -> bool:
        return self._started_at is not None and self._stopped_at is None

    @property
    def started_at(self) -> float | None:
        return self._started_at

    def start(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def stop(self, at: float | None = None) -> None:
        """Freeze the clock at ``at`` (default now). Later calls do nothing."""
        if self._started_at is None or self._stopped_at is not None:
            return
        self._stopped_at = self._clock() if at is None else at

    def elapsed_seconds(self) -> int:
        if self._started_at is None:
            return 0
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return max(0, int(end - self._started_at))


class QuestionClock:
    """Countdown for the question currently on screen."""

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._deadline: float | None = None

    @property
    def active(self) -> bool:
        return self._deadline is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def reset(self, limit_seconds: int, start: float | None = None) -> None:
        """Restart the countdown; ``start`` defaults to now."""
        origin = self._clock() if start is None else start
        self._deadline = origin + limit_seconds

    def stop(self) -> None:
        self._deadline = None

    def remaining_seconds(self) -> int | None:
        if self._deadline is None:
            return None
        return max(0, math.ceil(self._deadline - self._clock()))

    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline
