from __future__ import annotations

import time
from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Controllers depend on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class WallClock(Protocol):
    """Local wall-clock source used for the time-of-day display."""

    def wall_now(self) -> datetime:
        """Return the current local wall time."""


class RealClock:
    """Production clock backed by time.monotonic() and datetime.now()."""

    def now(self) -> float:
        return time.monotonic()

    def wall_now(self) -> datetime:
        return datetime.now()


class FakeClock:
    """Controllable clock for deterministic testing.

    Monotonic time starts at zero and the wall clock at ``start_wall``; both
    move together and only when :meth:`advance` or :meth:`advance_ms` is
    called.
    """

    def __init__(self, start_wall: datetime | None = None) -> None:
        self._start_wall = start_wall if start_wall is not None else datetime(2000, 1, 1)
        self._now_ms = 0.0

    def now(self) -> float:
        return self._now_ms / 1000.0

    def wall_now(self) -> datetime:
        return self._start_wall + timedelta(milliseconds=self._now_ms)

    def advance(self, seconds: float) -> None:
        self.advance_ms(float(seconds) * 1000.0)

    def advance_ms(self, ms: float) -> None:
        if ms < 0:
            raise ValueError("Cannot advance clock backwards")
        self._now_ms += float(ms)


def now_ms(clock: Clock) -> float:
    return clock.now() * 1000.0
