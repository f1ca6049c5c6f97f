from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .clock import Clock, now_ms
from .conversion import CustomDuration, duration_from_elapsed_millis

logger = logging.getLogger(__name__)


class StopwatchState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class StopwatchSnapshot:
    """View model for the UI (pure data)."""

    state: StopwatchState
    elapsed: CustomDuration
    laps: tuple[CustomDuration, ...]


class Stopwatch:
    """Elapsed-time counter expressed in custom units.

    - Time is entirely via injected Clock.
    - While running, elapsed = now - epoch; the epoch is rebuilt on every
      start so paused intervals are excluded exactly.
    """

    def __init__(self, *, clock: Clock) -> None:
        self._clock = clock
        self._state = StopwatchState.STOPPED
        self._accumulated_ms = 0.0
        self._epoch_ms: float | None = None
        self._laps: list[CustomDuration] = []

    @property
    def state(self) -> StopwatchState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is StopwatchState.RUNNING

    @property
    def laps(self) -> tuple[CustomDuration, ...]:
        return tuple(self._laps)

    def start(self) -> None:
        if self._state is StopwatchState.RUNNING:
            return
        self._epoch_ms = now_ms(self._clock) - self._accumulated_ms
        self._state = StopwatchState.RUNNING
        logger.debug(f"Stopwatch running from {self._accumulated_ms:.1f} ms")

    def pause(self) -> None:
        if self._state is not StopwatchState.RUNNING:
            return
        assert self._epoch_ms is not None
        self._accumulated_ms = max(0.0, now_ms(self._clock) - self._epoch_ms)
        self._epoch_ms = None
        self._state = StopwatchState.STOPPED
        logger.debug(f"Stopwatch paused at {self._accumulated_ms:.1f} ms")

    def toggle(self) -> None:
        if self.is_running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        self._state = StopwatchState.STOPPED
        self._accumulated_ms = 0.0
        self._epoch_ms = None
        self._laps.clear()

    def lap(self) -> CustomDuration | None:
        """Record the current split. Only meaningful while running."""

        if not self.is_running:
            return None
        split = self.elapsed()
        self._laps.append(split)
        return split

    def elapsed_ms(self) -> float:
        if self._state is StopwatchState.RUNNING:
            assert self._epoch_ms is not None
            return max(0.0, now_ms(self._clock) - self._epoch_ms)
        return self._accumulated_ms

    def elapsed(self) -> CustomDuration:
        return duration_from_elapsed_millis(self.elapsed_ms())

    def snapshot(self) -> StopwatchSnapshot:
        return StopwatchSnapshot(state=self._state, elapsed=self.elapsed(), laps=self.laps)
