from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .clock import Clock, now_ms
from .conversion import (
    ZERO_DURATION,
    CustomDuration,
    custom_to_real_millis,
    duration_from_elapsed_millis,
)

logger = logging.getLogger(__name__)


class CountdownState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class CountdownSnapshot:
    """View model for the UI (pure data)."""

    state: CountdownState
    remaining: CustomDuration
    paused: bool
    finished: bool


def sanitize_field(raw: object) -> int:
    """Coerce a user-entered field to a non-negative integer, 0 if unusable."""

    if isinstance(raw, bool) or raw is None:
        return 0
    if isinstance(raw, int):
        return raw if raw >= 0 else 0
    if isinstance(raw, str):
        text = raw.strip()
        if text.isdigit():
            return int(text)
    return 0


class CountdownTimer:
    """Countdown to a deadline entered in custom units.

    - Time is entirely via injected Clock.
    - Remaining time is always deadline - now; nothing is decremented per tick.
    - ``on_finished`` fires exactly once per run, at or after the deadline.
    """

    def __init__(self, *, clock: Clock, on_finished: Callable[[], None] | None = None) -> None:
        self._clock = clock
        self._on_finished = on_finished
        self._state = CountdownState.STOPPED
        self._deadline_ms: float | None = None
        self._paused_remaining_ms = 0.0
        self._finished = False

    @property
    def state(self) -> CountdownState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is CountdownState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self._state is CountdownState.STOPPED and self._paused_remaining_ms > 0.0

    @property
    def finished(self) -> bool:
        return self._finished

    def set_on_finished(self, callback: Callable[[], None] | None) -> None:
        self._on_finished = callback

    def start(self, hour: object = 0, minute: object = 0, second: object = 0) -> bool:
        """Arm the timer. Returns False (and stays stopped) for a zero target."""

        h = sanitize_field(hour)
        m = sanitize_field(minute)
        s = sanitize_field(second)
        real_ms = custom_to_real_millis(h, m, s)
        if real_ms <= 0.0:
            return False
        self._deadline_ms = now_ms(self._clock) + real_ms
        self._paused_remaining_ms = 0.0
        self._finished = False
        self._state = CountdownState.RUNNING
        logger.debug(f"Countdown started for {h}h {m}m {s}s ({real_ms:.0f} ms)")
        return True

    def pause(self) -> None:
        if self._state is not CountdownState.RUNNING:
            return
        assert self._deadline_ms is not None
        remaining = self._deadline_ms - now_ms(self._clock)
        if remaining <= 0.0:
            self._complete()
            return
        self._paused_remaining_ms = remaining
        self._deadline_ms = None
        self._state = CountdownState.STOPPED
        logger.debug(f"Countdown paused with {remaining:.1f} ms left")

    def resume(self) -> None:
        if self._state is CountdownState.RUNNING or self._paused_remaining_ms <= 0.0:
            return
        self._deadline_ms = now_ms(self._clock) + self._paused_remaining_ms
        self._paused_remaining_ms = 0.0
        self._state = CountdownState.RUNNING
        logger.debug("Countdown resumed")

    def reset(self) -> None:
        self._state = CountdownState.STOPPED
        self._deadline_ms = None
        self._paused_remaining_ms = 0.0
        self._finished = False

    def update(self) -> None:
        if self._state is not CountdownState.RUNNING:
            return
        if self.remaining_ms() <= 0.0:
            self._complete()

    def tick(self) -> CustomDuration:
        self.update()
        return self.remaining()

    def remaining_ms(self) -> float:
        if self._state is CountdownState.RUNNING:
            assert self._deadline_ms is not None
            return max(0.0, self._deadline_ms - now_ms(self._clock))
        return self._paused_remaining_ms

    def remaining(self) -> CustomDuration:
        ms = self.remaining_ms()
        if ms <= 0.0:
            return ZERO_DURATION
        return duration_from_elapsed_millis(ms)

    def snapshot(self) -> CountdownSnapshot:
        return CountdownSnapshot(
            state=self._state,
            remaining=self.remaining(),
            paused=self.is_paused,
            finished=self._finished,
        )

    def _complete(self) -> None:
        self._state = CountdownState.STOPPED
        self._deadline_ms = None
        self._paused_remaining_ms = 0.0
        self._finished = True
        logger.info("Countdown finished")
        if self._on_finished is None:
            return
        try:
            self._on_finished()
        except Exception:
            logger.exception("Countdown finished callback failed")
