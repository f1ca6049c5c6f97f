"""Self-correcting update scheduling aligned to custom-second boundaries.

A fixed repeating timer at 864 ms drifts because the host's timer primitive
never fires exactly on period.  ``DriftFreeScheduler`` instead recomputes the
wait from the wall clock on every firing, so the error is bounded by a single
scheduling cycle no matter how long the clock runs.

The scheduler only needs a host offering ``call_later(delay_s, callback)``
returning a handle with ``cancel()``.  An ``asyncio`` event loop satisfies
this directly; ``FrameTimerHost`` provides the same contract for a frame loop
(pygame) that polls once per frame.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Protocol

from .clock import Clock, WallClock
from .conversion import REAL_MS_PER_CUSTOM_SECOND, CustomInstant, instant_from_real_time

logger = logging.getLogger(__name__)

DEFAULT_LEAD_MS = 50.0
DEFAULT_MIN_DELAY_MS = 10.0
_BOUNDARY_EPSILON_MS = 1e-6


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class TimerHost(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


@dataclass(order=True)
class _PendingCall:
    deadline: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class FrameTimerHandle:
    def __init__(self, entry: _PendingCall) -> None:
        self._entry = entry

    def cancel(self) -> None:
        self._entry.cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._entry.cancelled


class FrameTimerHost:
    """Delayed-callback host for frame-driven loops.

    Deadlines are measured on the injected monotonic ``Clock``.  Nothing runs
    until :meth:`poll` is called; a poll fires every due callback in deadline
    order.  Callbacks scheduled while polling wait for the next poll even if
    already due, so a zero delay can never spin inside one frame.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._heap: list[_PendingCall] = []
        self._seq = 0

    def call_later(self, delay: float, callback: Callable[[], None]) -> FrameTimerHandle:
        entry = _PendingCall(
            deadline=self._clock.now() + max(0.0, float(delay)),
            seq=self._seq,
            callback=callback,
        )
        self._seq += 1
        heapq.heappush(self._heap, entry)
        return FrameTimerHandle(entry)

    def poll(self) -> int:
        """Run due callbacks. Returns how many fired."""

        now = self._clock.now()
        limit = self._seq
        fired = 0
        deferred: list[_PendingCall] = []
        while self._heap and self._heap[0].deadline <= now:
            entry = heapq.heappop(self._heap)
            if entry.cancelled:
                continue
            if entry.seq >= limit:
                deferred.append(entry)
                continue
            entry.callback()
            fired += 1
        for entry in deferred:
            heapq.heappush(self._heap, entry)
        return fired

    def pending(self) -> int:
        return sum(1 for e in self._heap if not e.cancelled)

    def next_deadline(self) -> float | None:
        live = [e.deadline for e in self._heap if not e.cancelled]
        return min(live) if live else None


def next_delay_ms(
    instant: CustomInstant,
    *,
    lead_ms: float = DEFAULT_LEAD_MS,
    min_delay_ms: float = DEFAULT_MIN_DELAY_MS,
    skip_served: bool = True,
) -> float:
    """Real milliseconds to wait so the next firing lands ``lead_ms`` before a boundary.

    With ``skip_served`` (re-arming right after a firing), an ``instant``
    already inside the lead window of the upcoming boundary means that
    boundary was just served, so the following one is targeted instead.
    Without it (the first arm) the upcoming boundary is still owed and is
    targeted after at least ``min_delay_ms``.
    """

    fractional_part = instant.fractional_second - instant.second
    ms_until_next = (1.0 - fractional_part) * REAL_MS_PER_CUSTOM_SECOND
    # Float noise around the lead point counts as inside the window.
    if skip_served and ms_until_next <= lead_ms + _BOUNDARY_EPSILON_MS:
        ms_until_next += REAL_MS_PER_CUSTOM_SECOND
    return max(float(min_delay_ms), ms_until_next - lead_ms)


class SchedulerState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"


class DriftFreeScheduler:
    """Invokes a callback once per custom second, re-aligned on every firing.

    The callback receives the ``CustomInstant`` of the boundary being served
    (the wall clock sampled ``lead_ms`` ahead), so a firing that lands just
    before the boundary already shows the new second.

    Calling :meth:`start` while armed stops the previous schedule first.
    """

    def __init__(
        self,
        host: TimerHost,
        wall_clock: WallClock,
        *,
        lead_ms: float = DEFAULT_LEAD_MS,
        min_delay_ms: float = DEFAULT_MIN_DELAY_MS,
    ) -> None:
        if lead_ms < 0:
            raise ValueError("lead_ms must be >= 0")
        if min_delay_ms <= 0:
            raise ValueError("min_delay_ms must be > 0")
        self._host = host
        self._wall_clock = wall_clock
        self._lead_ms = float(lead_ms)
        self._min_delay_ms = float(min_delay_ms)

        self._state = SchedulerState.IDLE
        self._callback: Callable[[CustomInstant], None] | None = None
        self._handle: Cancellable | None = None
        self._generation = 0
        self._last_delay_ms: float | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_armed(self) -> bool:
        return self._state is SchedulerState.ARMED

    @property
    def last_delay_ms(self) -> float | None:
        return self._last_delay_ms

    def start(self, callback: Callable[[CustomInstant], None]) -> None:
        if self._state is SchedulerState.ARMED:
            self.stop()
        self._generation += 1
        self._callback = callback
        self._state = SchedulerState.ARMED
        logger.debug("Clock scheduler armed")
        self._arm(self._generation, after_firing=False)

    def stop(self) -> None:
        if self._state is SchedulerState.IDLE:
            return
        self._state = SchedulerState.IDLE
        self._generation += 1
        handle = self._handle
        self._handle = None
        self._callback = None
        if handle is not None:
            handle.cancel()
        logger.debug("Clock scheduler stopped")

    def _arm(self, generation: int, *, after_firing: bool = True) -> None:
        instant = instant_from_real_time(self._wall_clock.wall_now())
        delay_ms = next_delay_ms(
            instant,
            lead_ms=self._lead_ms,
            min_delay_ms=self._min_delay_ms,
            skip_served=after_firing,
        )
        self._last_delay_ms = delay_ms
        self._handle = self._host.call_later(delay_ms / 1000.0, lambda: self._fire(generation))

    def _fire(self, generation: int) -> None:
        if generation != self._generation or self._state is not SchedulerState.ARMED:
            return
        self._handle = None
        callback = self._callback
        sample = self._wall_clock.wall_now() + timedelta(milliseconds=self._lead_ms)
        instant = instant_from_real_time(sample)
        if callback is not None:
            try:
                callback(instant)
            except Exception:
                logger.exception("Clock update callback failed")
        # stop() or a restart inside the callback ends this schedule.
        if generation != self._generation or self._state is not SchedulerState.ARMED:
            return
        self._arm(generation)


class Ticker:
    """Fixed-interval refresh source for stopwatch and timer readouts.

    Each tick only triggers a redraw; the value shown is recomputed from the
    controller's real-time source, so interval jitter never accumulates.
    """

    def __init__(self, host: TimerHost, interval_ms: float, *, name: str = "ticker") -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be > 0")
        self._host = host
        self._interval_ms = float(interval_ms)
        self._name = name
        self._callback: Callable[[], None] | None = None
        self._handle: Cancellable | None = None
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        if self.is_running:
            self.stop()
        self._generation += 1
        self._callback = callback
        logger.debug(f"{self._name} started ({self._interval_ms:.0f} ms)")
        self._arm(self._generation)

    def stop(self) -> None:
        if not self.is_running:
            return
        self._generation += 1
        self._callback = None
        handle = self._handle
        self._handle = None
        if handle is not None:
            handle.cancel()
        logger.debug(f"{self._name} stopped")

    def _arm(self, generation: int) -> None:
        self._handle = self._host.call_later(self._interval_ms / 1000.0, lambda: self._fire(generation))

    def _fire(self, generation: int) -> None:
        if generation != self._generation or self._callback is None:
            return
        self._handle = None
        try:
            self._callback()
        except Exception:
            logger.exception(f"{self._name} callback failed")
        if generation != self._generation or self._callback is None:
            return
        self._arm(generation)
