"""Pure conversion between real time and the decimal time system.

A day is divided into 10 hours of 100 minutes of 100 seconds, so one custom
second lasts exactly 864 real milliseconds.  Everything in this module is a
pure function of its arguments: display state is always recomputed from the
authoritative real-time value and never derived from an earlier result.

The core concepts include:

* ``CustomInstant``: a time of day in custom units, with continuous
  fractional companions for smooth analog animation.
* ``CustomDuration``: an elapsed span in custom units with millisecond-style
  sub-second precision and no upper bound on hours.
* ``HandAngles``: rotation of the three analog hands in degrees.

Arithmetic divides real milliseconds by 864 rather than multiplying seconds
by ``SCALE``.  The relation is identical, but exact boundaries stay exact
(local noon, 43 200 000 ms, maps to exactly 50 000 custom seconds).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, time

from .errors import InvalidTimeArgumentError

REAL_SECONDS_PER_DAY = 86400
CUSTOM_SECONDS_PER_DAY = 100000
SCALE = CUSTOM_SECONDS_PER_DAY / REAL_SECONDS_PER_DAY
REAL_MS_PER_CUSTOM_SECOND = 864

CUSTOM_SECONDS_PER_HOUR = 10000
CUSTOM_SECONDS_PER_MINUTE = 100
HOURS_PER_DAY = 10
MINUTES_PER_HOUR = 100
SECONDS_PER_MINUTE = 100

# Largest representable value below a full custom day; keeps hour <= 9.
_LAST_CUSTOM_SECOND = math.nextafter(float(CUSTOM_SECONDS_PER_DAY), 0.0)


@dataclass(frozen=True, slots=True)
class CustomInstant:
    """Time of day on the decimal clock: hour 0-9, minute and second 0-99.

    ``fractional_hour`` is hours since midnight, ``fractional_minute`` minutes
    into the hour and ``fractional_second`` seconds into the minute; each one
    floors to its integer field.
    """

    hour: int
    minute: int
    second: int
    fractional_hour: float
    fractional_minute: float
    fractional_second: float
    source: datetime | time | None = None


@dataclass(frozen=True, slots=True)
class CustomDuration:
    """Elapsed or remaining span in custom units; hour is unbounded, milli 0-999."""

    hour: int
    minute: int
    second: int
    milli: int

    @property
    def is_zero(self) -> bool:
        return self.hour == 0 and self.minute == 0 and self.second == 0 and self.milli == 0


ZERO_DURATION = CustomDuration(hour=0, minute=0, second=0, milli=0)


@dataclass(frozen=True, slots=True)
class HandAngles:
    """Clockwise rotation from the top of the dial, in degrees."""

    hour: float
    minute: float
    second: float


def _finite_non_negative(value: object, what: str) -> float:
    if isinstance(value, bool):
        raise InvalidTimeArgumentError(f"{what} must be a number, got bool", value)
    try:
        v = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidTimeArgumentError(f"{what} must be a number, got {value!r}", value) from None
    if not math.isfinite(v):
        raise InvalidTimeArgumentError(f"{what} must be finite, got {v!r}", value)
    if v < 0.0:
        raise InvalidTimeArgumentError(f"{what} must be >= 0, got {v!r}", value)
    return v


def _instant_from_custom_seconds(custom: float, source: datetime | time | None) -> CustomInstant:
    custom = min(custom, _LAST_CUSTOM_SECOND)
    within_hour = custom % CUSTOM_SECONDS_PER_HOUR
    within_minute = custom % CUSTOM_SECONDS_PER_MINUTE
    return CustomInstant(
        hour=int(custom // CUSTOM_SECONDS_PER_HOUR),
        minute=int(within_hour // CUSTOM_SECONDS_PER_MINUTE),
        second=int(math.floor(within_minute)),
        fractional_hour=custom / CUSTOM_SECONDS_PER_HOUR,
        fractional_minute=within_hour / CUSTOM_SECONDS_PER_MINUTE,
        fractional_second=within_minute,
        source=source,
    )


def instant_from_seconds_since_midnight(
    seconds: float,
    *,
    source: datetime | time | None = None,
) -> CustomInstant:
    """Convert real seconds since local midnight to a custom time of day.

    The domain is ``[0, 86400)``; a full day (or more) wraps around so that
    midnight maps to 00:00:00 rather than to an out-of-range hour.
    """

    s = _finite_non_negative(seconds, "seconds since midnight")
    if s >= REAL_SECONDS_PER_DAY:
        s = s % REAL_SECONDS_PER_DAY
    custom = s * CUSTOM_SECONDS_PER_DAY / REAL_SECONDS_PER_DAY
    return _instant_from_custom_seconds(custom, source)


def instant_from_real_time(now: datetime | time) -> CustomInstant:
    """Convert a local wall-clock reading to a custom time of day."""

    if not isinstance(now, (datetime, time)):
        raise InvalidTimeArgumentError(f"expected datetime or time, got {type(now).__name__}", now)
    whole_ms = ((now.hour * 60 + now.minute) * 60 + now.second) * 1000
    ms = whole_ms + now.microsecond / 1000.0
    return _instant_from_custom_seconds(ms / REAL_MS_PER_CUSTOM_SECOND, now)


def duration_from_elapsed_millis(ms: float) -> CustomDuration:
    """Convert an elapsed real duration in milliseconds to custom units.

    Raises:
        InvalidTimeArgumentError: if ``ms`` is negative or not finite.
            Callers clamp before converting.
    """

    elapsed = _finite_non_negative(ms, "elapsed milliseconds")
    custom = elapsed / REAL_MS_PER_CUSTOM_SECOND
    milli = int(math.floor((custom % 1.0) * 1000.0))
    return CustomDuration(
        hour=int(custom // CUSTOM_SECONDS_PER_HOUR),
        minute=int((custom % CUSTOM_SECONDS_PER_HOUR) // CUSTOM_SECONDS_PER_MINUTE),
        second=int(math.floor(custom % CUSTOM_SECONDS_PER_MINUTE)),
        milli=min(999, milli),
    )


def custom_to_real_millis(hour: int, minute: int, second: int) -> float:
    """Real milliseconds spanned by a custom (hour, minute, second) duration."""

    total = hour * CUSTOM_SECONDS_PER_HOUR + minute * CUSTOM_SECONDS_PER_MINUTE + second
    return float(total * REAL_MS_PER_CUSTOM_SECOND)


def hand_angles(instant: CustomInstant) -> HandAngles:
    # Second hand steps with the integer second to stay in sync with the digits.
    return HandAngles(
        hour=(instant.fractional_hour / HOURS_PER_DAY) * 360.0,
        minute=(instant.fractional_minute / MINUTES_PER_HOUR) * 360.0,
        second=(instant.second / SECONDS_PER_MINUTE) * 360.0,
    )
