"""Tests for the pure real-time to decimal-time conversion functions.

No clock, pygame or scheduling is involved: every function here is a pure
mapping from a real time value to custom units, so the tests simply feed in
chosen instants and durations and check the resulting fields.
"""

from __future__ import annotations

import math
from datetime import datetime, time

import pytest

from decimal_clock.conversion import (
    SCALE,
    CustomInstant,
    custom_to_real_millis,
    duration_from_elapsed_millis,
    hand_angles,
    instant_from_real_time,
    instant_from_seconds_since_midnight,
)
from decimal_clock.errors import InvalidTimeArgumentError


def _fields(instant: CustomInstant) -> tuple[int, int, int]:
    return instant.hour, instant.minute, instant.second


def test_scale_matches_day_ratio() -> None:
    assert SCALE == pytest.approx(1.157407407, rel=1e-9)


def test_local_noon_is_custom_midday() -> None:
    assert _fields(instant_from_seconds_since_midnight(43200.0)) == (5, 0, 0)
    noon = instant_from_real_time(datetime(2026, 10, 19, 12, 0, 0))
    assert _fields(noon) == (5, 0, 0)
    assert noon.fractional_hour == 5.0
    assert noon.fractional_second == 0.0


def test_midnight_and_full_day_map_to_zero() -> None:
    assert _fields(instant_from_seconds_since_midnight(0.0)) == (0, 0, 0)
    assert _fields(instant_from_seconds_since_midnight(86400.0)) == (0, 0, 0)
    assert _fields(instant_from_real_time(time(0, 0, 0))) == (0, 0, 0)


def test_last_moment_of_day_is_nine_ninety_nine_ninety_nine() -> None:
    assert _fields(instant_from_seconds_since_midnight(86400.0 - 0.001)) == (9, 99, 99)
    assert _fields(instant_from_real_time(time(23, 59, 59, 999999))) == (9, 99, 99)
    # Closest float below a full day must not round up to hour 10.
    edge = instant_from_seconds_since_midnight(math.nextafter(86400.0, 0.0))
    assert _fields(edge) == (9, 99, 99)
    assert edge.fractional_hour < 10.0


def test_fields_stay_in_range_across_the_day() -> None:
    for whole in range(0, 86400, 37):
        for frac in (0.0, 0.25, 0.999):
            instant = instant_from_seconds_since_midnight(whole + frac)
            assert 0 <= instant.hour <= 9
            assert 0 <= instant.minute <= 99
            assert 0 <= instant.second <= 99
            assert instant.hour == math.floor(instant.fractional_hour)
            assert instant.minute == math.floor(instant.fractional_minute) % 100
            assert instant.second == math.floor(instant.fractional_second) % 100


def test_real_time_keeps_source_and_uses_microseconds() -> None:
    moment = datetime(2026, 10, 19, 6, 0, 0, 432000)
    instant = instant_from_real_time(moment)
    assert instant.source is moment
    # 06:00 = 25 000 custom seconds; 432 ms is half a custom second.
    assert _fields(instant) == (2, 50, 0)
    assert instant.fractional_second == pytest.approx(0.5)


def test_fractional_fields_are_continuous_within_a_second() -> None:
    a = instant_from_seconds_since_midnight(1000.0)
    b = instant_from_seconds_since_midnight(1000.5)
    assert b.fractional_second > a.fractional_second
    assert b.fractional_minute > a.fractional_minute
    assert b.fractional_hour > a.fractional_hour


@pytest.mark.parametrize("bad", [-0.001, -1, float("nan"), float("inf"), float("-inf"), "noon", None, True])
def test_invalid_seconds_rejected(bad: object) -> None:
    with pytest.raises(InvalidTimeArgumentError):
        instant_from_seconds_since_midnight(bad)  # type: ignore[arg-type]


def test_real_time_rejects_non_time_values() -> None:
    with pytest.raises(InvalidTimeArgumentError):
        instant_from_real_time(43200.0)  # type: ignore[arg-type]


def test_duration_examples() -> None:
    zero = duration_from_elapsed_millis(0)
    assert zero.is_zero

    one = duration_from_elapsed_millis(864)
    assert (one.hour, one.minute, one.second, one.milli) == (0, 0, 1, 0)

    half = duration_from_elapsed_millis(432)
    assert (half.second, half.milli) == (0, 500)

    d = duration_from_elapsed_millis(123456789)
    assert (d.hour, d.minute, d.second, d.milli) == (14, 28, 89, 802)


def test_duration_hours_are_unbounded() -> None:
    # Two real days are twenty custom hours.
    d = duration_from_elapsed_millis(2 * 86_400_000)
    assert (d.hour, d.minute, d.second, d.milli) == (20, 0, 0, 0)


@pytest.mark.parametrize("bad", [-1, -0.5, float("nan"), float("inf"), False])
def test_duration_rejects_malformed_input(bad: object) -> None:
    with pytest.raises(InvalidTimeArgumentError) as excinfo:
        duration_from_elapsed_millis(bad)  # type: ignore[arg-type]
    assert isinstance(excinfo.value, ValueError)


@pytest.mark.parametrize(
    "hms",
    [(0, 0, 1), (0, 1, 0), (1, 0, 0), (3, 25, 7), (0, 99, 99), (12, 0, 50)],
)
def test_timer_inverse_round_trips(hms: tuple[int, int, int]) -> None:
    h, m, s = hms
    d = duration_from_elapsed_millis(custom_to_real_millis(h, m, s))
    assert (d.hour, d.minute, d.second, d.milli) == (h, m, s, 0)


def test_one_custom_second_is_864_real_ms() -> None:
    assert custom_to_real_millis(0, 0, 1) == 864.0
    assert custom_to_real_millis(10, 0, 0) == 86_400_000.0
    assert custom_to_real_millis(0, 0, 0) == 0.0


def test_hand_angles_at_midday() -> None:
    angles = hand_angles(instant_from_seconds_since_midnight(43200.0))
    assert angles.hour == pytest.approx(180.0)
    assert angles.minute == pytest.approx(0.0)
    assert angles.second == pytest.approx(0.0)


def test_second_hand_steps_with_integer_second() -> None:
    # 50 012.5 custom seconds: minute hand sweeps, second hand sits on 12.
    instant = CustomInstant(
        hour=5,
        minute=0,
        second=12,
        fractional_hour=5.00125,
        fractional_minute=0.125,
        fractional_second=12.5,
    )
    angles = hand_angles(instant)
    assert angles.second == pytest.approx(43.2)
    assert angles.minute == pytest.approx(0.45)
    assert angles.hour == pytest.approx(180.045)
