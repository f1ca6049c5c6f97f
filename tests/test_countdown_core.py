from __future__ import annotations

import logging

import pytest

from decimal_clock.clock import FakeClock
from decimal_clock.countdown import CountdownState, CountdownTimer, sanitize_field


class _Counter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(5, 5), ("12", 12), (" 7 ", 7), ("", 0), (None, 0), ("abc", 0), ("-3", 0), (-3, 0), ("1.5", 0), (2.0, 0), (True, 0)],
)
def test_sanitize_field(raw: object, expected: int) -> None:
    assert sanitize_field(raw) == expected


def test_zero_target_does_not_start() -> None:
    done = _Counter()
    timer = CountdownTimer(clock=FakeClock(), on_finished=done)
    assert timer.start(0, 0, 0) is False
    assert timer.start("", "x", -4) is False
    assert timer.state is CountdownState.STOPPED
    assert timer.remaining().is_zero
    assert done.calls == 0


def test_one_custom_second_finishes_once_at_deadline() -> None:
    clock = FakeClock()
    done = _Counter()
    timer = CountdownTimer(clock=clock, on_finished=done)

    assert timer.start(0, 0, 1) is True
    assert timer.state is CountdownState.RUNNING
    assert timer.remaining_ms() == pytest.approx(864.0)

    clock.advance_ms(863)
    timer.update()
    assert timer.is_running
    assert done.calls == 0

    clock.advance_ms(2)
    assert timer.tick().is_zero
    assert timer.state is CountdownState.STOPPED
    assert timer.finished
    assert done.calls == 1

    for _ in range(5):
        clock.advance_ms(100)
        timer.update()
    assert done.calls == 1


def test_remaining_counts_down_in_custom_units() -> None:
    clock = FakeClock()
    timer = CountdownTimer(clock=clock)
    timer.start(0, 1, 0)  # 100 custom seconds = 86 400 ms
    clock.advance_ms(40_000)
    d = timer.tick()
    # 46 400 ms left = 53.7037 custom seconds.
    assert (d.hour, d.minute, d.second, d.milli) == (0, 0, 53, 703)


def test_string_fields_are_accepted() -> None:
    clock = FakeClock()
    timer = CountdownTimer(clock=clock)
    assert timer.start("1", "", "junk") is True
    assert timer.remaining_ms() == pytest.approx(10000 * 864.0)


def test_pause_and_resume_preserve_remaining() -> None:
    clock = FakeClock()
    done = _Counter()
    timer = CountdownTimer(clock=clock, on_finished=done)
    timer.start(0, 0, 10)  # 8640 ms
    clock.advance_ms(3000)
    timer.pause()
    assert timer.is_paused
    assert timer.state is CountdownState.STOPPED

    clock.advance_ms(60_000)
    timer.update()
    assert done.calls == 0
    assert timer.remaining_ms() == pytest.approx(5640.0, abs=1e-6)

    timer.resume()
    assert timer.is_running
    clock.advance_ms(5639)
    timer.update()
    assert done.calls == 0
    clock.advance_ms(2)
    timer.update()
    assert done.calls == 1


def test_resume_without_remaining_is_noop() -> None:
    timer = CountdownTimer(clock=FakeClock())
    timer.resume()
    assert timer.state is CountdownState.STOPPED
    assert not timer.is_paused


def test_reset_stops_without_notification() -> None:
    clock = FakeClock()
    done = _Counter()
    timer = CountdownTimer(clock=clock, on_finished=done)
    timer.start(0, 0, 5)
    clock.advance_ms(1000)
    timer.reset()
    clock.advance_ms(10_000)
    timer.update()
    assert timer.state is CountdownState.STOPPED
    assert timer.remaining().is_zero
    assert done.calls == 0


def test_restart_replaces_deadline_and_notifies_again() -> None:
    clock = FakeClock()
    done = _Counter()
    timer = CountdownTimer(clock=clock, on_finished=done)
    timer.start(0, 0, 1)
    clock.advance_ms(900)
    timer.update()
    assert done.calls == 1

    assert timer.start(0, 0, 2)
    assert not timer.finished
    clock.advance_ms(1000)
    timer.update()
    assert done.calls == 1
    clock.advance_ms(800)
    timer.update()
    assert done.calls == 2


def test_pause_after_deadline_completes_instead() -> None:
    clock = FakeClock()
    done = _Counter()
    timer = CountdownTimer(clock=clock, on_finished=done)
    timer.start(0, 0, 1)
    clock.advance_ms(2000)
    timer.pause()
    assert done.calls == 1
    assert not timer.is_paused


def test_failing_finished_callback_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    clock = FakeClock()

    def explode() -> None:
        raise RuntimeError("sound device missing")

    timer = CountdownTimer(clock=clock, on_finished=explode)
    timer.start(0, 0, 1)
    clock.advance_ms(1000)
    with caplog.at_level(logging.ERROR, logger="decimal_clock.countdown"):
        timer.update()
    assert timer.state is CountdownState.STOPPED
    assert "Countdown finished callback failed" in caplog.text


def test_snapshot_view_model() -> None:
    clock = FakeClock()
    timer = CountdownTimer(clock=clock)
    timer.start(0, 0, 3)
    clock.advance_ms(500)
    timer.pause()
    snap = timer.snapshot()
    assert snap.state is CountdownState.STOPPED
    assert snap.paused is True
    assert snap.finished is False
    assert snap.remaining.second == 2
