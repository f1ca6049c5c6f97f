from __future__ import annotations

from datetime import datetime, time

from .conversion import CustomDuration, CustomInstant


def format_component(value: int) -> str:
    return f"{int(value):02d}"


def format_instant(instant: CustomInstant) -> str:
    """``HH:MM:SS`` text for the custom clock."""

    return f"{format_component(instant.hour)}:{format_component(instant.minute)}:{format_component(instant.second)}"


def format_duration(duration: CustomDuration, *, millis: bool = True) -> str:
    """``HH:MM:SS.mmm`` text for stopwatch and timer readouts.

    Hours are not bounded, so long runs simply widen the first field.
    """

    text = (
        f"{format_component(duration.hour)}:{format_component(duration.minute)}:"
        f"{format_component(duration.second)}"
    )
    if millis:
        text += f".{int(duration.milli):03d}"
    return text


def format_real_time(moment: datetime | time) -> str:
    return moment.strftime("%H:%M:%S")
