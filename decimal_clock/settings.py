from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .scheduler import DEFAULT_LEAD_MS, DEFAULT_MIN_DELAY_MS

logger = logging.getLogger(__name__)

SETTINGS_PATH_ENV = "DECIMAL_CLOCK_SETTINGS_PATH"
LOG_LEVEL_ENV = "DECIMAL_CLOCK_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _as_float(value: object, fallback: float) -> float:
    if isinstance(value, bool):
        return fallback
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback


def _clamp(value: float, lo: float, hi: float) -> float:
    if value != value:  # NaN
        return lo
    if value <= lo:
        return lo
    if value >= hi:
        return hi
    return float(value)


@dataclass(slots=True)
class ClockSettings:
    lead_ms: float = DEFAULT_LEAD_MS
    min_delay_ms: float = DEFAULT_MIN_DELAY_MS
    tick_ms: float = 10.0
    analog: bool = False
    log_level: str = "INFO"

    def to_dict(self) -> dict[str, Any]:
        return {
            "lead_ms": float(self.lead_ms),
            "min_delay_ms": float(self.min_delay_ms),
            "tick_ms": float(self.tick_ms),
            "analog": bool(self.analog),
            "log_level": str(self.log_level),
        }

    @classmethod
    def from_dict(cls, data: object) -> "ClockSettings":
        if not isinstance(data, dict):
            return cls()
        level = str(data.get("log_level", "INFO")).strip().upper()
        if level not in _LOG_LEVELS:
            level = "INFO"
        return cls(
            # Lead must stay well under one custom second (864 ms).
            lead_ms=_clamp(_as_float(data.get("lead_ms"), DEFAULT_LEAD_MS), 0.0, 400.0),
            min_delay_ms=_clamp(_as_float(data.get("min_delay_ms"), DEFAULT_MIN_DELAY_MS), 1.0, 200.0),
            tick_ms=_clamp(_as_float(data.get("tick_ms"), 10.0), 1.0, 1000.0),
            analog=bool(data.get("analog", False)),
            log_level=level,
        )


class SettingsStore:
    _version = 1

    def __init__(self, path: Path) -> None:
        self._path = path
        self._settings = ClockSettings()
        self._load()

    @classmethod
    def default_path(cls) -> Path:
        explicit = os.environ.get(SETTINGS_PATH_ENV)
        if explicit:
            return Path(explicit).expanduser()
        return Path.home() / ".decimal_clock.json"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def settings(self) -> ClockSettings:
        return self._settings

    def effective_log_level(self) -> str:
        override = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
        if override in _LOG_LEVELS:
            return override
        return self._settings.log_level

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable settings file {self._path}: {e}")
            return
        if not isinstance(payload, dict):
            return
        self._settings = ClockSettings.from_dict(payload.get("settings"))

    def save(self) -> None:
        payload = {
            "version": self._version,
            "settings": self._settings.to_dict(),
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(f"{self._path.suffix}.tmp")
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            logger.warning(f"Could not save settings to {self._path}: {e}")

    def set_analog(self, analog: bool) -> None:
        if self._settings.analog == bool(analog):
            return
        self._settings.analog = bool(analog)
        self.save()
