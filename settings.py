from __future__ import annotations

import math
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_TICK_INTERVAL_ENV = "MONITOR_TICK_INTERVAL_MS"
_BUFFER_CAPACITY_ENV = "MONITOR_BUFFER_CAPACITY"
_NOTIFICATION_BACKLOG_ENV = "MONITOR_NOTIFICATION_BACKLOG"
_DISTANCE_RANGE_ENV = "SIM_DISTANCE_RANGE"
_TEMPERATURE_RANGE_ENV = "SIM_TEMPERATURE_RANGE"
_INTENSITY_RANGE_ENV = "SIM_INTENSITY_RANGE"
_PROCESSING_TIME_RANGE_ENV = "SIM_PROCESSING_TIME_RANGE"
_SEED_ENV = "SIM_SEED"
_LOG_LEVEL_ENV = "LOG_LEVEL"

Range = tuple[float, float]


@dataclass(frozen=True)
class Settings:
    tick_interval_ms: int
    buffer_capacity: int
    notification_backlog: int
    distance_range: Range
    temperature_range: Range
    intensity_range: Range
    processing_time_range: Range
    seed: Optional[int]
    log_level: str


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        return int(candidate)
    except ValueError:
        return None


def _read_range(name: str, default: Range) -> Range:
    """Parse a ``low,high`` pair; malformed or inverted ranges fall back to the default."""
    value = os.getenv(name)
    if value is None:
        return default
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 2:
        return default
    try:
        low, high = float(parts[0]), float(parts[1])
    except ValueError:
        return default
    if not (math.isfinite(low) and math.isfinite(high)) or low > high:
        return default
    return (low, high)


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        tick_interval_ms=_read_positive_int(_TICK_INTERVAL_ENV, 100),
        buffer_capacity=_read_positive_int(_BUFFER_CAPACITY_ENV, 100),
        notification_backlog=_read_positive_int(_NOTIFICATION_BACKLOG_ENV, 100),
        distance_range=_read_range(_DISTANCE_RANGE_ENV, (50.0, 500.0)),
        temperature_range=_read_range(_TEMPERATURE_RANGE_ENV, (20.0, 45.0)),
        intensity_range=_read_range(_INTENSITY_RANGE_ENV, (0.0, 100.0)),
        processing_time_range=_read_range(_PROCESSING_TIME_RANGE_ENV, (0.5, 5.0)),
        seed=_read_optional_int(_SEED_ENV),
        log_level=_read_log_level("INFO"),
    )
