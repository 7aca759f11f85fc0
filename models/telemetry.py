"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

READING_FIELDS = ("distance", "temperature", "intensity", "processing_time")


class MonitoringState(str, Enum):
    """Lifecycle states of the monitor controller."""

    stopped = "stopped"
    running = "running"


@dataclass(frozen=True, slots=True)
class Reading:
    """A single simulated laser sensor sample."""

    sequence: int
    timestamp: datetime
    distance: float
    temperature: float
    intensity: float
    processing_time: float
