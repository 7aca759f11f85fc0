from __future__ import annotations
from collections import deque
from threading import Lock
from typing import Deque, Optional

from models.telemetry import Reading


class HistoryBuffer:

    def __init__(self, capacity: int = 100) -> None:
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}.")
        self._capacity = capacity
        self._readings: Deque[Reading] = deque(maxlen=capacity)
        self._lock = Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, reading: Reading) -> None:
        # deque(maxlen=...) drops the oldest entry on overflow.
        with self._lock:
            self._readings.append(reading)

    def snapshot(self, limit: Optional[int] = None) -> tuple[Reading, ...]:
        """Return the most recent readings, oldest first."""

        if limit is not None and limit < 0:
            raise ValueError(f"History limit must not be negative, got {limit}.")

        with self._lock:
            readings = tuple(self._readings)

        if limit is None or limit >= len(readings):
            return readings
        if limit == 0:
            return ()
        return readings[-limit:]

    def latest(self) -> Optional[Reading]:
        with self._lock:
            if not self._readings:
                return None
            return self._readings[-1]

    def clear(self) -> None:
        with self._lock:
            self._readings.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)
