"""Synthetic laser sensor sample generation."""

from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Optional

from models.telemetry import READING_FIELDS, Reading

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class FieldBounds:
    """Closed interval a simulated field is clamped into."""

    low: float
    high: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.low) and math.isfinite(self.high)):
            raise ValueError(f"Bounds must be finite, got [{self.low}, {self.high}].")
        if self.low > self.high:
            raise ValueError(
                f"Lower bound {self.low} is greater than upper bound {self.high}."
            )

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2.0

    @property
    def width(self) -> float:
        return self.high - self.low

    def clamp(self, value: float) -> float:
        return min(self.high, max(self.low, value))

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


@dataclass(frozen=True)
class SimulationBounds:
    distance: FieldBounds = field(default_factory=lambda: FieldBounds(50.0, 500.0))
    temperature: FieldBounds = field(default_factory=lambda: FieldBounds(20.0, 45.0))
    intensity: FieldBounds = field(default_factory=lambda: FieldBounds(0.0, 100.0))
    processing_time: FieldBounds = field(default_factory=lambda: FieldBounds(0.5, 5.0))

    def for_field(self, name: str) -> FieldBounds:
        if name not in READING_FIELDS:
            raise KeyError(f"Unknown reading field {name!r}.")
        return getattr(self, name)


class MonotonicClock:
    """UTC timestamps anchored once to the wall clock and advanced monotonically.

    Adjustments of the system clock after construction do not make successive
    timestamps go backwards.
    """

    def __init__(self) -> None:
        self._anchor = datetime.now(timezone.utc)
        self._origin = time.perf_counter()

    def __call__(self) -> datetime:
        return self._anchor + timedelta(seconds=time.perf_counter() - self._origin)


class SampleGenerator:
    """Produces one bounded, noisy reading per call.

    Every field is drawn from a normal distribution centred on the middle of
    its bounds (sigma is a sixth of the bounds width) and then hard-clamped,
    so values never leave the configured range.
    """

    def __init__(
        self,
        bounds: Optional[SimulationBounds] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.bounds = bounds or SimulationBounds()
        self._rng = rng or random.Random()
        self._clock = clock or MonotonicClock()
        self._sequence = 0
        self._lock = Lock()

    def next(self) -> Reading:
        with self._lock:
            self._sequence += 1
            values = {name: self._draw(self.bounds.for_field(name)) for name in READING_FIELDS}
            return Reading(sequence=self._sequence, timestamp=self._clock(), **values)

    def _draw(self, bounds: FieldBounds) -> float:
        if bounds.width == 0:
            return bounds.low
        return bounds.clamp(self._rng.gauss(bounds.midpoint, bounds.width / 6.0))


def build_generator(
    distance: tuple[float, float],
    temperature: tuple[float, float],
    intensity: tuple[float, float],
    processing_time: tuple[float, float],
    seed: Optional[int] = None,
) -> SampleGenerator:
    bounds = SimulationBounds(
        distance=FieldBounds(*distance),
        temperature=FieldBounds(*temperature),
        intensity=FieldBounds(*intensity),
        processing_time=FieldBounds(*processing_time),
    )
    return SampleGenerator(bounds=bounds, rng=random.Random(seed))
