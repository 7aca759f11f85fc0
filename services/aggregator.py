"""Aggregation logic for sensor readings."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from models.telemetry import READING_FIELDS, Reading


@dataclass(frozen=True)
class FieldStatistics:
    """Summary of one numeric reading field."""

    mean: float
    min: float
    max: float
    std_dev: float


@dataclass(frozen=True)
class Statistics:
    """Computed statistics for a batch of readings.

    ``per_field`` maps every numeric reading field to its summary, or to ``None``
    when ``count`` is zero.
    """

    count: int = 0
    per_field: Dict[str, Optional[FieldStatistics]] = field(
        default_factory=lambda: {name: None for name in READING_FIELDS}
    )

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def for_field(self, name: str) -> Optional[FieldStatistics]:
        if name not in self.per_field:
            raise KeyError(f"Unknown reading field {name!r}.")
        return self.per_field[name]


class StatisticsAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def compute(self, readings: Iterable[Reading]) -> Statistics:
        snapshot = list(readings)
        if not snapshot:
            return Statistics()

        per_field = {
            name: self._summarize([getattr(reading, name) for reading in snapshot])
            for name in READING_FIELDS
        }
        return Statistics(count=len(snapshot), per_field=per_field)

    @staticmethod
    def _summarize(values: List[float]) -> FieldStatistics:
        count = len(values)
        mean = math.fsum(values) / count
        # Two passes: squared deviations from the already known mean.
        variance = math.fsum((value - mean) ** 2 for value in values) / count
        return FieldStatistics(
            mean=mean,
            min=min(values),
            max=max(values),
            std_dev=math.sqrt(variance),
        )
