"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.telemetry import MonitoringState, Reading
from services.aggregator import FieldStatistics, Statistics
from services.monitor import MonitorStatus, TransitionOutcome


class ReadingResponse(BaseModel):
    """A single simulated sensor sample."""

    sequence: int = Field(..., ge=1)
    timestamp: datetime
    distance: float = Field(..., description="Distance in millimeters.")
    temperature: float = Field(..., description="Temperature in degrees Celsius.")
    intensity: float = Field(..., description="Signal intensity in percent.")
    processing_time: float = Field(..., description="Processing time in milliseconds.")

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingResponse":
        return cls(
            sequence=reading.sequence,
            timestamp=reading.timestamp,
            distance=reading.distance,
            temperature=reading.temperature,
            intensity=reading.intensity,
            processing_time=reading.processing_time,
        )


class HistoryResponse(BaseModel):
    """Most recent readings, oldest first."""

    count: int = Field(..., ge=0)
    readings: List[ReadingResponse] = Field(default_factory=list)


class FieldStatisticsResponse(BaseModel):
    mean: float
    min: float
    max: float
    std_dev: float = Field(..., description="Population standard deviation.")

    @classmethod
    def from_statistics(cls, stats: FieldStatistics) -> "FieldStatisticsResponse":
        return cls(mean=stats.mean, min=stats.min, max=stats.max, std_dev=stats.std_dev)


class StatisticsResponse(BaseModel):
    """Summary over the current history; per-field entries are null when count is 0."""

    count: int = Field(..., ge=0)
    per_field: Dict[str, Optional[FieldStatisticsResponse]] = Field(default_factory=dict)

    @classmethod
    def from_statistics(cls, statistics: Statistics) -> "StatisticsResponse":
        return cls(
            count=statistics.count,
            per_field={
                name: FieldStatisticsResponse.from_statistics(stats) if stats else None
                for name, stats in statistics.per_field.items()
            },
        )


class TransitionResponse(BaseModel):
    state: MonitoringState
    changed: bool = Field(..., description="False when the request did not change the state.")

    @classmethod
    def from_outcome(cls, outcome: TransitionOutcome) -> "TransitionResponse":
        return cls(state=outcome.state, changed=outcome.changed)


class MonitorStatusResponse(BaseModel):
    state: MonitoringState
    tick_interval_ms: int = Field(..., gt=0)
    buffer_capacity: int = Field(..., ge=1)
    buffered: int = Field(..., ge=0)
    ticks: int = Field(..., ge=0)
    skipped_ticks: int = Field(..., ge=0)
    subscriber_count: int = Field(..., ge=0)
    pending_notifications: int = Field(..., ge=0)
    dropped_notifications: int = Field(..., ge=0)

    @classmethod
    def from_status(cls, status: MonitorStatus) -> "MonitorStatusResponse":
        return cls(
            state=status.state,
            tick_interval_ms=status.tick_interval_ms,
            buffer_capacity=status.buffer_capacity,
            buffered=status.buffered,
            ticks=status.ticks,
            skipped_ticks=status.skipped_ticks,
            subscriber_count=status.subscriber_count,
            pending_notifications=status.pending_notifications,
            dropped_notifications=status.dropped_notifications,
        )
