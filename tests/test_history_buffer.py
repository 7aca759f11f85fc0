"""Unit tests for the bounded history buffer."""

from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from models.telemetry import Reading
from storage.history import HistoryBuffer

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _reading(sequence: int) -> Reading:
    return Reading(
        sequence=sequence,
        timestamp=_EPOCH + timedelta(milliseconds=100 * sequence),
        distance=float(sequence),
        temperature=25.0,
        intensity=50.0,
        processing_time=1.0,
    )


def test_empty_buffer() -> None:
    buffer = HistoryBuffer(capacity=3)

    assert len(buffer) == 0
    assert buffer.capacity == 3
    assert buffer.latest() is None
    assert buffer.snapshot() == ()


def test_buffer_never_exceeds_capacity() -> None:
    buffer = HistoryBuffer(capacity=4)

    for sequence in range(1, 20):
        buffer.push(_reading(sequence))
        assert len(buffer) <= 4
        assert len(buffer.snapshot()) <= 4


def test_overflow_evicts_oldest_first() -> None:
    capacity = 5
    buffer = HistoryBuffer(capacity=capacity)
    readings = [_reading(sequence) for sequence in range(1, capacity + 2)]

    for reading in readings:
        buffer.push(reading)

    assert buffer.snapshot() == tuple(readings[1:])
    assert buffer.latest() == readings[-1]


def test_snapshot_limit_returns_most_recent_oldest_first() -> None:
    buffer = HistoryBuffer(capacity=10)
    for sequence in range(1, 7):
        buffer.push(_reading(sequence))

    assert [r.sequence for r in buffer.snapshot(3)] == [4, 5, 6]
    assert [r.sequence for r in buffer.snapshot(100)] == [1, 2, 3, 4, 5, 6]
    assert buffer.snapshot(0) == ()


def test_negative_limit_is_rejected() -> None:
    buffer = HistoryBuffer()

    with pytest.raises(ValueError):
        buffer.snapshot(-1)


def test_snapshot_is_a_copy() -> None:
    buffer = HistoryBuffer(capacity=3)
    buffer.push(_reading(1))

    snapshot = buffer.snapshot()
    buffer.push(_reading(2))

    assert [r.sequence for r in snapshot] == [1]


def test_clear_empties_buffer() -> None:
    buffer = HistoryBuffer(capacity=3)
    buffer.push(_reading(1))
    buffer.push(_reading(2))

    buffer.clear()

    assert len(buffer) == 0
    assert buffer.latest() is None


@pytest.mark.parametrize("capacity", [0, -3])
def test_invalid_capacity_is_rejected(capacity: int) -> None:
    with pytest.raises(ValueError):
        HistoryBuffer(capacity=capacity)


def test_concurrent_snapshots_are_never_torn() -> None:
    buffer = HistoryBuffer(capacity=50)
    stop = threading.Event()
    failures: list[str] = []

    def writer() -> None:
        sequence = 0
        while not stop.is_set():
            sequence += 1
            buffer.push(_reading(sequence))

    def reader() -> None:
        while not stop.is_set():
            snapshot = buffer.snapshot()
            if len(snapshot) > 50:
                failures.append(f"oversized snapshot: {len(snapshot)}")
            sequences = [reading.sequence for reading in snapshot]
            if sequences and sequences != list(range(sequences[0], sequences[0] + len(sequences))):
                failures.append(f"non-contiguous snapshot: {sequences}")

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
    for thread in threads:
        thread.start()
    time.sleep(0.2)
    stop.set()
    for thread in threads:
        thread.join(timeout=5)

    assert failures == []
