from __future__ import annotations

from typing import Iterable

import pytest

from services.generator import FieldBounds
from services.monitor import build_default_monitor
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


@pytest.fixture(autouse=True)
def _fresh_caches() -> Iterable[None]:
    _clear_caches((get_settings, build_default_monitor))
    yield
    _clear_caches((get_settings, build_default_monitor))


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("MONITOR_TICK_INTERVAL_MS", "25")
    monkeypatch.setenv("MONITOR_BUFFER_CAPACITY", "7")
    monkeypatch.setenv("SIM_DISTANCE_RANGE", "10, 20")
    monkeypatch.setenv("SIM_TEMPERATURE_RANGE", "-5,5")
    monkeypatch.setenv("SIM_SEED", "123")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()
    monitor = build_default_monitor()

    try:
        assert settings.seed == 123
        assert settings.log_level == "DEBUG"
        assert monitor.tick_interval_ms == 25
        assert monitor.history.capacity == 7
        assert monitor.generator.bounds.distance == FieldBounds(10.0, 20.0)
        assert monitor.generator.bounds.temperature == FieldBounds(-5.0, 5.0)
    finally:
        monitor.shutdown()


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("MONITOR_TICK_INTERVAL_MS", "-1")
    monkeypatch.setenv("MONITOR_BUFFER_CAPACITY", "lots")
    monkeypatch.setenv("SIM_DISTANCE_RANGE", "500,50")
    monkeypatch.setenv("SIM_INTENSITY_RANGE", "0")
    monkeypatch.setenv("SIM_PROCESSING_TIME_RANGE", "a,b")
    monkeypatch.setenv("SIM_SEED", "")

    settings = get_settings()

    assert settings.tick_interval_ms == 100
    assert settings.buffer_capacity == 100
    assert settings.distance_range == (50.0, 500.0)
    assert settings.intensity_range == (0.0, 100.0)
    assert settings.processing_time_range == (0.5, 5.0)
    assert settings.seed is None


def test_seeded_default_monitors_generate_identical_values(monkeypatch) -> None:
    monkeypatch.setenv("SIM_SEED", "99")

    first = build_default_monitor()
    build_default_monitor.cache_clear()
    second = build_default_monitor()

    try:
        a, b = first.generator.next(), second.generator.next()
        assert (a.distance, a.temperature, a.intensity) == (b.distance, b.temperature, b.intensity)
    finally:
        first.shutdown()
        second.shutdown()
