from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.monitor",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Monitoring started",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_extra_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(_record(state="running", interval_ms=100, unrelated="x"))

    assert message == "Monitoring started | state=running interval_ms=100"


def test_formatter_skips_missing_and_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["state", "tick"])

    assert formatter.format(_record(tick=None)) == "Monitoring started"
