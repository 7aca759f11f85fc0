"""Connection settings for the ``laser-monitor`` command line client.

Command line options win over environment variables, which win over the
defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
# Roughly one poll per tick at the service's default 100 ms sampling period.
DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_REQUEST_TIMEOUT = 5.0

_BASE_URL_ENV = "LASER_MONITOR_URL"
_POLL_INTERVAL_ENV = "LASER_MONITOR_POLL_INTERVAL"
_REQUEST_TIMEOUT_ENV = "LASER_MONITOR_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _positive_float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        parsed = float(raw)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _normalize_url(url: str) -> str:
    url = url.strip().rstrip("/")
    if "://" not in url:
        url = f"http://{url}"
    return url


def load_config(
    base_url: Optional[str] = None,
    poll_interval: Optional[float] = None,
    request_timeout: Optional[float] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    return CLIConfig(
        base_url=_normalize_url(url),
        poll_interval=(
            poll_interval
            if poll_interval is not None
            else _positive_float_env(_POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL)
        ),
        request_timeout=(
            request_timeout
            if request_timeout is not None
            else _positive_float_env(_REQUEST_TIMEOUT_ENV, DEFAULT_REQUEST_TIMEOUT)
        ),
    )
