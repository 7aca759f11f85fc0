from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _fmt(value: Any, digits: int = 3) -> str:
    if isinstance(value, float):
        return f"{value:.{digits}f}"
    return str(value)


def render_transition(payload: Dict[str, Any]) -> None:
    state = payload.get("state")
    if payload.get("changed"):
        typer.secho(f"Monitor is now {state}.", fg=typer.colors.GREEN)
    else:
        typer.echo(f"Monitor already {state}; nothing changed.")


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Monitor Status")
    echo_key_values(
        [
            ("state", payload.get("state")),
            ("tick_interval_ms", payload.get("tick_interval_ms")),
            ("buffered", f"{payload.get('buffered')}/{payload.get('buffer_capacity')}"),
            ("ticks", payload.get("ticks")),
            ("skipped_ticks", payload.get("skipped_ticks")),
            ("subscribers", payload.get("subscriber_count")),
            ("pending_notifications", payload.get("pending_notifications")),
            ("dropped_notifications", payload.get("dropped_notifications")),
        ]
    )


def render_statistics(payload: Dict[str, Any]) -> None:
    echo_heading("Statistics")
    count = payload.get("count") or 0
    typer.echo(f"count: {count}")
    if not count:
        typer.echo("No readings recorded yet.")
        return

    for name, stats in (payload.get("per_field") or {}).items():
        typer.echo()
        echo_heading(name)
        if not stats:
            typer.echo("  undefined")
            continue
        for key in ("mean", "min", "max", "std_dev"):
            typer.echo(f"  {key}: {_fmt(stats.get(key))}")


def render_reading(reading: Dict[str, Any]) -> None:
    typer.echo(
        f"#{reading.get('sequence')} {reading.get('timestamp')} "
        f"distance={_fmt(reading.get('distance'), 2)}mm "
        f"temperature={_fmt(reading.get('temperature'), 2)}C "
        f"intensity={_fmt(reading.get('intensity'), 1)}% "
        f"processing_time={_fmt(reading.get('processing_time'), 2)}ms"
    )


def render_history(payload: Dict[str, Any]) -> None:
    echo_heading(f"History ({payload.get('count', 0)} readings)")
    readings = payload.get("readings") or []
    if not readings:
        typer.echo("No readings recorded yet.")
        return
    for reading in readings:
        render_reading(reading)
