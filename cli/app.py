from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_history,
    render_reading,
    render_statistics,
    render_status,
    render_transition,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Control and inspect the laser telemetry monitor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Monitor API base URL (defaults to LASER_MONITOR_URL env or http://localhost:8000).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds between polls in watch mode.",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(
        base_url=base_url,
        poll_interval=poll_interval,
        request_timeout=timeout,
    )
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("start")
def start_command(ctx: typer.Context) -> None:
    """Start sampling."""
    render_transition(_get_state(ctx).client.start())


@app.command("stop")
def stop_command(ctx: typer.Context) -> None:
    """Stop sampling; history is kept."""
    render_transition(_get_state(ctx).client.stop())


@app.command("reset")
def reset_command(ctx: typer.Context) -> None:
    """Clear buffered history."""
    payload = _get_state(ctx).client.reset()
    typer.secho("History cleared.", fg=typer.colors.GREEN)
    render_status(payload)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show monitor state and counters."""
    render_status(_get_state(ctx).client.get_status())


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show statistics over the buffered readings."""
    render_statistics(_get_state(ctx).client.get_statistics())


@app.command("history")
def history_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=0,
        help="Only show the most recent N readings.",
    ),
) -> None:
    """List buffered readings, oldest first."""
    render_history(_get_state(ctx).client.get_history(limit))


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-c",
        min=1,
        help="Exit after printing this many readings.",
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Override the poll interval.",
    ),
) -> None:
    """Poll for new readings and print each one once."""
    state = _get_state(ctx)
    poll_interval = interval if interval is not None else state.config.poll_interval
    last_sequence: Optional[int] = None
    printed = 0
    while count is None or printed < count:
        reading = state.client.get_latest()
        if reading is not None and reading.get("sequence") != last_sequence:
            last_sequence = reading.get("sequence")
            render_reading(reading)
            printed += 1
            continue
        time.sleep(poll_interval)
