from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_checks, render_reports, render_status


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for controlling and inspecting the robot health monitor.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Monitor API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show whether the monitor is running and its recent reports."""
    state = _get_state(ctx)
    render_status(state.client.get_status())


@app.command("start")
def start_command(ctx: typer.Context) -> None:
    """Start background monitoring (clears existing reports)."""
    state = _get_state(ctx)
    payload = state.client.start()
    typer.secho("Monitoring started.", fg=typer.colors.GREEN)
    render_status(payload)


@app.command("stop")
def stop_command(ctx: typer.Context) -> None:
    """Stop background monitoring."""
    state = _get_state(ctx)
    payload = state.client.stop()
    typer.secho("Monitoring stopped.", fg=typer.colors.YELLOW)
    render_status(payload)


@app.command("check")
def check_command(ctx: typer.Context) -> None:
    """Evaluate every robot once, right now."""
    state = _get_state(ctx)
    render_checks(state.client.check())


@app.command("reports")
def reports_command(ctx: typer.Context) -> None:
    """List report files written by the monitor."""
    state = _get_state(ctx)
    render_reports(state.client.list_reports())


@app.command("report")
def report_command(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="Report file name as shown by the reports command."),
) -> None:
    """Print the contents of one report."""
    state = _get_state(ctx)
    typer.echo(state.client.get_report(filename), nl=False)
