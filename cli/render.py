from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Monitor Status")
    running = bool(payload.get("is_running"))
    typer.secho(
        f"running: {'yes' if running else 'no'}",
        fg=typer.colors.GREEN if running else typer.colors.YELLOW,
    )
    echo_key_values(
        [
            ("interval", payload.get("monitoring_interval")),
            ("reports_generated", payload.get("reports_generated")),
            ("reports_written", payload.get("reports_written")),
        ]
    )

    last_times = payload.get("last_report_times") or {}
    typer.echo()
    echo_heading("Last Reports")
    if last_times:
        for key, timestamp in sorted(last_times.items()):
            typer.echo(f"  - {key}: {timestamp}")
    else:
        typer.echo("No reports emitted yet.")


def render_checks(results: List[Dict[str, Any]]) -> None:
    echo_heading("Check Results")
    for result in results:
        robot_id = result.get("robot_id")
        if result.get("error"):
            typer.secho(f"{robot_id}: error - {result['error']}", fg=typer.colors.RED)
            continue
        typer.echo(
            f"{robot_id}: {result.get('critical_count', 0)} critical, "
            f"{result.get('warning_count', 0)} warning"
        )
        fallback = result.get("fallback_parts") or []
        if fallback:
            typer.echo(f"  sustained anomalies: {', '.join(fallback)}")
        for report in result.get("reports") or []:
            typer.secho(f"  report: {report}", fg=typer.colors.RED)


def render_reports(reports: List[str]) -> None:
    echo_heading("Reports")
    if not reports:
        typer.echo("No reports on disk.")
        return
    for name in reports:
        typer.echo(f"  - {name}")
