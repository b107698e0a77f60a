from __future__ import annotations

from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.config import DEFAULT_BASE_URL, load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.status_payload: Dict[str, Any] = {
            "is_running": True,
            "monitoring_interval": "5 seconds",
            "reports_generated": 1,
            "reports_written": 2,
            "last_report_times": {"ROBOT_001_2024-01-01": "2024-01-01T03:00:00.000Z"},
        }
        self.actions: List[str] = []
        self.closed = False

    def get_status(self) -> Dict[str, Any]:
        return self.status_payload

    def start(self) -> Dict[str, Any]:
        self.actions.append("start")
        return self.status_payload

    def stop(self) -> Dict[str, Any]:
        self.actions.append("stop")
        return {**self.status_payload, "is_running": False, "monitoring_interval": "stopped"}

    def check(self) -> List[Dict[str, Any]]:
        return [
            {
                "robot_id": "ROBOT_001",
                "critical_count": 1,
                "warning_count": 2,
                "fallback_parts": [],
                "reports": ["CRITICAL_report_ROBOT_001_x.txt"],
                "error": None,
            },
            {
                "robot_id": "ROBOT_002",
                "critical_count": 0,
                "warning_count": 0,
                "fallback_parts": [],
                "reports": [],
                "error": "sensor offline",
            },
        ]

    def list_reports(self) -> List[str]:
        return ["CRITICAL_report_ROBOT_001_x.txt"]

    def get_report(self, filename: str) -> str:
        return f"contents of {filename}\n"

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return client


def test_status_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "Monitor Status" in result.stdout
    assert "running: yes" in result.stdout
    assert "interval: 5 seconds" in result.stdout
    assert "ROBOT_001_2024-01-01: 2024-01-01T03:00:00.000Z" in result.stdout
    assert stub.closed is True


def test_start_and_stop_commands(runner: CliRunner, stub: StubClient) -> None:
    started = runner.invoke(app, ["start"])
    stopped = runner.invoke(app, ["stop"])

    assert started.exit_code == 0
    assert "Monitoring started." in started.stdout
    assert stopped.exit_code == 0
    assert "running: no" in stopped.stdout
    assert stub.actions == ["start", "stop"]


def test_check_command_renders_errors(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "ROBOT_001: 1 critical, 2 warning" in result.stdout
    assert "report: CRITICAL_report_ROBOT_001_x.txt" in result.stdout
    assert "ROBOT_002: error - sensor offline" in result.stdout


def test_reports_and_report_commands(runner: CliRunner, stub: StubClient) -> None:
    listing = runner.invoke(app, ["reports"])
    body = runner.invoke(app, ["report", "CRITICAL_report_ROBOT_001_x.txt"])

    assert "  - CRITICAL_report_ROBOT_001_x.txt" in listing.stdout
    assert body.stdout == "contents of CRITICAL_report_ROBOT_001_x.txt\n"


def test_base_url_option_reaches_client(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://monitor:9000/", "status"])

    assert result.exit_code == 0
    assert stub.config.base_url == "http://monitor:9000"


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env-host:8080")
    monkeypatch.setenv("CLI_REQUEST_TIMEOUT", "not-a-number")

    config = load_config()

    assert config.base_url == "http://env-host:8080"
    assert config.timeout == 30.0

    monkeypatch.delenv("API_BASE_URL")
    assert load_config(timeout=2.5).base_url == DEFAULT_BASE_URL
