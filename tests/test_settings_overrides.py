from __future__ import annotations

from services.monitor import build_default_monitor
from settings import DEFAULT_ROBOT_IDS, get_settings
from support import BASE_TIME


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    reports_dir = tmp_path / "reports"

    monkeypatch.setenv("REPORTS_DIR", str(reports_dir))
    monkeypatch.setenv("MONITOR_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("MONITOR_START_DELAY_SECONDS", "0")
    monkeypatch.setenv("MONITOR_AUTOSTART", "no")
    monkeypatch.setenv("MONITOR_ROBOT_IDS", " ARM_A, ARM_B ,,")
    monkeypatch.setenv("MONITOR_HISTORY_SIZE", "4")
    monkeypatch.setenv("REPORT_DEDUP_WINDOW_SECONDS", "60")
    monkeypatch.setenv("REPORT_TIMEZONE", "UTC")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        monitor = build_default_monitor(settings)

        assert settings.reports_dir == str(reports_dir)
        assert settings.monitor_interval == 2.5
        assert settings.start_delay == 0
        assert settings.autostart is False
        assert settings.robot_ids == ("ARM_A", "ARM_B")
        assert settings.log_level == "DEBUG"
        assert monitor.store.root_path == reports_dir
        assert reports_dir.is_dir()
        assert monitor.interval == 2.5
        assert monitor.robot_ids == ("ARM_A", "ARM_B")
        assert monitor.history.max_entries == 4
        assert monitor.ledger.window_seconds == 60
        assert monitor.ledger.timezone_name == "UTC"
    finally:
        get_settings.cache_clear()


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("MONITOR_INTERVAL_SECONDS", "-1")
    monkeypatch.setenv("MONITOR_HISTORY_SIZE", "ten")
    monkeypatch.setenv("MONITOR_AUTOSTART", "maybe")
    monkeypatch.setenv("MONITOR_ROBOT_IDS", " , ")
    monkeypatch.setenv("REPORT_TIMEZONE", "   ")
    get_settings.cache_clear()

    try:
        settings = get_settings()

        assert settings.monitor_interval == 5.0
        assert settings.history_size == 10
        assert settings.autostart is True
        assert settings.robot_ids == DEFAULT_ROBOT_IDS
        assert settings.report_timezone == "Asia/Tokyo"
    finally:
        get_settings.cache_clear()


def test_empty_reports_dir_disables_storage(monkeypatch) -> None:
    monkeypatch.setenv("REPORTS_DIR", "")
    get_settings.cache_clear()

    try:
        monitor = build_default_monitor()

        assert get_settings().reports_dir is None
        assert monitor.store.enabled is False
    finally:
        get_settings.cache_clear()


def test_unknown_timezone_falls_back_to_default(monkeypatch) -> None:
    monkeypatch.setenv("REPORT_TIMEZONE", "Mars/Olympus")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        monitor = build_default_monitor(settings)

        assert settings.report_timezone == "Asia/Tokyo"
        assert monitor.ledger.key_for("ROBOT_001", BASE_TIME) == "ROBOT_001_2024-01-01"
    finally:
        get_settings.cache_clear()


def test_unusable_reports_dir_degrades_to_no_storage(monkeypatch, tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    monkeypatch.setenv("REPORTS_DIR", str(blocker / "reports"))
    get_settings.cache_clear()

    try:
        monitor = build_default_monitor()

        assert monitor.store.enabled is False
    finally:
        get_settings.cache_clear()
