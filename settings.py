from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


_REPORTS_DIR_ENV = "REPORTS_DIR"
_INTERVAL_ENV = "MONITOR_INTERVAL_SECONDS"
_START_DELAY_ENV = "MONITOR_START_DELAY_SECONDS"
_AUTOSTART_ENV = "MONITOR_AUTOSTART"
_ROBOT_IDS_ENV = "MONITOR_ROBOT_IDS"
_HISTORY_SIZE_ENV = "MONITOR_HISTORY_SIZE"
_DEDUP_WINDOW_ENV = "REPORT_DEDUP_WINDOW_SECONDS"
_TIMEZONE_ENV = "REPORT_TIMEZONE"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_ROBOT_IDS = ("ROBOT_001", "ROBOT_002", "ROBOT_003")


@dataclass(frozen=True)
class Settings:
    reports_dir: Optional[str]
    monitor_interval: float
    start_delay: float
    autostart: bool
    robot_ids: Tuple[str, ...]
    history_size: int
    dedup_window: float
    report_timezone: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_seconds(name: str, default: float, allow_zero: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if parsed > 0 or (allow_zero and parsed == 0):
        return parsed
    return default


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in {"1", "true", "yes", "on"}:
        return True
    if candidate in {"0", "false", "no", "off"}:
        return False
    return default


def _read_robot_ids(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_ROBOT_IDS_ENV)
    if value is None:
        return default
    ids = tuple(item.strip() for item in value.split(",") if item.strip())
    return ids or default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def _read_timezone(default: str) -> str:
    candidate = _read_str_env(_TIMEZONE_ENV, default)
    try:
        ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return default
    return candidate


@lru_cache
def get_settings() -> Settings:
    return Settings(
        reports_dir=_read_optional_env(_REPORTS_DIR_ENV, "./reports"),
        monitor_interval=_read_seconds(_INTERVAL_ENV, 5.0),
        start_delay=_read_seconds(_START_DELAY_ENV, 5.0, allow_zero=True),
        autostart=_read_bool(_AUTOSTART_ENV, True),
        robot_ids=_read_robot_ids(DEFAULT_ROBOT_IDS),
        history_size=_read_positive_int(_HISTORY_SIZE_ENV, 10),
        dedup_window=_read_seconds(_DEDUP_WINDOW_ENV, 300.0),
        report_timezone=_read_timezone("Asia/Tokyo"),
        log_level=_read_log_level("INFO"),
    )
