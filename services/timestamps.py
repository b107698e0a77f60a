"""Timestamp renderings shared by reports, filenames and the dedup ledger."""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

DEFAULT_REPORT_TIMEZONE = "Asia/Tokyo"


@lru_cache
def get_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 string with millisecond precision, e.g. ``2024-01-01T00:00:00.000Z``."""
    utc = _as_utc(moment)
    return f"{utc.strftime('%Y-%m-%dT%H:%M:%S')}.{utc.microsecond // 1000:03d}Z"


def filename_timestamp(moment: datetime) -> str:
    return iso_timestamp(moment).replace(":", "-").replace(".", "-")


def parse_iso_timestamp(value: str) -> datetime:
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(candidate))


def local_display(moment: datetime, zone: str = DEFAULT_REPORT_TIMEZONE) -> str:
    local = _as_utc(moment).astimezone(get_zone(zone))
    return local.strftime("%Y/%m/%d %H:%M:%S %Z")


def date_key(moment: datetime, zone: str = DEFAULT_REPORT_TIMEZONE) -> str:
    """Calendar date of ``moment`` in ``zone`` regardless of the process timezone."""
    return _as_utc(moment).astimezone(get_zone(zone)).strftime("%Y-%m-%d")
