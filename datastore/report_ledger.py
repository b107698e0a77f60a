from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import Dict, Optional

from services.timestamps import (
    DEFAULT_REPORT_TIMEZONE,
    date_key,
    iso_timestamp,
    parse_iso_timestamp,
)

DEFAULT_DEDUP_WINDOW_SECONDS = 300.0


class ReportLedger:
    """Remembers the last report per robot and calendar day.

    Keys are ``"{robot_id}_{YYYY-MM-DD}"`` with the date taken in a fixed
    timezone. A key blocks further reports for ``window_seconds`` after its
    last emission; a report on either side of a midnight in that timezone
    lands on a different key and is not suppressed.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_DEDUP_WINDOW_SECONDS,
        timezone_name: str = DEFAULT_REPORT_TIMEZONE,
    ) -> None:
        self.window_seconds = window_seconds
        self.timezone_name = timezone_name
        self._items: Dict[str, str] = {}
        self._lock = Lock()

    def key_for(self, robot_id: str, moment: datetime) -> str:
        return f"{robot_id}_{date_key(moment, self.timezone_name)}"

    def last_emission(self, key: str) -> Optional[datetime]:
        with self._lock:
            raw = self._items.get(key)
        if raw is None:
            return None
        return parse_iso_timestamp(raw)

    def is_suppressed(self, robot_id: str, moment: datetime) -> bool:
        last = self.last_emission(self.key_for(robot_id, moment))
        if last is None:
            return False
        return (moment - last).total_seconds() < self.window_seconds

    def record(self, robot_id: str, moment: datetime) -> str:
        key = self.key_for(robot_id, moment)
        with self._lock:
            self._items[key] = iso_timestamp(moment)
        return key

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
