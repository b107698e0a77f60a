"""Bounded per-part history used for trend detection."""

from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Deque, Dict, List, Tuple

from models.records import HistoryEntry, RobotSnapshot

DEFAULT_HISTORY_SIZE = 10

_Key = Tuple[str, str]


class HistoryBuffer:
    """FIFO buffer of recent readings keyed by ``(robot_id, part_id)``."""

    def __init__(self, max_entries: int = DEFAULT_HISTORY_SIZE) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive.")
        self.max_entries = max_entries
        self._entries: Dict[_Key, Deque[HistoryEntry]] = {}
        self._lock = Lock()

    def append(self, robot_id: str, part_id: str, entry: HistoryEntry) -> None:
        with self._lock:
            bucket = self._entries.get((robot_id, part_id))
            if bucket is None:
                bucket = deque(maxlen=self.max_entries)
                self._entries[(robot_id, part_id)] = bucket
            bucket.append(entry)

    def record(self, snapshot: RobotSnapshot) -> None:
        """Fold every part of a snapshot into the buffer."""
        for part in snapshot.parts:
            self.append(snapshot.robot_id, part.id, HistoryEntry.from_reading(part))

    def entries(self, robot_id: str, part_id: str) -> List[HistoryEntry]:
        with self._lock:
            return list(self._entries.get((robot_id, part_id), ()))

    def recent(self, robot_id: str, part_id: str, count: int) -> List[HistoryEntry]:
        if count <= 0:
            return []
        return self.entries(robot_id, part_id)[-count:]

    def parts_for(self, robot_id: str) -> List[str]:
        with self._lock:
            return [part_id for rid, part_id in self._entries if rid == robot_id]

    def snapshot(self, robot_id: str) -> Dict[str, List[HistoryEntry]]:
        with self._lock:
            return {
                part_id: list(bucket)
                for (rid, part_id), bucket in self._entries.items()
                if rid == robot_id
            }
