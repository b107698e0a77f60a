"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


class PartStatus(str, Enum):
    """Health classification of a single robot part."""

    normal = "normal"
    warning = "warning"
    critical = "critical"
    emergency = "emergency"

    @property
    def is_critical(self) -> bool:
        return self in (PartStatus.critical, PartStatus.emergency)


@dataclass(frozen=True, slots=True)
class PartSpec:
    """A monitored part on every robot."""

    id: str
    name: str


@dataclass(frozen=True, slots=True)
class PartReading:
    """One telemetry sample for a part, captured at a single tick."""

    id: str
    name: str
    temperature: float
    vibration: float
    humidity: float
    operating_hours: float
    voltage: Optional[float]
    cpu_load: Optional[float]
    abnormal_noise: bool
    status: PartStatus
    last_update: datetime

    def with_status(self, status: PartStatus) -> "PartReading":
        return replace(self, status=status)


@dataclass(frozen=True, slots=True)
class RobotSnapshot:
    """All part readings for one robot at one tick."""

    robot_id: str
    robot_name: str
    parts: Tuple[PartReading, ...]
    last_check: datetime

    def find_part(self, part_id: str) -> Optional[PartReading]:
        for part in self.parts:
            if part.id == part_id:
                return part
        return None


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Trend-relevant subset of a reading kept in the history buffer."""

    temperature: float
    vibration: float
    humidity: float
    operating_hours: float
    timestamp: datetime

    @classmethod
    def from_reading(cls, reading: PartReading) -> "HistoryEntry":
        return cls(
            temperature=reading.temperature,
            vibration=reading.vibration,
            humidity=reading.humidity,
            operating_hours=reading.operating_hours,
            timestamp=reading.last_update,
        )


@dataclass(slots=True)
class AnalysisResult:
    """Opaque analyzer output rendered into reports."""

    summary: str
    confidence: float
    recommendations: List[str] = field(default_factory=list)
