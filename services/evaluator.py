"""Classification of robot snapshots into report triggers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from models.records import HistoryEntry, PartReading, PartStatus, RobotSnapshot
from services.history import HistoryBuffer
from services.telemetry import (
    CRITICAL_HUMIDITY,
    CRITICAL_OPERATING_HOURS,
    CRITICAL_TEMPERATURE,
    CRITICAL_VIBRATION,
    WARNING_TEMPERATURE,
)

SUSTAINED_WINDOW = 3


class TriggerReason(str, Enum):
    critical = "critical"
    warning = "warning"
    fallback = "fallback"


@dataclass(frozen=True)
class ReportTrigger:
    """A set of parts that should be written up in one report."""

    reason: TriggerReason
    parts: Tuple[PartReading, ...]

    @property
    def is_critical(self) -> bool:
        return any(part.status.is_critical for part in self.parts)


@dataclass
class Evaluation:
    robot_id: str
    critical_parts: List[PartReading] = field(default_factory=list)
    warning_parts: List[PartReading] = field(default_factory=list)
    fallback_parts: List[PartReading] = field(default_factory=list)
    triggers: List[ReportTrigger] = field(default_factory=list)


def is_sustained_anomaly(entry: HistoryEntry) -> bool:
    return (
        entry.temperature > CRITICAL_TEMPERATURE
        or entry.vibration > CRITICAL_VIBRATION
        or entry.humidity > CRITICAL_HUMIDITY
        or entry.operating_hours > CRITICAL_OPERATING_HOURS
    )


def _synthesize_part(part_id: str, entry: HistoryEntry) -> PartReading:
    return PartReading(
        id=part_id,
        name=part_id,
        temperature=entry.temperature,
        vibration=entry.vibration,
        humidity=entry.humidity,
        operating_hours=entry.operating_hours,
        voltage=None,
        cpu_load=None,
        abnormal_noise=False,
        status=PartStatus.critical,
        last_update=entry.timestamp,
    )


class StatusEvaluator:
    """Split snapshots into critical and warning sets and decide what to report."""

    def __init__(self, history: HistoryBuffer) -> None:
        self.history = history

    def evaluate(self, snapshot: RobotSnapshot, monitor_running: bool) -> Evaluation:
        evaluation = Evaluation(robot_id=snapshot.robot_id)
        evaluation.critical_parts = [
            part for part in snapshot.parts if part.status.is_critical
        ]
        evaluation.warning_parts = [
            part
            for part in snapshot.parts
            if part.temperature > WARNING_TEMPERATURE or part.status == PartStatus.warning
        ]

        if evaluation.critical_parts:
            evaluation.triggers.append(
                ReportTrigger(TriggerReason.critical, tuple(evaluation.critical_parts))
            )
        elif evaluation.warning_parts:
            evaluation.triggers.append(
                ReportTrigger(TriggerReason.warning, tuple(evaluation.warning_parts))
            )

        # Anomalies sustained right before a stop would otherwise never be written up.
        if not monitor_running and not evaluation.critical_parts:
            evaluation.fallback_parts = self.sustained_anomalies(snapshot)
            if evaluation.fallback_parts:
                evaluation.triggers.append(
                    ReportTrigger(TriggerReason.fallback, tuple(evaluation.fallback_parts))
                )

        return evaluation

    def sustained_anomalies(self, snapshot: RobotSnapshot) -> List[PartReading]:
        suspicious: List[PartReading] = []
        for part_id, entries in self.history.snapshot(snapshot.robot_id).items():
            recent = entries[-SUSTAINED_WINDOW:]
            if len(recent) < SUSTAINED_WINDOW:
                continue
            if not all(is_sustained_anomaly(entry) for entry in recent):
                continue
            live = snapshot.find_part(part_id)
            if live is not None:
                suspicious.append(live.with_status(PartStatus.critical))
            else:
                suspicious.append(_synthesize_part(part_id, recent[-1]))
        return suspicious
