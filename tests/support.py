"""Deterministic stand-ins shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from datastore.report_ledger import ReportLedger
from models.records import AnalysisResult, HistoryEntry, PartReading, PartStatus, RobotSnapshot
from services.monitor import MonitorService
from services.telemetry import PartMetrics, classify_status
from storage.report_store import ReportStore

BASE_TIME = datetime(2024, 1, 1, 3, 0, tzinfo=timezone.utc)


def make_part(
    part_id: str = "head",
    name: Optional[str] = None,
    temperature: float = 40.0,
    vibration: float = 0.15,
    humidity: float = 45.0,
    operating_hours: float = 10.0,
    voltage: Optional[float] = 24.0,
    cpu_load: Optional[float] = 40.0,
    abnormal_noise: bool = False,
    status: Optional[PartStatus] = None,
    timestamp: datetime = BASE_TIME,
) -> PartReading:
    if status is None:
        status = classify_status(
            PartMetrics(
                temperature=temperature,
                vibration=vibration,
                humidity=humidity,
                operating_hours=operating_hours,
                voltage=24.0 if voltage is None else voltage,
                cpu_load=40.0 if cpu_load is None else cpu_load,
                abnormal_noise=abnormal_noise,
            )
        )
    return PartReading(
        id=part_id,
        name=name or part_id.replace("_", " ").title(),
        temperature=temperature,
        vibration=vibration,
        humidity=humidity,
        operating_hours=operating_hours,
        voltage=voltage,
        cpu_load=cpu_load,
        abnormal_noise=abnormal_noise,
        status=status,
        last_update=timestamp,
    )


def make_snapshot(
    robot_id: str = "ROBOT_001",
    parts: Optional[Sequence[PartReading]] = None,
    timestamp: datetime = BASE_TIME,
) -> RobotSnapshot:
    return RobotSnapshot(
        robot_id=robot_id,
        robot_name=f"Robot {robot_id}",
        parts=tuple(parts if parts is not None else [make_part(timestamp=timestamp)]),
        last_check=timestamp,
    )


def make_entry(
    temperature: float = 40.0,
    vibration: float = 0.15,
    humidity: float = 45.0,
    operating_hours: float = 10.0,
    timestamp: datetime = BASE_TIME,
) -> HistoryEntry:
    return HistoryEntry(
        temperature=temperature,
        vibration=vibration,
        humidity=humidity,
        operating_hours=operating_hours,
        timestamp=timestamp,
    )


class FixedClock:
    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


Scripted = Union[RobotSnapshot, Exception]


class ScriptedSource:
    """Replays snapshots per robot; the last one repeats once the script runs out."""

    def __init__(self, scripts: Mapping[str, Sequence[Scripted]]) -> None:
        self._scripts: Dict[str, List[Scripted]] = {k: list(v) for k, v in scripts.items()}
        self.calls: List[str] = []

    def fetch(self, robot_id: str) -> RobotSnapshot:
        self.calls.append(robot_id)
        script = self._scripts.get(robot_id)
        if not script:
            return make_snapshot(robot_id)
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item


class StubAnalyzer:
    name = "Stub Analyzer"
    version = "0.0.1"

    def __init__(self, failing_parts: Sequence[str] = ()) -> None:
        self.calls: List[tuple[Dict[str, Any], List[HistoryEntry]]] = []
        self.failing_parts = set(failing_parts)

    def analyze(
        self, part_summary: Mapping[str, Any], history: Sequence[HistoryEntry]
    ) -> AnalysisResult:
        self.calls.append((dict(part_summary), list(history)))
        if part_summary["part_id"] in self.failing_parts:
            raise RuntimeError("analyzer backend down")
        return AnalysisResult(
            summary=f"stub summary for {part_summary['part_id']}",
            confidence=0.875,
            recommendations=["stub recommendation"],
        )

    def aggregate_recommendations(self, parts: Sequence[PartReading]) -> List[str]:
        return ["stub overall"]


def build_monitor(
    reports_dir: Optional[Path],
    source: Any,
    clock: Optional[FixedClock] = None,
    robot_ids: Sequence[str] = ("ROBOT_001",),
    store: Optional[ReportStore] = None,
    interval: float = 5.0,
) -> MonitorService:
    return MonitorService(
        source=source,
        store=store if store is not None else ReportStore(root_path=reports_dir),
        ledger=ReportLedger(),
        analyzer=StubAnalyzer(),
        robot_ids=robot_ids,
        interval=interval,
        clock=clock or FixedClock(),
    )


def report_files(reports_dir: Path) -> List[Path]:
    return sorted(path for path in reports_dir.glob("*.txt"))
