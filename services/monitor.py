"""Background monitoring loop: polling, evaluation and report emission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Any, Dict, List, Optional, Sequence

from datastore.report_ledger import ReportLedger
from models.records import AnalysisResult, PartReading, RobotSnapshot
from services.analyzer import Analyzer, RuleBasedAnalyzer, summarize_part
from services.evaluator import ReportTrigger, StatusEvaluator
from services.history import HistoryBuffer
from services.report import ReportRenderer, format_interval
from services.telemetry import Clock, SimulatedTelemetrySource, TelemetrySource, utc_now
from services.timestamps import filename_timestamp, iso_timestamp
from settings import DEFAULT_ROBOT_IDS, Settings, get_settings
from storage.report_store import ReportStore

logger = logging.getLogger(__name__)


@dataclass
class RobotCheck:
    """Outcome of evaluating one robot during a tick."""

    robot_id: str
    critical_count: int = 0
    warning_count: int = 0
    fallback_parts: List[str] = field(default_factory=list)
    reports: List[str] = field(default_factory=list)
    error: Optional[str] = None


def build_report_filename(robot_id: str, timestamp: datetime, is_critical: bool) -> str:
    report_type = "CRITICAL" if is_critical else "emergency"
    return f"{report_type}_report_{robot_id}_{filename_timestamp(timestamp)}.txt"


def format_log_line(
    robot_id: str, part_count: int, filename: str, timestamp: datetime, is_critical: bool
) -> str:
    log_type = "CRITICAL" if is_critical else "EMERGENCY"
    return (
        f"[{iso_timestamp(timestamp)}] {log_type}: {robot_id} - "
        f"{part_count} critical parts - Report: {filename}"
    )


class MonitorService:
    """Polls every robot on a fixed interval and writes deduplicated incident reports."""

    def __init__(
        self,
        source: TelemetrySource,
        store: ReportStore,
        ledger: ReportLedger,
        history: Optional[HistoryBuffer] = None,
        analyzer: Optional[Analyzer] = None,
        renderer: Optional[ReportRenderer] = None,
        robot_ids: Sequence[str] = DEFAULT_ROBOT_IDS,
        interval: float = 5.0,
        clock: Clock = utc_now,
    ) -> None:
        self.source = source
        self.store = store
        self.ledger = ledger
        self.history = history or HistoryBuffer()
        self.analyzer = analyzer or RuleBasedAnalyzer()
        self.renderer = renderer or ReportRenderer(
            self.analyzer, timezone_name=ledger.timezone_name, interval_seconds=interval
        )
        self.evaluator = StatusEvaluator(self.history)
        self.robot_ids = tuple(robot_ids)
        self.interval = interval
        self.clock = clock
        self.reports_written = 0

        self._running = False
        self._state_lock = Lock()
        self._emit_lock = Lock()
        self._stop_event: Optional[Event] = None
        self._threads: List[Thread] = []

    @property
    def is_running(self) -> bool:
        with self._state_lock:
            return self._running

    def start(self, delay: float = 0.0) -> bool:
        """Purge old reports and begin ticking. Returns ``False`` if already running."""
        with self._state_lock:
            if self._running:
                return False
            self._running = True
            stop_event = Event()
            self._stop_event = stop_event

        logger.info("Background monitoring started")
        try:
            removed = self.store.purge()
        except OSError:
            logger.exception("Failed to clean up the report directory")
        else:
            if removed:
                logger.info("Removed %d stale report entries", removed)

        thread = Thread(
            target=self._run,
            args=(stop_event, delay),
            name="robot-monitor",
            daemon=True,
        )
        with self._state_lock:
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
        thread.start()
        return True

    def stop(self) -> bool:
        """Cancel future ticks; an evaluation already in progress runs to completion."""
        with self._state_lock:
            if not self._running:
                return False
            self._running = False
            if self._stop_event is not None:
                self._stop_event.set()
        logger.info("Background monitoring stopped")
        return True

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        """Stop ticking and wait for every loop thread started so far to exit."""
        self.stop()
        with self._state_lock:
            threads = self._threads
            self._threads = []
        for thread in threads:
            if thread.is_alive():
                thread.join(timeout=timeout)

    def _run(self, stop_event: Event, delay: float) -> None:
        if delay > 0 and stop_event.wait(delay):
            return
        while not stop_event.wait(self.interval):
            self.check_all_robots()

    def check_all_robots(self) -> List[RobotCheck]:
        results: List[RobotCheck] = []
        for robot_id in self.robot_ids:
            try:
                results.append(self.check_robot(robot_id))
            except Exception as exc:
                logger.exception("Robot check failed", extra={"robot_id": robot_id})
                results.append(RobotCheck(robot_id=robot_id, error=str(exc)))
        return results

    def check_robot(self, robot_id: str) -> RobotCheck:
        snapshot = self.source.fetch(robot_id)
        self.history.record(snapshot)

        evaluation = self.evaluator.evaluate(snapshot, monitor_running=self.is_running)
        result = RobotCheck(
            robot_id=robot_id,
            critical_count=len(evaluation.critical_parts),
            warning_count=len(evaluation.warning_parts),
            fallback_parts=[part.id for part in evaluation.fallback_parts],
        )
        logger.info(
            "Robot checked",
            extra={
                "robot_id": robot_id,
                "critical_count": result.critical_count,
                "warning_count": result.warning_count,
            },
        )

        for trigger in evaluation.triggers:
            logger.info(
                "Anomaly detected, generating report",
                extra={"robot_id": robot_id, "reason": trigger.reason.value},
            )
            try:
                filename = self.emit_report(snapshot, trigger)
            except Exception:
                logger.exception(
                    "Failed to generate report",
                    extra={"robot_id": robot_id, "reason": trigger.reason.value},
                )
                continue
            if filename is not None:
                result.reports.append(filename)
        return result

    def emit_report(self, snapshot: RobotSnapshot, trigger: ReportTrigger) -> Optional[str]:
        """Write one report unless the robot was reported on within the dedup window."""
        robot_id = snapshot.robot_id
        with self._emit_lock:
            timestamp = self.clock()
            if self.ledger.is_suppressed(robot_id, timestamp):
                logger.debug("Report suppressed by dedup window", extra={"robot_id": robot_id})
                return None

            if not self.store.enabled:
                logger.warning(
                    "Report storage unavailable; skipping report",
                    extra={"robot_id": robot_id},
                )
                return None

            is_critical = trigger.is_critical
            severity = "CRITICAL" if is_critical else "emergency"
            analyses = self._analyze(robot_id, trigger.parts)
            content = self.renderer.render(
                snapshot, trigger.parts, analyses, timestamp, is_critical
            )
            filename = build_report_filename(robot_id, timestamp, is_critical)

            try:
                self.store.write_report(filename, content)
            except OSError:
                logger.exception(
                    "Failed to write report",
                    extra={"robot_id": robot_id, "report_file": filename},
                )
                return None

            self.ledger.record(robot_id, timestamp)
            self.reports_written += 1
            logger.info(
                "Report written",
                extra={
                    "robot_id": robot_id,
                    "severity": severity,
                    "critical_count": len(trigger.parts),
                    "report_file": filename,
                },
            )

            try:
                self.store.append_log(
                    format_log_line(robot_id, len(trigger.parts), filename, timestamp, is_critical)
                )
            except OSError:
                logger.exception("Failed to append system log", extra={"report_file": filename})
            return filename

    def _analyze(self, robot_id: str, parts: Sequence[PartReading]) -> List[AnalysisResult]:
        return [
            self.analyzer.analyze(summarize_part(part), self.history.entries(robot_id, part.id))
            for part in parts
        ]

    def status(self) -> Dict[str, Any]:
        running = self.is_running
        return {
            "is_running": running,
            "monitoring_interval": format_interval(self.interval) if running else "stopped",
            "reports_generated": len(self.ledger),
            "reports_written": self.reports_written,
            "last_report_times": self.ledger.snapshot(),
        }


def build_default_monitor(settings: Optional[Settings] = None) -> MonitorService:
    """Wire a monitor with the simulated telemetry source and configured storage."""
    settings = settings or get_settings()
    ledger = ReportLedger(
        window_seconds=settings.dedup_window, timezone_name=settings.report_timezone
    )
    try:
        store = ReportStore(Path(settings.reports_dir) if settings.reports_dir else None)
    except OSError:
        logger.warning(
            "Report directory unusable; running without report storage",
            exc_info=True,
            extra={"path": settings.reports_dir},
        )
        store = ReportStore(None)
    return MonitorService(
        source=SimulatedTelemetrySource(),
        store=store,
        ledger=ledger,
        history=HistoryBuffer(max_entries=settings.history_size),
        robot_ids=settings.robot_ids,
        interval=settings.monitor_interval,
    )
