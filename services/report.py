"""Plain-text incident report rendering."""

from __future__ import annotations

import random
from datetime import datetime
from typing import List, Optional, Sequence

from models.records import AnalysisResult, PartReading, RobotSnapshot
from services.analyzer import Analyzer
from services.telemetry import (
    CRITICAL_CPU_LOAD,
    CRITICAL_HUMIDITY,
    CRITICAL_OPERATING_HOURS,
    CRITICAL_TEMPERATURE,
    CRITICAL_VIBRATION,
    CRITICAL_VOLTAGE,
    WARNING_CPU_LOAD,
    WARNING_HUMIDITY,
    WARNING_OPERATING_HOURS,
    WARNING_TEMPERATURE,
    WARNING_VIBRATION,
    WARNING_VOLTAGE,
)
from services.timestamps import DEFAULT_REPORT_TIMEZONE, iso_timestamp, local_display

BANNER_WIDTH = 80
SECTION_WIDTH = 60

CRITICAL_HEADERS = (
    "CRITICAL REPORT - EMERGENCY STOP REQUESTED",
    "CRITICAL FAILURE REPORT - IMMEDIATE RESPONSE REQUIRED",
    "CRITICAL FAULT REPORT - EMERGENCY RESPONSE ORDERED",
)
EMERGENCY_HEADERS = (
    "Factory Monitoring System - Emergency Report",
    "Anomaly Detection Report - Prompt Inspection Recommended",
    "Caution Report - Preventive Maintenance Recommended",
)

CRITICAL_PROCEDURE = (
    "Trigger the robot's emergency stop immediately",
    "Notify the plant manager without delay",
    "Evacuate all personnel from the safety zone",
    "Request an emergency response from the maintenance team",
    "Carry out a detailed inspection and repair",
    "Complete a full safety check before restarting",
)
EMERGENCY_PROCEDURE = (
    "Stop the robot's operation",
    "Carry out a safety check",
    "Contact the maintenance team",
    "Carry out a detailed inspection",
    "Complete a safety check before restarting",
)

VOLTAGE_SUPPLEMENT = "Measure power quality (voltage drop and ripple) and inspect wiring and connectors"
CPU_SUPPLEMENT = "Level controller load, stop unnecessary processes and improve heat dissipation"
NOISE_SUPPLEMENT = "Diagnose bearing, gear and fan health (vibration and acoustic analysis)"


def format_interval(seconds: float) -> str:
    value = int(seconds) if float(seconds).is_integer() else seconds
    unit = "second" if value == 1 else "seconds"
    return f"{value} {unit}"


def _hours(value: float) -> str:
    return f"{value:g}h"


def describe_events(part: PartReading) -> List[str]:
    """Human-readable events for every tier-1 or tier-2 threshold a part crosses."""
    events: List[str] = []
    if part.temperature > CRITICAL_TEMPERATURE:
        events.append(f"high temperature ({part.temperature:.1f}°C)")
    elif part.temperature > WARNING_TEMPERATURE:
        events.append(f"temperature rising ({part.temperature:.1f}°C)")

    if part.vibration > CRITICAL_VIBRATION:
        events.append(f"high vibration ({part.vibration:.3f})")
    elif part.vibration > WARNING_VIBRATION:
        events.append(f"vibration rising ({part.vibration:.3f})")

    if part.humidity > CRITICAL_HUMIDITY:
        events.append(f"high humidity ({part.humidity:.1f}%)")
    elif part.humidity > WARNING_HUMIDITY:
        events.append(f"humidity rising ({part.humidity:.1f}%)")

    if part.operating_hours > CRITICAL_OPERATING_HOURS:
        events.append(f"long run ({_hours(part.operating_hours)})")
    elif part.operating_hours > WARNING_OPERATING_HOURS:
        events.append(f"operating hours increasing ({_hours(part.operating_hours)})")

    if part.voltage is not None:
        if part.voltage < CRITICAL_VOLTAGE:
            events.append(f"low voltage ({part.voltage:.1f}V)")
        elif part.voltage < WARNING_VOLTAGE:
            events.append(f"voltage sagging ({part.voltage:.1f}V)")

    if part.cpu_load is not None:
        if part.cpu_load > CRITICAL_CPU_LOAD:
            events.append(f"CPU overload ({part.cpu_load:.0f}%)")
        elif part.cpu_load > WARNING_CPU_LOAD:
            events.append(f"CPU load rising ({part.cpu_load:.0f}%)")

    if part.abnormal_noise:
        events.append("abnormal noise detected")
    return events


def supplemental_recommendations(parts: Sequence[PartReading]) -> List[str]:
    lines: List[str] = []
    if any(p.voltage is not None and p.voltage < WARNING_VOLTAGE for p in parts):
        lines.append(VOLTAGE_SUPPLEMENT)
    if any(p.cpu_load is not None and p.cpu_load > WARNING_CPU_LOAD for p in parts):
        lines.append(CPU_SUPPLEMENT)
    if any(p.abnormal_noise for p in parts):
        lines.append(NOISE_SUPPLEMENT)
    return lines


class ReportRenderer:
    """Build the text body of an incident report."""

    def __init__(
        self,
        analyzer: Analyzer,
        timezone_name: str = DEFAULT_REPORT_TIMEZONE,
        interval_seconds: float = 5.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.analyzer = analyzer
        self.timezone_name = timezone_name
        self.interval_seconds = interval_seconds
        self.rng = rng or random.Random()

    def choose_header(self, is_critical: bool) -> str:
        return self.rng.choice(CRITICAL_HEADERS if is_critical else EMERGENCY_HEADERS)

    def render(
        self,
        snapshot: RobotSnapshot,
        parts: Sequence[PartReading],
        analyses: Sequence[AnalysisResult],
        timestamp: datetime,
        is_critical: bool,
    ) -> str:
        if len(analyses) != len(parts):
            raise ValueError("Expected one analysis result per affected part.")

        iso_time = iso_timestamp(timestamp)
        lines: List[str] = []

        lines.append("=" * BANNER_WIDTH)
        lines.append(self.choose_header(is_critical))
        if is_critical:
            lines.append("!!! IMMEDIATE ACTION REQUIRED !!!")
        lines.append("=" * BANNER_WIDTH)
        lines.append("")

        lines.append(f"Robot ID: {snapshot.robot_id}")
        lines.append(f"Robot name: {snapshot.robot_name}")
        lines.append(f"Report time: {local_display(timestamp, self.timezone_name)}")
        lines.append(f"ISO time: {iso_time}")
        lines.append(f"Severity: {'CRITICAL' if is_critical else 'warning'}")
        lines.append(f"Affected parts: {len(parts)}")
        lines.append("")

        if is_critical:
            lines.extend(self._section("CRITICAL error details"))
            lines.append(f"Consecutive danger detections: {len(parts)}")
            lines.append(f"Dangerous parts: {len(parts)}")
            for index, part in enumerate(parts, start=1):
                lines.append(
                    f"  {index}. {part.name}: temperature {part.temperature:.1f}°C, "
                    f"vibration {part.vibration:.3f}, status {part.status.value}"
                )
            lines.append("")

        lines.extend(self._section("Affected part details"))
        for index, (part, analysis) in enumerate(zip(parts, analyses), start=1):
            lines.extend(self._part_block(index, part, analysis))

        lines.extend(self._section("Analyzer overview"))
        lines.append(f"Analyzer: {self.analyzer.name}")
        lines.append(f"Version: {self.analyzer.version}")
        lines.append(f"Analysis time: {iso_time}")
        lines.append(f"Parts analyzed: {len(parts)}")
        lines.append("")
        lines.append("Overall recommendations:")
        overall = list(self.analyzer.aggregate_recommendations(parts))
        overall.extend(supplemental_recommendations(parts))
        lines.extend(f"- {item}" for item in overall)
        lines.append("")

        if is_critical:
            lines.extend(self._section("CRITICAL response procedure"))
            procedure = CRITICAL_PROCEDURE
        else:
            lines.extend(self._section("Recommended response"))
            procedure = EMERGENCY_PROCEDURE
        lines.extend(f"{index}. {step}" for index, step in enumerate(procedure, start=1))
        lines.append("")

        lines.extend(self._section("Monitoring system information"))
        lines.append("Monitor: background automatic monitoring")
        lines.append(f"Monitoring interval: {format_interval(self.interval_seconds)}")
        lines.append("Report trigger: automatic on threshold breach")
        lines.append("Environment: production line")
        lines.append("")

        lines.append("=" * BANNER_WIDTH)
        lines.append("End of CRITICAL Report" if is_critical else "End of Emergency Report")
        lines.append("=" * BANNER_WIDTH)
        return "\n".join(lines) + "\n"

    @staticmethod
    def _section(title: str) -> List[str]:
        return ["-" * SECTION_WIDTH, title, "-" * SECTION_WIDTH, ""]

    @staticmethod
    def _part_block(index: int, part: PartReading, analysis: AnalysisResult) -> List[str]:
        block = [
            f"{index}. {part.name}",
            f"   Temperature: {part.temperature:.1f}°C",
            f"   Vibration: {part.vibration:.3f}",
            f"   Status: {part.status.value.upper()}",
            f"   Humidity: {part.humidity:.1f}%",
            f"   Operating hours: {_hours(part.operating_hours)}",
        ]
        if part.voltage is not None:
            block.append(f"   Voltage: {part.voltage:.1f}V")
        if part.cpu_load is not None:
            block.append(f"   CPU load: {part.cpu_load:.0f}%")
        block.append(f"   Abnormal noise: {'yes' if part.abnormal_noise else 'no'}")
        events = describe_events(part)
        if events:
            block.append(f"   Events: {', '.join(events)}")
        block.append(f"   Analysis: {analysis.summary}")
        block.append(f"   Confidence: {analysis.confidence * 100:.1f}%")
        block.append("   Recommendations:")
        block.extend(f"     - {item}" for item in analysis.recommendations)
        block.append("")
        return block
