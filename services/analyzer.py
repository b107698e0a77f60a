"""Diagnostic analysis of affected parts.

The monitor only depends on the :class:`Analyzer` protocol. ``RuleBasedAnalyzer``
is the built-in implementation: it looks at the current values and the short
history kept by :class:`services.history.HistoryBuffer` and produces a summary,
a confidence score and maintenance recommendations.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Protocol, Sequence

from models.records import AnalysisResult, HistoryEntry, PartReading
from services.telemetry import (
    CRITICAL_TEMPERATURE,
    CRITICAL_VIBRATION,
    WARNING_TEMPERATURE,
    WARNING_VIBRATION,
)

# Degrees per sample above which the temperature is considered to be climbing.
RISING_TREND_PER_SAMPLE = 0.5


class Analyzer(Protocol):
    name: str
    version: str

    def analyze(
        self, part_summary: Mapping[str, Any], history: Sequence[HistoryEntry]
    ) -> AnalysisResult:
        ...

    def aggregate_recommendations(self, parts: Sequence[PartReading]) -> List[str]:
        ...


def summarize_part(part: PartReading) -> Dict[str, Any]:
    """Subset of a reading handed to the analyzer."""
    return {
        "part_id": part.id,
        "part_name": part.name,
        "temperature": part.temperature,
        "vibration": part.vibration,
        "status": part.status.value,
    }


def temperature_trend(history: Sequence[HistoryEntry]) -> float:
    """Average temperature change per sample across ``history``."""
    if len(history) < 2:
        return 0.0
    return (history[-1].temperature - history[0].temperature) / (len(history) - 1)


class RuleBasedAnalyzer:
    name = "Robot Diagnostic Analyzer"
    version = "1.0.0"

    def __init__(self, base_confidence: float = 0.6, max_confidence: float = 0.95) -> None:
        self.base_confidence = base_confidence
        self.max_confidence = max_confidence

    def analyze(
        self, part_summary: Mapping[str, Any], history: Sequence[HistoryEntry]
    ) -> AnalysisResult:
        name = part_summary.get("part_name") or part_summary.get("part_id") or "part"
        temperature = float(part_summary.get("temperature") or 0.0)
        vibration = float(part_summary.get("vibration") or 0.0)

        findings: List[str] = []
        recommendations: List[str] = []

        if temperature > CRITICAL_TEMPERATURE:
            findings.append("overheating")
            recommendations.append("Stop the drive and inspect cooling and lubrication")
        elif temperature > WARNING_TEMPERATURE:
            findings.append("elevated temperature")
            recommendations.append("Reduce duty cycle and check cooling airflow")

        if vibration > CRITICAL_VIBRATION:
            findings.append("excessive vibration")
            recommendations.append("Inspect bearings and mounting bolts for wear or looseness")
        elif vibration > WARNING_VIBRATION:
            findings.append("increased vibration")
            recommendations.append("Schedule a vibration analysis at the next maintenance window")

        trend = temperature_trend(history)
        if trend > RISING_TREND_PER_SAMPLE:
            findings.append(f"temperature rising {trend:.1f}°C per sample")
            recommendations.append("Track temperature closely until the trend levels off")

        if not findings:
            summary = f"{name}: status {part_summary.get('status', 'unknown')} without a dominant anomaly"
            recommendations.append("Continue monitoring and verify sensor calibration")
        else:
            summary = f"{name}: {', '.join(findings)}"

        confidence = min(
            self.max_confidence, self.base_confidence + 0.035 * len(history)
        )
        return AnalysisResult(
            summary=summary, confidence=confidence, recommendations=recommendations
        )

    def aggregate_recommendations(self, parts: Sequence[PartReading]) -> List[str]:
        critical = [part for part in parts if part.status.is_critical]
        recommendations: List[str] = []
        if critical:
            names = ", ".join(part.name for part in critical)
            recommendations.append(f"Prioritize inspection of critical parts: {names}")
        if any(part.temperature > WARNING_TEMPERATURE for part in parts):
            recommendations.append("Review thermal load and ambient cooling on the line")
        if any(part.vibration > WARNING_VIBRATION for part in parts):
            recommendations.append("Verify alignment and balance of moving assemblies")
        recommendations.append("Record findings in the maintenance log after inspection")
        return recommendations
