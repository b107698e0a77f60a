"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class MonitorStatus(BaseModel):
    """Current state of the background monitor."""

    is_running: bool
    monitoring_interval: str = Field(
        ..., description="Tick interval while running, or 'stopped'."
    )
    reports_generated: int = Field(
        ..., ge=0, description="Number of robot/day keys that have produced a report."
    )
    reports_written: int = Field(..., ge=0, description="Report files written since startup.")
    last_report_times: Dict[str, str] = Field(default_factory=dict)


class RobotCheckResult(BaseModel):
    """Outcome of a single robot evaluation."""

    robot_id: str
    critical_count: int = Field(..., ge=0)
    warning_count: int = Field(..., ge=0)
    fallback_parts: List[str] = Field(default_factory=list)
    reports: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class ReportList(BaseModel):
    reports: List[str] = Field(default_factory=list)


class HistoryEntryModel(BaseModel):
    temperature: float
    vibration: float
    humidity: float
    operating_hours: float
    timestamp: datetime


class RobotHistory(BaseModel):
    """Recent readings per part for one robot."""

    robot_id: str
    parts: Dict[str, List[HistoryEntryModel]] = Field(default_factory=dict)
