"""Telemetry sources and the part-status classification rules."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Sequence

from models.records import PartReading, PartSpec, PartStatus, RobotSnapshot

ROBOT_PARTS: tuple[PartSpec, ...] = (
    PartSpec(id="head", name="Head"),
    PartSpec(id="left_arm", name="Left Arm"),
    PartSpec(id="right_arm", name="Right Arm"),
    PartSpec(id="torso", name="Torso"),
    PartSpec(id="left_leg", name="Left Leg"),
    PartSpec(id="right_leg", name="Right Leg"),
    PartSpec(id="base", name="Base"),
)

SEED_RANGE = 1000.0

# Tier 1 (critical) thresholds.
CRITICAL_TEMPERATURE = 60.0
CRITICAL_VIBRATION = 0.4
CRITICAL_HUMIDITY = 80.0
CRITICAL_OPERATING_HOURS = 40.0
CRITICAL_VOLTAGE = 22.5
CRITICAL_CPU_LOAD = 85.0

# Tier 2 (warning) thresholds.
WARNING_TEMPERATURE = 50.0
WARNING_VIBRATION = 0.3
WARNING_HUMIDITY = 70.0
WARNING_OPERATING_HOURS = 30.0
WARNING_VOLTAGE = 23.0
WARNING_CPU_LOAD = 75.0

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TelemetrySource(Protocol):
    """Anything that can produce a snapshot of a robot's parts."""

    def fetch(self, robot_id: str) -> RobotSnapshot:
        ...


@dataclass(frozen=True)
class PartMetrics:
    """Raw simulated metrics for one part plus the spike flags behind them."""

    temperature: float
    vibration: float
    humidity: float
    operating_hours: float
    voltage: float
    cpu_load: float
    abnormal_noise: bool
    temperature_spike: bool = False
    vibration_spike: bool = False
    humidity_spike: bool = False

    @property
    def long_run(self) -> bool:
        return self.operating_hours > CRITICAL_OPERATING_HOURS

    @property
    def low_voltage(self) -> bool:
        return self.voltage < CRITICAL_VOLTAGE

    @property
    def high_cpu(self) -> bool:
        return self.cpu_load > CRITICAL_CPU_LOAD

    @property
    def any_spike(self) -> bool:
        return self.temperature_spike or self.vibration_spike or self.humidity_spike


def derive_metrics(seed: float) -> PartMetrics:
    """Map a seed in ``[0, 1000)`` onto a deterministic set of part metrics."""
    temperature_spike = seed % 10 == 0
    temperature = 35 + (seed % 20) + (20 if temperature_spike else 0)
    return PartMetrics(
        temperature=temperature,
        vibration=0.1 + (seed % 30) / 200,
        humidity=40 + (seed % 30),
        operating_hours=1 + (seed % 48),
        voltage=24 - (seed % 8) / 10,
        cpu_load=30 + (seed % 70),
        abnormal_noise=seed % 19 == 0,
        temperature_spike=temperature_spike,
        vibration_spike=seed % 13 == 0,
        humidity_spike=seed % 17 == 0,
    )


def is_tier1(metrics: PartMetrics) -> bool:
    return (
        metrics.temperature > CRITICAL_TEMPERATURE
        or metrics.vibration > CRITICAL_VIBRATION
        or metrics.humidity > CRITICAL_HUMIDITY
        or metrics.long_run
        or metrics.low_voltage
        or metrics.high_cpu
        or metrics.abnormal_noise
        or metrics.any_spike
    )


def is_tier2(metrics: PartMetrics) -> bool:
    return (
        metrics.temperature > WARNING_TEMPERATURE
        or metrics.vibration > WARNING_VIBRATION
        or metrics.humidity > WARNING_HUMIDITY
        or metrics.operating_hours > WARNING_OPERATING_HOURS
        or metrics.voltage < WARNING_VOLTAGE
        or metrics.cpu_load > WARNING_CPU_LOAD
    )


def classify_status(metrics: PartMetrics) -> PartStatus:
    if is_tier1(metrics):
        return PartStatus.critical
    if is_tier2(metrics):
        return PartStatus.warning
    return PartStatus.normal


def build_reading(part: PartSpec, metrics: PartMetrics, timestamp: datetime) -> PartReading:
    return PartReading(
        id=part.id,
        name=part.name,
        temperature=metrics.temperature,
        vibration=metrics.vibration,
        humidity=metrics.humidity,
        operating_hours=metrics.operating_hours,
        voltage=metrics.voltage,
        cpu_load=metrics.cpu_load,
        abnormal_noise=metrics.abnormal_noise,
        status=classify_status(metrics),
        last_update=timestamp,
    )


def robot_display_name(robot_id: str) -> str:
    return f"Robot {robot_id}"


class SimulatedTelemetrySource:
    """Random telemetry generator standing in for real sensor polling."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        parts: Sequence[PartSpec] = ROBOT_PARTS,
        clock: Clock = utc_now,
    ) -> None:
        self.rng = rng or random.Random()
        self.parts = tuple(parts)
        self.clock = clock

    def fetch(self, robot_id: str) -> RobotSnapshot:
        now = self.clock()
        readings = tuple(
            build_reading(part, derive_metrics(self.rng.random() * SEED_RANGE), now)
            for part in self.parts
        )
        return RobotSnapshot(
            robot_id=robot_id,
            robot_name=robot_display_name(robot_id),
            parts=readings,
            last_check=now,
        )
