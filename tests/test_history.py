from __future__ import annotations

from datetime import timedelta

import pytest

from services.history import HistoryBuffer
from support import BASE_TIME, make_entry, make_part, make_snapshot


def test_buffer_evicts_oldest_entries_first() -> None:
    history = HistoryBuffer()

    for index in range(15):
        history.append("ROBOT_001", "head", make_entry(temperature=float(index)))

    entries = history.entries("ROBOT_001", "head")
    assert len(entries) == 10
    assert [entry.temperature for entry in entries] == [float(i) for i in range(5, 15)]


def test_buffers_are_independent_per_robot_and_part() -> None:
    history = HistoryBuffer(max_entries=3)

    history.append("ROBOT_001", "head", make_entry(temperature=1.0))
    history.append("ROBOT_001", "base", make_entry(temperature=2.0))
    history.append("ROBOT_002", "head", make_entry(temperature=3.0))

    assert [e.temperature for e in history.entries("ROBOT_001", "head")] == [1.0]
    assert sorted(history.parts_for("ROBOT_001")) == ["base", "head"]
    assert history.entries("ROBOT_003", "head") == []


def test_record_folds_snapshot_into_history() -> None:
    history = HistoryBuffer()
    later = BASE_TIME + timedelta(seconds=5)
    snapshot = make_snapshot(
        parts=[
            make_part("head", temperature=61.0, timestamp=later),
            make_part("torso", humidity=72.0, timestamp=later),
        ],
        timestamp=later,
    )

    history.record(snapshot)

    head = history.entries("ROBOT_001", "head")
    assert len(head) == 1
    assert head[0].temperature == 61.0
    assert head[0].timestamp == later
    assert history.entries("ROBOT_001", "torso")[0].humidity == 72.0


def test_recent_and_entries_return_copies() -> None:
    history = HistoryBuffer()
    for index in range(4):
        history.append("ROBOT_001", "head", make_entry(vibration=0.1 * index))

    recent = history.recent("ROBOT_001", "head", 3)
    assert [round(e.vibration, 1) for e in recent] == [0.1, 0.2, 0.3]
    assert history.recent("ROBOT_001", "head", 0) == []

    recent.clear()
    assert len(history.entries("ROBOT_001", "head")) == 4
    snapshot = history.snapshot("ROBOT_001")
    snapshot["head"].clear()
    assert len(history.entries("ROBOT_001", "head")) == 4


def test_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        HistoryBuffer(max_entries=0)
