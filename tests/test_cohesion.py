"""Tests for the ally cohesion monitor."""

from __future__ import annotations

from strife.conflict.cohesion import CohesionMonitor
from strife.conflict.models import Conflict, Era
from strife.events.notifications import CohesionComplaint
from strife.world.config import CohesionSettings

SCORES = {"anvil": 1.0, "bellow": 1.0, "cinder": 0.1}


def _conflict() -> Conflict:
    conflict = Conflict(identifier=4, start_day=0, era=Era.SKIRMISH)
    for member in SCORES:
        conflict.assign(member, 0)
    conflict.assign("enemy", 1)
    return conflict


def test_laggard_is_complained_about_once(relations, channel) -> None:
    monitor = CohesionMonitor(relations, sink=channel)
    conflict = _conflict()

    complaints = [monitor.observe(conflict, 0, SCORES, day) for day in range(8)]

    flat = [complaint for batch in complaints for complaint in batch]
    assert len(flat) == 1
    complaint = flat[0]
    assert complaint.member == "cinder"
    assert complaint.day == 5
    assert complaint.slack_days == 6
    assert complaint.complainants == ("anvil", "bellow")
    assert relations.get("cinder", "anvil") == -2.0
    assert relations.get("cinder", "bellow") == -2.0
    assert relations.get("anvil", "bellow") == 0.0
    assert channel.of_type(CohesionComplaint) == [complaint]


def test_recovery_resets_the_streak(relations) -> None:
    monitor = CohesionMonitor(relations)
    conflict = _conflict()
    for day in range(3):
        monitor.observe(conflict, 0, SCORES, day)
    assert monitor.slack_days(4, 0, "cinder") == 3

    monitor.observe(conflict, 0, {**SCORES, "cinder": 0.9}, 3)
    assert monitor.slack_days(4, 0, "cinder") == 0
    assert monitor.slack_days(4, 0, "anvil") == 0


def test_counter_is_capped_and_late_streaks_stay_silent(relations) -> None:
    settings = CohesionSettings(grace_days=2, max_penalty_days=2, counter_cap=4)
    monitor = CohesionMonitor(relations, settings=settings)
    conflict = _conflict()

    complaints = [monitor.observe(conflict, 0, SCORES, day) for day in range(10)]

    assert all(batch == [] for batch in complaints)
    assert monitor.slack_days(4, 0, "cinder") == 4


def test_forget_and_snapshot(relations) -> None:
    monitor = CohesionMonitor(relations)
    conflict = _conflict()
    monitor.observe(conflict, 0, SCORES, 0)

    frame = monitor.snapshot()
    assert frame["settlement"].to_list() == ["anvil", "bellow", "cinder"]
    assert frame["slack_days"].to_list() == [0, 0, 1]

    assert monitor.forget(4) == 3
    assert len(monitor) == 0
    assert monitor.observe(conflict, 0, {}, 1) == []
