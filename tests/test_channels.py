"""Tests covering the log and notification channels."""

from __future__ import annotations

from rich.console import Console

from strife.conflict.models import Conflict, ConflictState, Era, TerminationReason
from strife.events.channels import (
    DayLogChannel,
    LogEntry,
    NotificationChannel,
    render_conflicts,
)
from strife.events.notifications import ConflictEnded, ConflictStarted, event_payload


def _render(renderable) -> str:
    console = Console(width=120, record=True)
    console.print(renderable)
    return console.export_text(clear=False)


def _started(day: int = 3) -> ConflictStarted:
    return ConflictStarted(
        day=day,
        conflict_id=1,
        instigator="keep",
        defender="mill",
        era=Era.SKIRMISH,
        probability=0.12,
        pressure=64.0,
    )


def test_emit_stores_event_and_notification() -> None:
    channel = NotificationChannel()
    channel.emit(_started())

    assert channel.of_type(ConflictStarted) == [_started()]
    assert channel.of_type(ConflictEnded) == []
    [record] = channel.notifications
    assert record.category == "conflict"
    assert record.message == "keep attacks mill (skirmish conflict)"
    assert record.payload["era"] == "skirmish"
    assert record.format_brief().startswith("[conflict] Day 3: keep attacks mill")


def test_channel_keeps_only_recent_entries() -> None:
    channel = NotificationChannel(max_entries=2)
    for day in range(4):
        channel.emit(_started(day))

    assert [event.day for event in channel.events] == [2, 3]
    assert [record.day for record in channel.notifications] == [2, 3]
    channel.clear()
    assert not channel.events and not channel.notifications


def test_event_payload_is_flat() -> None:
    ended = ConflictEnded(
        day=9,
        conflict_id=4,
        reason=TerminationReason.SURRENDERED,
        winner=1,
        winners=("mill",),
        losers=("keep", "abbey"),
        casualties=12,
    )

    payload = event_payload(ended)

    assert payload == {
        "conflict_id": 4,
        "reason": "surrendered",
        "winner": 1,
        "winners": ["mill"],
        "losers": ["keep", "abbey"],
        "casualties": 12,
        "event_type": "ConflictEnded",
    }
    assert "victors: mill" in ended.message()


def test_notification_panel_lists_messages() -> None:
    channel = NotificationChannel()
    channel.emit(_started())
    channel.notify(4, "Harvest festival", category="info")

    output = _render(channel.render_panel())

    assert "Notifications" in output
    assert "keep attacks mill" in output
    assert "Harvest festival" in output


def test_log_table_renders_highlights() -> None:
    log = DayLogChannel(max_entries=1)
    log.push(LogEntry(day=1, summary="Quiet day across the settlements."))
    log.push(LogEntry(day=2, summary="Border raid", highlights=["keep attacks mill"]))

    output = _render(log.render_table())

    assert [entry.day for entry in log.entries] == [2]
    assert "Conflict Log" in output
    assert "Border raid" in output
    assert "Quiet day" not in output


def test_conflict_panel_shows_sides_and_status() -> None:
    conflict = Conflict(identifier=7, start_day=2, era=Era.ATTRITION)
    conflict.assign("keep", 0)
    conflict.assign("mill", 1)
    conflict.casualties = 15
    conflict.end_day = 10
    conflict.state = ConflictState.ENDED
    conflict.reason = TerminationReason.PEACE

    output = _render(render_conflicts([conflict], day=30))

    assert "attrition" in output
    assert "keep" in output and "mill" in output
    assert "ended (peace)" in output


def test_conflict_panel_handles_empty_history() -> None:
    assert "No conflicts recorded" in _render(render_conflicts([], day=0))
