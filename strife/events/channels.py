"""Log and notification channels recording what happened each simulated day."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Deque, Dict, Iterable, List, Mapping, Sequence

from .event_queue import QueuedEvent
from .notifications import ConflictEvent, event_payload

if TYPE_CHECKING:
    from ..conflict.models import Conflict
    from ..engine.day_engine import DayContext

QUIET_DAY = "Quiet day across the settlements."


@dataclass
class LogEntry:
    """Summary of one completed day."""

    day: int
    summary: str
    highlights: List[str] = field(default_factory=list)
    timers: List[str] = field(default_factory=list)


@dataclass
class NotificationRecord:
    """A single line of news derived from a conflict event or a phase."""

    day: int
    message: str
    category: str = "info"
    payload: Dict[str, Any] = field(default_factory=dict)

    def format_brief(self) -> str:
        text = f"[{self.category}] Day {self.day}: {self.message}"
        if self.payload:
            details = ", ".join(f"{key}={value}" for key, value in self.payload.items())
            text = f"{text} ({details})"
        return text


class DayLogChannel:
    """Keeps the most recent daily summaries for display."""

    def __init__(self, *, max_entries: int = 100) -> None:
        self._entries: Deque[LogEntry] = deque(maxlen=max_entries)

    @property
    def entries(self) -> Sequence[LogEntry]:
        return tuple(self._entries)

    def push(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def record_context(
        self, context: "DayContext", *, summary: str | None = None
    ) -> LogEntry:
        """Store a :class:`LogEntry` built from ``context``."""

        entry = LogEntry(
            day=context.day,
            summary=summary or _summarise(context),
            highlights=list(context.summary_lines),
            timers=[_describe_timer(event) for event in context.events],
        )
        self.push(entry)
        return entry

    def render_table(self, *, title: str = "Conflict Log"):
        """Return a Rich panel listing stored days, newest first."""

        from rich import box
        from rich.panel import Panel
        from rich.table import Table

        table = Table(title=title, expand=True, box=box.SIMPLE_HEAVY)
        table.add_column("Day", justify="right", no_wrap=True)
        table.add_column("Summary", overflow="fold")
        table.add_column("Highlights", overflow="fold")
        table.add_column("Timers", overflow="fold")
        for entry in reversed(self._entries):
            table.add_row(
                str(entry.day),
                entry.summary,
                "\n".join(entry.highlights) or "-",
                "\n".join(entry.timers) or "-",
            )
        return Panel(table, title=title, border_style="yellow")


class NotificationChannel:
    """Notification sink keeping conflict events and their rendered records."""

    def __init__(self, *, max_entries: int = 200) -> None:
        self._records: Deque[NotificationRecord] = deque(maxlen=max_entries)
        self._events: Deque[ConflictEvent] = deque(maxlen=max_entries)

    @property
    def notifications(self) -> Sequence[NotificationRecord]:
        return tuple(self._records)

    @property
    def events(self) -> Sequence[ConflictEvent]:
        return tuple(self._events)

    def push(self, notification: NotificationRecord) -> None:
        self._records.append(notification)

    def emit(self, event: ConflictEvent) -> None:
        self._events.append(event)
        self.push(
            NotificationRecord(
                day=event.day,
                message=event.message(),
                category=event.category,
                payload=event_payload(event),
            )
        )

    def notify(
        self,
        day: int,
        message: str,
        *,
        category: str = "info",
        payload: Mapping[str, Any] | None = None,
    ) -> NotificationRecord:
        record = NotificationRecord(day, message, category, dict(payload or {}))
        self.push(record)
        return record

    def of_type(self, event_type: type) -> list[ConflictEvent]:
        return [event for event in self._events if isinstance(event, event_type)]

    def clear(self) -> None:
        self._records.clear()
        self._events.clear()

    def render_panel(self, *, title: str = "Notifications", limit: int = 10):
        from rich.panel import Panel
        from rich.table import Table

        table = Table(expand=True)
        table.add_column("Day", justify="right", no_wrap=True)
        table.add_column("Category", no_wrap=True)
        table.add_column("Message", overflow="fold")
        for record in list(self._records)[-limit:][::-1]:
            table.add_row(str(record.day), record.category, record.message)
        return Panel(table, title=title, border_style="magenta")


def render_conflicts(conflicts: Iterable["Conflict"], *, day: int, title: str = "Conflicts"):
    """Return a Rich panel listing conflicts with their sides and status."""

    from rich.panel import Panel
    from rich.table import Table

    table = Table(expand=True)
    for name in ("Id", "Era", "Side A", "Side B", "Age", "Casualties", "Status"):
        table.add_column(name, overflow="fold")

    rows = 0
    for conflict in conflicts:
        status = conflict.state.value
        if conflict.reason is not None:
            status = f"{status} ({conflict.reason.value})"
        last_day = conflict.end_day if conflict.end_day is not None else day
        table.add_row(
            str(conflict.identifier),
            conflict.era.value,
            ", ".join(conflict.members(0)) or "-",
            ", ".join(conflict.members(1)) or "-",
            str(conflict.age(last_day)),
            str(conflict.casualties),
            status,
        )
        rows += 1
    if not rows:
        return Panel("No conflicts recorded", title=title, border_style="red")
    return Panel(table, title=title, border_style="red")


def _describe_timer(event: QueuedEvent) -> str:
    text = f"{event.event_type} #{event.conflict_id}"
    if event.payload:
        details = ", ".join(f"{key}={value}" for key, value in event.payload.items())
        text = f"{text} ({details})"
    return text


def _summarise(context: "DayContext") -> str:
    if context.summary_lines:
        return " | ".join(context.summary_lines)
    if context.events:
        return ", ".join(event.event_type for event in context.events)
    return QUIET_DAY


__all__ = [
    "DayLogChannel",
    "LogEntry",
    "NotificationChannel",
    "NotificationRecord",
    "QUIET_DAY",
    "render_conflicts",
]
