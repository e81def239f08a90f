"""Conflict timers, structured events and display channels."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .channels import DayLogChannel, NotificationChannel, NotificationRecord
    from .event_queue import EventQueue, QueuedEvent
    from .notifications import CohesionComplaint, ConflictEnded, ConflictStarted

__all__ = [
    "CohesionComplaint",
    "ConflictEnded",
    "ConflictStarted",
    "DayLogChannel",
    "EventQueue",
    "NotificationChannel",
    "NotificationRecord",
    "QueuedEvent",
]

_EXPORTS = {
    "CohesionComplaint": "strife.events.notifications",
    "ConflictEnded": "strife.events.notifications",
    "ConflictStarted": "strife.events.notifications",
    "DayLogChannel": "strife.events.channels",
    "EventQueue": "strife.events.event_queue",
    "NotificationChannel": "strife.events.channels",
    "NotificationRecord": "strife.events.channels",
    "QueuedEvent": "strife.events.event_queue",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted({*globals(), *__all__})
