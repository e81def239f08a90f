"""Day-keyed queue of conflict timers such as skirmish expiry."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, Iterable, List, Tuple

SKIRMISH_EXPIRED = "skirmish_expired"


@dataclass
class QueuedEvent:
    """A timer firing for a conflict on a given day."""

    day: int
    event_type: str
    conflict_id: int
    payload: Dict[str, Any] = field(default_factory=dict)


class EventQueue:
    """Manages future conflict timers keyed by the day they should resolve."""

    def __init__(self) -> None:
        self._heap: List[Tuple[int, int, QueuedEvent]] = []
        self._counter = count()

    def schedule(
        self,
        day: int,
        event_type: str,
        conflict_id: int,
        payload: Dict[str, Any] | None = None,
    ) -> QueuedEvent:
        """Schedule a timer to fire on the provided day."""

        if day < 0:
            raise ValueError("day must be non-negative")
        event = QueuedEvent(
            day=day, event_type=event_type, conflict_id=conflict_id, payload=payload or {}
        )
        heapq.heappush(self._heap, (day, next(self._counter), event))
        return event

    def schedule_in(
        self,
        days_from_now: int,
        current_day: int,
        event_type: str,
        conflict_id: int,
        payload: Dict[str, Any] | None = None,
    ) -> QueuedEvent:
        """Convenience helper to schedule relative to the current day."""

        if days_from_now < 0:
            raise ValueError("days_from_now must be non-negative")
        return self.schedule(current_day + days_from_now, event_type, conflict_id, payload)

    def events_for_day(self, day: int) -> List[QueuedEvent]:
        """Return timers queued for the specified day without removing them."""

        return [entry[2] for entry in sorted(self._heap, key=_order) if entry[0] == day]

    def pop_due(self, day: int) -> Iterable[QueuedEvent]:
        """Retrieve and remove every timer due on or before ``day``.

        Overdue timers are delivered too, so a scheduler that skips days never
        strands a conflict past its expiry.
        """

        popped: List[QueuedEvent] = []
        while self._heap and self._heap[0][0] <= day:
            _, _, event = heapq.heappop(self._heap)
            popped.append(event)
        return popped

    def cancel_for_conflict(self, conflict_id: int) -> int:
        """Drop every pending timer belonging to ``conflict_id``."""

        kept = [entry for entry in self._heap if entry[2].conflict_id != conflict_id]
        removed = len(self._heap) - len(kept)
        if removed:
            heapq.heapify(kept)
            self._heap = kept
        return removed

    def has_events(self) -> bool:
        return bool(self._heap)

    def upcoming_days(self) -> List[int]:
        return sorted({day for day, _, _ in self._heap})

    def clear(self) -> None:
        self._heap.clear()
        self._counter = count()


def _order(entry: Tuple[int, int, QueuedEvent]) -> Tuple[int, int]:
    return entry[0], entry[1]


__all__ = ["EventQueue", "QueuedEvent", "SKIRMISH_EXPIRED"]
