"""Structured events emitted by the conflict core for narrative and logging use."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple, Union

from ..conflict.models import Era, TerminationReason


@dataclass(frozen=True)
class ConflictStarted:
    day: int
    conflict_id: int
    instigator: str
    defender: str
    era: Era
    probability: float
    pressure: float

    category = "conflict"

    def message(self) -> str:
        return f"{self.instigator} attacks {self.defender} ({self.era.value} conflict)"


@dataclass(frozen=True)
class ConflictEnded:
    day: int
    conflict_id: int
    reason: TerminationReason
    winner: int | None
    winners: Tuple[str, ...]
    losers: Tuple[str, ...]
    casualties: int

    category = "conflict"

    def message(self) -> str:
        if self.winner is None:
            return f"Conflict {self.conflict_id} ends in {self.reason.value}"
        victors = ", ".join(self.winners) or "nobody"
        return f"Conflict {self.conflict_id} ends ({self.reason.value}); victors: {victors}"


@dataclass(frozen=True)
class CohesionComplaint:
    """A coalition member was called out for lagging behind its side."""

    day: int
    conflict_id: int
    side: int
    member: str
    slack_days: int
    complainants: Tuple[str, ...]

    category = "cohesion"

    def message(self) -> str:
        return f"Allies of {self.member} complain about its idleness ({self.slack_days} days)"


ConflictEvent = Union[ConflictStarted, ConflictEnded, CohesionComplaint]


def event_payload(event: ConflictEvent) -> Dict[str, Any]:
    """Return a flat, JSON-friendly mapping describing ``event``."""

    payload: Dict[str, Any] = {}
    for key, value in asdict(event).items():
        if key == "day":
            continue
        if isinstance(value, (Era, TerminationReason)):
            payload[key] = value.value
        elif isinstance(value, tuple):
            payload[key] = list(value)
        else:
            payload[key] = value
    payload["event_type"] = type(event).__name__
    return payload


__all__ = [
    "CohesionComplaint",
    "ConflictEnded",
    "ConflictEvent",
    "ConflictStarted",
    "event_payload",
]
