"""Conflict records and the typed decisions exchanged between subsystems."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence


class Era(str, Enum):
    """Coarse historical phase selecting the combat algorithm."""

    SKIRMISH = "skirmish"
    ATTRITION = "attrition"


class ConflictState(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


class TerminationReason(str, Enum):
    """Why a conflict left the active state."""

    COLLAPSED = "collapsed"
    SURRENDERED = "surrendered"
    PEACE = "peace"
    EXHAUSTED = "exhausted"


@dataclass
class Side:
    """One of the two disjoint coalitions inside a conflict."""

    index: int
    members: set[str] = field(default_factory=set)

    def ordered(self) -> list[str]:
        return sorted(self.members)

    def __contains__(self, settlement_id: object) -> bool:
        return settlement_id in self.members

    def __len__(self) -> int:
        return len(self.members)


@dataclass
class Conflict:
    """An armed dispute between exactly two sides.

    ``participants`` holds every living settlement involved, including those
    not yet placed on a side. ``side_of`` mirrors side membership for constant
    time lookups. Once ``end_day`` is set the record is frozen and all
    mutators become no-ops.
    """

    identifier: int
    start_day: int
    era: Era
    sides: tuple[Side, Side] = field(default_factory=lambda: (Side(0), Side(1)))
    participants: set[str] = field(default_factory=set)
    side_of: Dict[str, int] = field(default_factory=dict)
    fallen: List[str] = field(default_factory=list)
    end_day: int | None = None
    winner: int | None = None
    state: ConflictState = ConflictState.ACTIVE
    reason: TerminationReason | None = None
    casualties: int = 0
    regions_captured: int = 0
    expires_day: int | None = None
    fronts: Dict[str, Any] = field(default_factory=dict)

    @property
    def active(self) -> bool:
        return self.end_day is None

    @property
    def loser(self) -> int | None:
        if self.winner is None:
            return None
        return 1 - self.winner

    def age(self, day: int) -> int:
        return max(0, day - self.start_day)

    def members(self, index: int) -> list[str]:
        return self.sides[index].ordered()

    def unassigned(self) -> list[str]:
        return sorted(sid for sid in self.participants if sid not in self.side_of)

    def opponents_of(self, settlement_id: str) -> list[str]:
        index = self.side_of.get(settlement_id)
        if index is None:
            return []
        return self.members(1 - index)

    def add_participant(self, settlement_id: str) -> bool:
        if not self.active or settlement_id in self.participants:
            return False
        self.participants.add(settlement_id)
        return True

    def assign(self, settlement_id: str, index: int) -> bool:
        """Place ``settlement_id`` on side ``index`` unless it already has one."""

        if not self.active or index not in (0, 1):
            return False
        if settlement_id in self.side_of:
            return False
        self.participants.add(settlement_id)
        self.sides[index].members.add(settlement_id)
        self.side_of[settlement_id] = index
        return True

    def remove(self, settlement_id: str) -> bool:
        """Drop a participant that died or left; keeps sides exhaustive."""

        if not self.active or settlement_id not in self.participants:
            return False
        self.participants.discard(settlement_id)
        index = self.side_of.pop(settlement_id, None)
        if index is not None:
            self.sides[index].members.discard(settlement_id)
        self.fallen.append(settlement_id)
        return True

    def sides_consistent(self) -> bool:
        """Return ``True`` when sides are disjoint and cover all assigned participants."""

        first, second = self.sides
        if first.members & second.members:
            return False
        if (first.members | second.members) - self.participants:
            return False
        for settlement_id, index in self.side_of.items():
            if settlement_id not in self.sides[index].members:
                return False
        return len(self.side_of) == len(first.members) + len(second.members)


@dataclass(frozen=True)
class IgnitionDecision:
    """Outcome of evaluating one settlement pair for conflict ignition."""

    pair: tuple[str, str]
    ignited: bool
    reason: str
    era: Era | None = None
    pressure: float = 0.0
    threshold: float = 0.0
    probability: float = 0.0
    instigator: str | None = None
    defender: str | None = None
    conflict_id: int | None = None


@dataclass(frozen=True)
class Engagement:
    """A participant actively striking a target on the opposing side."""

    conflict_id: int
    attacker: str
    defender: str
    score: float
    distance: float


@dataclass(frozen=True)
class CombatOutcome:
    """Effects of resolving a single engagement."""

    engagement: Engagement
    era: Era
    occurred: bool
    winner: str | None = None
    loser: str | None = None
    regions: Sequence[str] = ()
    casualties: int = 0
    structures_lost: int = 0


@dataclass(frozen=True)
class TerminationResult:
    """Record of a conflict reaching a terminal state."""

    conflict_id: int
    day: int
    reason: TerminationReason
    winner: int | None
    loser: int | None


__all__ = [
    "CombatOutcome",
    "Conflict",
    "ConflictState",
    "Engagement",
    "Era",
    "IgnitionDecision",
    "Side",
    "TerminationReason",
    "TerminationResult",
]
