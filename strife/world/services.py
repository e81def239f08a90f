"""Collaborator interfaces consumed by the conflict core.

The conflict subsystem never reaches into global state; every external
concern is passed in through one of the protocols below. Reference
implementations backed by in-memory settlements are provided for embedding
and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Callable,
    Dict,
    List,
    Mapping,
    MutableMapping,
    Protocol,
    runtime_checkable,
)

from .settlements import Settlement, SettlementManager

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..events.notifications import ConflictEvent


class SettlementDirectory(Protocol):
    def get(self, identifier: str) -> Settlement | None: ...

    def filter(self, predicate: Callable[[Settlement], bool]) -> list[Settlement]: ...


class EffectApplier(Protocol):
    def apply_influence(
        self, settlement_id: str, deltas: Mapping[str, float], temporary: bool
    ) -> None: ...

    def apply_casualties(self, settlement_id: str, count: int, cause: str) -> int: ...

    def transfer_territory(self, from_id: str, to_id: str, region: str) -> bool: ...

    def destroy_structures(self, region: str, cause: str) -> int: ...


class RelationService(Protocol):
    def get(self, a: str, b: str) -> float: ...

    def adjust(self, a: str, b: str, amount: float) -> float: ...


class AllianceService(Protocol):
    def alliance_of(self, settlement_id: str) -> str | None: ...


class Clock(Protocol):
    @property
    def current_day(self) -> int: ...


class RandomSource(Protocol):
    def uniform(self) -> float: ...


class TechnologyGate(Protocol):
    def military_level(self) -> float: ...


@runtime_checkable
class NotificationSink(Protocol):
    def emit(self, event: "ConflictEvent") -> None: ...


class NullSink:
    """Notification sink that discards every event."""

    def emit(self, event: "ConflictEvent") -> None:
        return None


@dataclass
class StaticTechnologyGate:
    """Technology gate holding a single global military level."""

    level: float = 0.0

    def military_level(self) -> float:
        return self.level


@dataclass(frozen=True)
class CasualtyRecord:
    day: int | None
    settlement_id: str
    count: int
    cause: str


@dataclass
class _TemporaryInfluence:
    settlement_id: str
    name: str
    delta: float
    expires_day: int | None


class SettlementEffects:
    """Apply conflict effects to settlements held by a :class:`SettlementManager`.

    Temporary influence changes are reverted by :meth:`expire_temporary` once
    ``temporary_days`` have elapsed. Casualties are clamped so population and
    soldiers never drop below zero.
    """

    def __init__(
        self,
        settlements: SettlementManager,
        *,
        clock: Clock | None = None,
        temporary_days: int = 5,
        structures: Mapping[str, int] | None = None,
    ) -> None:
        if temporary_days < 0:
            raise ValueError("temporary_days must be non-negative")
        self._settlements = settlements
        self._clock = clock
        self.temporary_days = temporary_days
        self._temporary: List[_TemporaryInfluence] = []
        self._structures: MutableMapping[str, int] = dict(structures or {})
        self.casualty_log: List[CasualtyRecord] = []
        self.transfer_log: List[tuple[str, str, str]] = []
        self.structure_log: List[tuple[str, int, str]] = []

    def _today(self) -> int | None:
        return self._clock.current_day if self._clock is not None else None

    def structures_in(self, region: str) -> int:
        return self._structures.get(region, 0)

    def set_structures(self, region: str, count: int) -> None:
        self._structures[region] = max(0, int(count))

    def apply_influence(
        self, settlement_id: str, deltas: Mapping[str, float], temporary: bool
    ) -> None:
        settlement = self._settlements.get(settlement_id)
        if settlement is None:
            return
        today = self._today()
        for name, delta in deltas.items():
            settlement.influences[name] = settlement.influence(name) + float(delta)
            if temporary:
                expires = today + self.temporary_days if today is not None else None
                self._temporary.append(
                    _TemporaryInfluence(settlement_id, name, float(delta), expires)
                )

    def expire_temporary(self, day: int | None = None) -> int:
        """Revert temporary influences due on ``day`` (all of them when ``None``)."""

        kept: List[_TemporaryInfluence] = []
        reverted = 0
        for entry in self._temporary:
            due = day is None or entry.expires_day is None or entry.expires_day <= day
            if not due:
                kept.append(entry)
                continue
            settlement = self._settlements.get(entry.settlement_id)
            if settlement is not None:
                settlement.influences[entry.name] = (
                    settlement.influence(entry.name) - entry.delta
                )
            reverted += 1
        self._temporary = kept
        return reverted

    def apply_casualties(self, settlement_id: str, count: int, cause: str) -> int:
        settlement = self._settlements.get(settlement_id)
        if settlement is None or count <= 0:
            return 0
        removed = min(int(count), settlement.population)
        if removed <= 0:
            return 0
        settlement.population -= removed
        if settlement.soldiers > 0:
            soldier_losses = min(settlement.soldiers, removed)
            settlement.soldiers -= soldier_losses
        settlement.soldiers = min(settlement.soldiers, settlement.population)
        self.casualty_log.append(
            CasualtyRecord(self._today(), settlement_id, removed, cause)
        )
        return removed

    def transfer_territory(self, from_id: str, to_id: str, region: str) -> bool:
        origin = self._settlements.get(from_id)
        target = self._settlements.get(to_id)
        if origin is None or target is None or region not in origin.regions:
            return False
        origin.regions.remove(region)
        target.regions.append(region)
        self.transfer_log.append((from_id, to_id, region))
        return True

    def destroy_structures(self, region: str, cause: str) -> int:
        destroyed = self._structures.pop(region, 0)
        if destroyed:
            self.structure_log.append((region, destroyed, cause))
        return destroyed


class AllianceRegistry:
    """Alliance membership keyed by settlement identifier."""

    def __init__(self, memberships: Mapping[str, str] | None = None) -> None:
        self._memberships: Dict[str, str] = dict(memberships or {})

    def alliance_of(self, settlement_id: str) -> str | None:
        return self._memberships.get(settlement_id)

    def join(self, settlement_id: str, alliance: str) -> None:
        self._memberships[settlement_id] = alliance

    def leave(self, settlement_id: str) -> None:
        self._memberships.pop(settlement_id, None)


def are_allied(alliances: AllianceService, a: str, b: str) -> bool:
    """Return ``True`` when ``a`` and ``b`` share an alliance."""

    if a == b:
        return False
    alliance = alliances.alliance_of(a)
    return alliance is not None and alliance == alliances.alliance_of(b)


__all__ = [
    "AllianceRegistry",
    "AllianceService",
    "are_allied",
    "CasualtyRecord",
    "Clock",
    "EffectApplier",
    "NotificationSink",
    "NullSink",
    "RandomSource",
    "RelationService",
    "SettlementDirectory",
    "SettlementEffects",
    "StaticTechnologyGate",
    "TechnologyGate",
]
