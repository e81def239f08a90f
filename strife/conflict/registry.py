"""Arena of conflicts keyed by stable integer identifiers."""

from __future__ import annotations

from itertools import count
from typing import Dict, Iterator, List

import polars as pl

from ..diplomacy import pair_key
from ..world.services import SettlementDirectory
from .models import Conflict, Era

_HISTORY_SCHEMA = {
    "conflict_id": pl.Int64,
    "era": pl.String,
    "start_day": pl.Int64,
    "end_day": pl.Int64,
    "state": pl.String,
    "reason": pl.String,
    "winner": pl.Int64,
    "side_a": pl.List(pl.String),
    "side_b": pl.List(pl.String),
    "fallen": pl.List(pl.String),
    "casualties": pl.Int64,
    "regions_captured": pl.Int64,
}


class ConflictRegistry:
    """Owns every conflict record plus the bookkeeping shared between phases.

    Settlements destroyed outside the conflict core are reported through
    :meth:`mark_dead`; they are filtered out of their conflict at the start of
    the next day's processing.
    """

    def __init__(self, settlements: SettlementDirectory, *, cooldown_days: int = 30) -> None:
        if cooldown_days < 0:
            raise ValueError("cooldown_days must be non-negative")
        self.settlements = settlements
        self.cooldown_days = cooldown_days
        self._conflicts: Dict[int, Conflict] = {}
        self._ids = count(1)
        self._dead: set[str] = set()
        self._last_ended: Dict[tuple[str, str], int] = {}

    # ------------------------------------------------------------------
    def create(
        self,
        instigator: str,
        defender: str,
        *,
        day: int,
        era: Era,
        expires_day: int | None = None,
    ) -> Conflict:
        conflict = Conflict(
            identifier=next(self._ids), start_day=day, era=era, expires_day=expires_day
        )
        conflict.assign(instigator, 0)
        conflict.assign(defender, 1)
        for settlement_id in (instigator, defender):
            settlement = self.settlements.get(settlement_id)
            if settlement is not None:
                settlement.active_conflict = conflict.identifier
        self._conflicts[conflict.identifier] = conflict
        return conflict

    def get(self, conflict_id: int) -> Conflict | None:
        return self._conflicts.get(conflict_id)

    def __iter__(self) -> Iterator[Conflict]:
        for key in sorted(self._conflicts):
            yield self._conflicts[key]

    def __len__(self) -> int:
        return len(self._conflicts)

    def active(self) -> List[Conflict]:
        return [conflict for conflict in self if conflict.active]

    def ended(self) -> List[Conflict]:
        return [conflict for conflict in self if not conflict.active]

    # ------------------------------------------------------------------
    def is_alive(self, settlement_id: str) -> bool:
        if settlement_id in self._dead:
            return False
        settlement = self.settlements.get(settlement_id)
        return settlement is not None and settlement.population > 0

    def conflict_of(self, settlement_id: str) -> Conflict | None:
        """Return the active conflict ``settlement_id`` currently fights in."""

        settlement = self.settlements.get(settlement_id)
        if settlement is None or settlement.active_conflict is None:
            return None
        conflict = self._conflicts.get(settlement.active_conflict)
        if conflict is None or not conflict.active:
            return None
        if settlement_id not in conflict.participants:
            return None
        return conflict

    def join(self, conflict_id: int, settlement_id: str) -> bool:
        """Add ``settlement_id`` to a conflict as an unassigned participant."""

        conflict = self._conflicts.get(conflict_id)
        if conflict is None or not conflict.active:
            return False
        if not self.is_alive(settlement_id) or self.conflict_of(settlement_id) is not None:
            return False
        if not conflict.add_participant(settlement_id):
            return False
        settlement = self.settlements.get(settlement_id)
        if settlement is not None:
            settlement.active_conflict = conflict.identifier
        return True

    def mark_dead(self, settlement_id: str) -> bool:
        """Removal callback for settlements destroyed outside the conflict core."""

        if settlement_id in self._dead:
            return False
        self._dead.add(settlement_id)
        return True

    def living_participants(self, conflict: Conflict) -> List[str]:
        return [sid for sid in sorted(conflict.participants) if self.is_alive(sid)]

    def living_participants_on(self, conflict: Conflict, side_index: int) -> List[str]:
        return [sid for sid in conflict.members(side_index) if self.is_alive(sid)]

    def prune_dead(self, conflict: Conflict) -> List[str]:
        """Remove dead participants from ``conflict`` and return their ids."""

        removed: List[str] = []
        for settlement_id in sorted(conflict.participants):
            if self.is_alive(settlement_id):
                continue
            if conflict.remove(settlement_id):
                removed.append(settlement_id)
                settlement = self.settlements.get(settlement_id)
                if settlement is not None and settlement.active_conflict == conflict.identifier:
                    settlement.active_conflict = None
        return removed

    # ------------------------------------------------------------------
    def record_ended(self, conflict: Conflict, day: int) -> None:
        """Start the cooldown for every cross-side pair of an ended conflict."""

        for first in conflict.members(0):
            for second in conflict.members(1):
                self._last_ended[pair_key(first, second)] = day
        # Fallen settlements lost their side assignment when removed.
        survivors = conflict.members(0) + conflict.members(1)
        for fallen in conflict.fallen:
            for other in survivors:
                self._last_ended[pair_key(fallen, other)] = day

    def cooldown_active(
        self, pair: tuple[str, str], day: int, window: int | None = None
    ) -> bool:
        window = self.cooldown_days if window is None else window
        last = self._last_ended.get(pair_key(*pair))
        return last is not None and day - last < window

    # ------------------------------------------------------------------
    def snapshot(self) -> pl.DataFrame:
        """Return the full conflict history as a DataFrame ordered by id."""

        rows = [
            {
                "conflict_id": conflict.identifier,
                "era": conflict.era.value,
                "start_day": conflict.start_day,
                "end_day": conflict.end_day,
                "state": conflict.state.value,
                "reason": conflict.reason.value if conflict.reason is not None else None,
                "winner": conflict.winner,
                "side_a": conflict.members(0),
                "side_b": conflict.members(1),
                "fallen": list(conflict.fallen),
                "casualties": conflict.casualties,
                "regions_captured": conflict.regions_captured,
            }
            for conflict in self
        ]
        return pl.DataFrame(rows, schema=_HISTORY_SCHEMA)


__all__ = ["ConflictRegistry"]
