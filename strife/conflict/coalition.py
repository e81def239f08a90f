"""Places conflict participants onto one of the two opposing sides."""

from __future__ import annotations

from typing import List

from ..world.config import CoalitionSettings
from ..world.services import (
    AllianceService,
    RandomSource,
    RelationService,
    SettlementDirectory,
    are_allied,
)
from .models import Conflict, Side
from .registry import ConflictRegistry


class CoalitionBuilder:
    """Assigns unassigned participants to the side they have most affinity with."""

    def __init__(
        self,
        settlements: SettlementDirectory,
        registry: ConflictRegistry,
        relations: RelationService,
        alliances: AllianceService,
        rng: RandomSource,
        settings: CoalitionSettings | None = None,
    ) -> None:
        self.settlements = settlements
        self.registry = registry
        self.relations = relations
        self.alliances = alliances
        self.rng = rng
        self.settings = settings or CoalitionSettings()

    def affinity(self, settlement_id: str, side: Side) -> float:
        """Summed standing of ``settlement_id`` towards every member of ``side``."""

        members = side.ordered()
        score = sum(self.relations.get(settlement_id, member) for member in members)
        if any(are_allied(self.alliances, settlement_id, member) for member in members):
            score += self.settings.allied_bonus
        return score

    def ensure_sides(self, conflict: Conflict) -> tuple[Side, Side]:
        """Place every unassigned participant and return both sides."""

        for settlement_id in conflict.unassigned():
            first = self.affinity(settlement_id, conflict.sides[0])
            second = self.affinity(settlement_id, conflict.sides[1])
            if first > second:
                index = 0
            elif second > first:
                index = 1
            else:
                index = 0 if self.rng.uniform() < 0.5 else 1
            conflict.assign(settlement_id, index)
        return conflict.sides

    def call_to_arms(self, conflict: Conflict) -> List[str]:
        """Bring alliance partners of the participants into ``conflict``.

        Returns the identifiers that joined; they remain unassigned until the
        next :meth:`ensure_sides` call.
        """

        if not self.settings.call_to_arms or not conflict.active:
            return []
        alliances = {
            alliance
            for alliance in (
                self.alliances.alliance_of(member) for member in sorted(conflict.participants)
            )
            if alliance is not None
        }
        if not alliances:
            return []
        candidates = self.settlements.filter(
            lambda settlement: self.alliances.alliance_of(settlement.identifier) in alliances
        )
        joined: List[str] = []
        for candidate in sorted(candidates, key=lambda settlement: settlement.identifier):
            if candidate.identifier in conflict.participants:
                continue
            if self.registry.join(conflict.identifier, candidate.identifier):
                joined.append(candidate.identifier)
        return joined


__all__ = ["CoalitionBuilder"]
