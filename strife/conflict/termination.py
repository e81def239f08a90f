"""Detects conflicts that have run their course and finalizes them.

Conflicts move from ``ACTIVE`` to one of the terminal reasons below and are
then frozen as ``ENDED``:

* ``COLLAPSED``: one side has no living member left; the other side wins.
* ``SURRENDERED``: a side far weaker than its enemy gives up, by chance.
* ``PEACE``: most cross-side relations have recovered; nobody wins.
* ``EXHAUSTED``: a skirmish reached its expiry day or any conflict outlived
  the maximum duration; nobody wins.
"""

from __future__ import annotations

from typing import List, Sequence

from ..events.event_queue import SKIRMISH_EXPIRED, EventQueue, QueuedEvent
from ..events.notifications import ConflictEnded
from ..world.config import CombatSettings, TerminationSettings
from ..world.services import (
    NotificationSink,
    NullSink,
    RandomSource,
    RelationService,
    SettlementDirectory,
)
from . import profiles
from .cohesion import CohesionMonitor
from .models import Conflict, ConflictState, Era, TerminationReason, TerminationResult
from .registry import ConflictRegistry


class TerminationEngine:
    def __init__(
        self,
        settlements: SettlementDirectory,
        registry: ConflictRegistry,
        relations: RelationService,
        rng: RandomSource,
        *,
        cohesion: CohesionMonitor | None = None,
        queue: EventQueue | None = None,
        sink: NotificationSink | None = None,
        settings: TerminationSettings | None = None,
        combat: CombatSettings | None = None,
    ) -> None:
        self.settlements = settlements
        self.registry = registry
        self.relations = relations
        self.rng = rng
        self.cohesion = cohesion
        self.queue = queue
        self.sink = sink or NullSink()
        self.settings = settings or TerminationSettings()
        self.combat = combat or CombatSettings()

    # ------------------------------------------------------------------
    def side_strength(self, conflict: Conflict, members: Sequence[str]) -> float:
        total = 0.0
        for identifier in members:
            settlement = self.settlements.get(identifier)
            if settlement is None:
                continue
            if conflict.era is Era.ATTRITION:
                total += profiles.military_power(settlement, self.combat)
            else:
                total += profiles.strength(settlement, self.combat)
        return total

    def peace_fraction(self, first: Sequence[str], second: Sequence[str]) -> float:
        """Share of cross-side pairs whose standing is not negative."""

        pairs = [(a, b) for a in first for b in second]
        if not pairs:
            return 0.0
        cordial = sum(1 for a, b in pairs if self.relations.get(a, b) >= 0)
        return cordial / len(pairs)

    def check(self, conflict: Conflict, day: int) -> TerminationResult | None:
        """Evaluate ``conflict`` for ``day`` and finalize it when it should end."""

        if not conflict.active:
            return None
        self.registry.prune_dead(conflict)
        first = self.registry.living_participants_on(conflict, 0)
        second = self.registry.living_participants_on(conflict, 1)

        if not first or not second:
            winner = None
            if first:
                winner = 0
            elif second:
                winner = 1
            return self.finalize(conflict, day, TerminationReason.COLLAPSED, winner)

        settings = self.settings
        age = conflict.age(day)
        if age >= settings.surrender_min_age:
            strengths = (
                self.side_strength(conflict, first),
                self.side_strength(conflict, second),
            )
            weaker = 0 if strengths[0] < strengths[1] else 1
            if strengths[weaker] < strengths[1 - weaker] * settings.surrender_ratio:
                if self.rng.uniform() < settings.surrender_chance:
                    return self.finalize(
                        conflict, day, TerminationReason.SURRENDERED, 1 - weaker
                    )

        if age >= settings.peace_min_age:
            if self.peace_fraction(first, second) > settings.peace_ratio:
                return self.finalize(conflict, day, TerminationReason.PEACE, None)

        expired = conflict.expires_day is not None and day >= conflict.expires_day
        if expired or age > settings.max_duration_days:
            return self.finalize(conflict, day, TerminationReason.EXHAUSTED, None)
        return None

    def check_all(self, day: int) -> List[TerminationResult]:
        results: List[TerminationResult] = []
        for conflict in self.registry.active():
            result = self.check(conflict, day)
            if result is not None:
                results.append(result)
        return results

    def handle_timer(self, event: QueuedEvent, day: int) -> TerminationResult | None:
        """End a skirmish whose expiry timer fired."""

        if event.event_type != SKIRMISH_EXPIRED:
            return None
        conflict = self.registry.get(event.conflict_id)
        if conflict is None or not conflict.active:
            return None
        return self.finalize(conflict, day, TerminationReason.EXHAUSTED, None)

    # ------------------------------------------------------------------
    def finalize(
        self,
        conflict: Conflict,
        day: int,
        reason: TerminationReason,
        winner: int | None,
    ) -> TerminationResult:
        """Freeze ``conflict`` and release everything that referenced it."""

        winners: tuple[str, ...] = ()
        losers: tuple[str, ...] = ()
        if winner is not None:
            winners = tuple(conflict.members(winner))
            losers = tuple(conflict.members(1 - winner))

        conflict.end_day = day
        conflict.state = ConflictState.ENDED
        conflict.reason = reason
        conflict.winner = winner

        for identifier in sorted(conflict.participants | set(conflict.fallen)):
            settlement = self.settlements.get(identifier)
            if settlement is not None and settlement.active_conflict == conflict.identifier:
                settlement.active_conflict = None
        self.registry.record_ended(conflict, day)
        if self.cohesion is not None:
            self.cohesion.forget(conflict.identifier)
        if self.queue is not None:
            self.queue.cancel_for_conflict(conflict.identifier)

        self.sink.emit(
            ConflictEnded(
                day=day,
                conflict_id=conflict.identifier,
                reason=reason,
                winner=winner,
                winners=winners,
                losers=losers,
                casualties=conflict.casualties,
            )
        )
        return TerminationResult(
            conflict_id=conflict.identifier,
            day=day,
            reason=reason,
            winner=winner,
            loser=conflict.loser,
        )


__all__ = ["TerminationEngine"]
