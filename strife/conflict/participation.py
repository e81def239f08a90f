"""Daily decision of which coalition members actively fight."""

from __future__ import annotations

from typing import Dict, List, Sequence

from ..world.config import ParticipationSettings
from ..world.services import (
    EffectApplier,
    RandomSource,
    RelationService,
    SettlementDirectory,
)
from ..world.settlements import Settlement
from . import profiles
from .cohesion import CohesionMonitor
from .models import Conflict, Engagement
from .registry import ConflictRegistry


class ParticipationModel:
    """Scores members, samples who fights today and picks their targets."""

    def __init__(
        self,
        settlements: SettlementDirectory,
        registry: ConflictRegistry,
        relations: RelationService,
        effects: EffectApplier,
        rng: RandomSource,
        *,
        cohesion: CohesionMonitor | None = None,
        settings: ParticipationSettings | None = None,
    ) -> None:
        self.settlements = settlements
        self.registry = registry
        self.relations = relations
        self.effects = effects
        self.rng = rng
        self.cohesion = cohesion
        self.settings = settings or ParticipationSettings()

    # ------------------------------------------------------------------
    def _living(self, identifiers: Sequence[str]) -> List[Settlement]:
        living: List[Settlement] = []
        for identifier in identifiers:
            if not self.registry.is_alive(identifier):
                continue
            settlement = self.settlements.get(identifier)
            if settlement is not None:
                living.append(settlement)
        return living

    def score(
        self,
        member: Settlement,
        opponents: Sequence[Settlement],
        age: int,
    ) -> float:
        """Willingness of ``member`` to fight today, clamped to the configured band."""

        settings = self.settings
        value = 1.0 + member.influence("military") * settings.military_weight
        if "martial" in member.traditions:
            value += settings.martial_bonus
        if "festive" in member.traditions:
            value -= settings.festive_penalty
        if member.unrest > settings.unrest_threshold:
            value *= settings.unrest_penalty
        if member.disaster:
            value *= settings.disaster_penalty
        if opponents:
            nearest = min(member.distance_to(opponent) for opponent in opponents)
            half = settings.proximity_half_range
            value *= max(settings.proximity_floor, half / (half + nearest))
        if profiles.diplomacy_bias(member) > settings.diplomacy_bias_cutoff:
            value *= settings.diplomacy_penalty
        if age >= settings.age_decay_days:
            value *= settings.age_decay
        return max(settings.score_min, min(settings.score_max, value))

    def chance(self, score: float) -> float:
        settings = self.settings
        return max(settings.chance_min, min(settings.chance_max, settings.basis_rate * score))

    def choose_target(
        self, member: Settlement, opponents: Sequence[Settlement]
    ) -> Settlement | None:
        """Pick an opponent weighted towards near, poorly defended targets."""

        weights = [
            (1.0 / (1.0 + member.distance_to(opponent)))
            * (1.0 - profiles.deterrence(opponent) * self.settings.target_deterrence_weight)
            for opponent in opponents
        ]
        total = sum(weights)
        if total <= 0:
            return None
        roll = self.rng.uniform() * total
        cumulative = 0.0
        for opponent, weight in zip(opponents, weights):
            cumulative += weight
            if roll < cumulative:
                return opponent
        return opponents[-1]

    # ------------------------------------------------------------------
    def step(self, conflict: Conflict, day: int) -> List[Engagement]:
        """Return today's engagements for ``conflict``."""

        if not conflict.active:
            return []
        engagements: List[Engagement] = []
        age = conflict.age(day)
        for side_index in (0, 1):
            members = self._living(conflict.members(side_index))
            opponents = self._living(conflict.members(1 - side_index))
            if not members or not opponents:
                continue
            scores: Dict[str, float] = {
                member.identifier: self.score(member, opponents, age) for member in members
            }
            if self.cohesion is not None:
                self.cohesion.observe(conflict, side_index, scores, day)
            for member in members:
                score = scores[member.identifier]
                if self.rng.uniform() >= self.chance(score):
                    continue
                target = self.choose_target(member, opponents)
                if target is None:
                    continue
                self._apply_strain(member.identifier, target.identifier)
                engagements.append(
                    Engagement(
                        conflict_id=conflict.identifier,
                        attacker=member.identifier,
                        defender=target.identifier,
                        score=score,
                        distance=float(member.distance_to(target)),
                    )
                )
        return engagements

    def _apply_strain(self, attacker: str, defender: str) -> None:
        settings = self.settings
        self.relations.adjust(attacker, defender, -settings.relation_penalty)
        penalty = {"happiness": -settings.happiness_penalty}
        self.effects.apply_influence(attacker, penalty, temporary=True)
        self.effects.apply_influence(defender, penalty, temporary=True)


__all__ = ["ParticipationModel"]
