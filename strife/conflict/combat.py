"""Resolves engagements into casualties, captured regions and lost structures.

Two algorithms exist. Skirmish-era fighting is a population-driven raid over a
single border region; attrition-era fighting is driven by standing soldiers and
can capture several regions in one engagement. Only the two engaged
settlements ever exchange territory.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from ..world.config import CombatSettings
from ..world.services import EffectApplier, RandomSource, SettlementDirectory
from . import profiles
from .models import CombatOutcome, Conflict, Engagement, Era
from .registry import ConflictRegistry

_EPSILON = 1e-6


class CombatResolver:
    def __init__(
        self,
        settlements: SettlementDirectory,
        registry: ConflictRegistry,
        effects: EffectApplier,
        rng: RandomSource,
        settings: CombatSettings | None = None,
    ) -> None:
        self.settlements = settlements
        self.registry = registry
        self.effects = effects
        self.rng = rng
        self.settings = settings or CombatSettings()

    def resolve(
        self, conflict: Conflict, engagements: Iterable[Engagement]
    ) -> List[CombatOutcome]:
        """Resolve ``engagements`` in order and fold the totals into ``conflict``.

        Attrition captures are capped per settlement pair for the whole batch,
        so engagements in both directions share one daily allowance.
        """

        outcomes: List[CombatOutcome] = []
        captured: Dict[frozenset[str], int] = {}
        for engagement in engagements:
            if not conflict.active:
                break
            if conflict.era is Era.SKIRMISH:
                outcome = self.skirmish(engagement)
            else:
                pair = frozenset((engagement.attacker, engagement.defender))
                allowance = self.settings.max_captures - captured.get(pair, 0)
                outcome = self.attrition(engagement, allowance=allowance)
                captured[pair] = captured.get(pair, 0) + len(outcome.regions)
            conflict.casualties += outcome.casualties
            conflict.regions_captured += len(outcome.regions)
            outcomes.append(outcome)
        return outcomes

    def _engaged(self, engagement: Engagement):
        if not (
            self.registry.is_alive(engagement.attacker)
            and self.registry.is_alive(engagement.defender)
        ):
            return None
        attacker = self.settlements.get(engagement.attacker)
        defender = self.settlements.get(engagement.defender)
        if attacker is None or defender is None:
            return None
        return attacker, defender

    # ------------------------------------------------------------------
    def skirmish(self, engagement: Engagement) -> CombatOutcome:
        settings = self.settings
        engaged = self._engaged(engagement)
        if engaged is None or self.rng.uniform() >= settings.raid_chance:
            return CombatOutcome(engagement=engagement, era=Era.SKIRMISH, occurred=False)
        attacker, defender = engaged

        attack = profiles.strength(attacker, settings)
        defence = profiles.strength(defender, settings)
        total = attack + defence
        odds = attack / total if total > 0 else 0.5
        if self.rng.uniform() < odds:
            winner, loser = attacker, defender
        else:
            winner, loser = defender, attacker

        regions: List[str] = []
        if loser.regions:
            region = loser.regions[-1]
            if self.effects.transfer_territory(loser.identifier, winner.identifier, region):
                regions.append(region)

        casualties = 0
        if loser.population > 0:
            pressure = profiles.scarcity(attacker, settings) + profiles.scarcity(
                defender, settings
            )
            rate = settings.casualty_rate * (1.0 + pressure)
            count = max(1, round(loser.population * rate))
            casualties = self.effects.apply_casualties(loser.identifier, count, "skirmish")

        return CombatOutcome(
            engagement=engagement,
            era=Era.SKIRMISH,
            occurred=True,
            winner=winner.identifier,
            loser=loser.identifier,
            regions=tuple(regions),
            casualties=casualties,
        )

    def attrition(self, engagement: Engagement, *, allowance: int | None = None) -> CombatOutcome:
        """Resolve a soldier-driven engagement.

        The stronger side captures a number of regions proportional to its
        power ratio; evenly matched sides hold their lines. ``allowance``
        bounds the captures still permitted for this pair today.
        """

        settings = self.settings
        engaged = self._engaged(engagement)
        if engaged is None:
            return CombatOutcome(engagement=engagement, era=Era.ATTRITION, occurred=False)
        attacker, defender = engaged

        attack = profiles.military_power(attacker, settings)
        defence = profiles.military_power(defender, settings)
        if attack == defence:
            return CombatOutcome(engagement=engagement, era=Era.ATTRITION, occurred=False)
        if attack > defence:
            winner, loser, stronger, weaker = attacker, defender, attack, defence
        else:
            winner, loser, stronger, weaker = defender, attacker, defence, attack

        dominance = min(stronger / max(weaker, _EPSILON), settings.max_dominance)
        expected = dominance * engagement.score * settings.capture_scale
        whole = int(expected)
        bonus = 1 if self.rng.uniform() < expected - whole else 0
        limit = settings.max_captures if allowance is None else allowance
        captures = max(0, min(limit, whole + bonus))

        regions: List[str] = []
        casualties = 0
        structures = 0
        for _ in range(captures):
            region = None
            if loser.regions:
                region = loser.regions[-1]
                if self.effects.transfer_territory(loser.identifier, winner.identifier, region):
                    regions.append(region)
                else:
                    region = None
            if loser.population > 0:
                count = max(1, round(loser.population * settings.region_casualty_fraction))
                casualties += self.effects.apply_casualties(loser.identifier, count, "attrition")
            if region is not None and self.rng.uniform() < settings.structure_loss_chance:
                structures += self.effects.destroy_structures(region, "attrition")

        return CombatOutcome(
            engagement=engagement,
            era=Era.ATTRITION,
            occurred=True,
            winner=winner.identifier,
            loser=loser.identifier,
            regions=tuple(regions),
            casualties=casualties,
            structures_lost=structures,
        )


__all__ = ["CombatResolver"]
