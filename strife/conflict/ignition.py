"""Decides whether accumulated pressure between two settlements turns into war."""

from __future__ import annotations

from typing import Protocol

from ..diplomacy import pair_key
from ..events.event_queue import SKIRMISH_EXPIRED, EventQueue
from ..events.notifications import ConflictStarted
from ..time.season_tracker import FixedSeason
from ..world.config import CombatSettings, IgnitionSettings
from ..world.services import (
    AllianceService,
    Clock,
    NotificationSink,
    NullSink,
    RandomSource,
    SettlementDirectory,
    TechnologyGate,
    are_allied,
)
from ..world.settlements import Settlement
from . import profiles
from .models import Era, IgnitionDecision
from .pressure import PairKey, PressureLedger
from .registry import ConflictRegistry


class SeasonalModifier(Protocol):
    def conflict_modifier(self) -> float: ...


class IgnitionEvaluator:
    """Turns pair pressure into new conflicts.

    Every precondition fails closed: when a check rejects the pair nothing is
    mutated and no randomness is consumed.
    """

    def __init__(
        self,
        settlements: SettlementDirectory,
        registry: ConflictRegistry,
        pressure: PressureLedger,
        alliances: AllianceService,
        technology: TechnologyGate,
        rng: RandomSource,
        clock: Clock,
        *,
        season: SeasonalModifier | None = None,
        sink: NotificationSink | None = None,
        queue: EventQueue | None = None,
        settings: IgnitionSettings | None = None,
        combat: CombatSettings | None = None,
    ) -> None:
        self.settlements = settlements
        self.registry = registry
        self.pressure = pressure
        self.alliances = alliances
        self.technology = technology
        self.rng = rng
        self.clock = clock
        self.season = season or FixedSeason()
        self.sink = sink or NullSink()
        self.queue = queue
        self.settings = settings or IgnitionSettings()
        self.combat = combat or CombatSettings()

    # ------------------------------------------------------------------
    def current_era(self) -> Era:
        return profiles.detect_era(
            self.technology.military_level(), self.settings.era_tech_threshold
        )

    def threshold(self, era: Era, first: Settlement, second: Settlement) -> float:
        base = (
            self.settings.skirmish_threshold
            if era is Era.SKIRMISH
            else self.settings.attrition_threshold
        )
        combined = profiles.aggression(first) + profiles.aggression(second)
        return base - self.settings.threshold_per_aggression * (combined - 2.0)

    def base_chance(self, pressure: float, threshold: float) -> float:
        excess = max(0.0, pressure - threshold)
        return self.settings.base_chance_floor + self.settings.base_chance_slope * excess

    def max_chance(self, era: Era) -> float:
        if era is Era.SKIRMISH:
            return self.settings.skirmish_max_chance
        return self.settings.attrition_max_chance

    def choose_instigator(
        self, first: Settlement, second: Settlement
    ) -> tuple[Settlement, Settlement]:
        """Return ``(instigator, defender)`` ordered by eagerness to attack."""

        first_score = profiles.aggression(first) * profiles.readiness(first, second, self.combat)
        second_score = profiles.aggression(second) * profiles.readiness(
            second, first, self.combat
        )
        if first_score > second_score:
            return first, second
        if second_score > first_score:
            return second, first
        if first.identifier <= second.identifier:
            return first, second
        return second, first

    def probability(
        self,
        era: Era,
        pressure: float,
        threshold: float,
        instigator: Settlement,
        defender: Settlement,
    ) -> float:
        chance = (
            self.base_chance(pressure, threshold)
            * profiles.aggression(instigator)
            * profiles.readiness(instigator, defender, self.combat)
            * (1.0 - profiles.deterrence(defender) * self.settings.deterrence_weight)
            * self.season.conflict_modifier()
        )
        return max(0.0, min(self.max_chance(era), chance))

    # ------------------------------------------------------------------
    def _rejection(self, key: PairKey, day: int) -> str | None:
        first = self.settlements.get(key[0])
        second = self.settlements.get(key[1])
        if first is None or second is None:
            return "unknown_settlement"
        if key[0] == key[1]:
            return "same_settlement"
        if not (self.registry.is_alive(key[0]) and self.registry.is_alive(key[1])):
            return "dead_settlement"
        if are_allied(self.alliances, key[0], key[1]):
            return "allied"
        if self.registry.conflict_of(key[0]) or self.registry.conflict_of(key[1]):
            return "already_at_war"
        if first.revolution or second.revolution:
            return "revolution"
        if self.registry.cooldown_active(key, day, self.settings.cooldown_days):
            return "cooldown"
        return None

    def evaluate(self, pair: PairKey, day: int | None = None) -> IgnitionDecision:
        """Evaluate ``pair`` and start a conflict when the dice allow it."""

        today = self.clock.current_day if day is None else day
        key = pair_key(*pair)
        rejection = self._rejection(key, today)
        if rejection is not None:
            return IgnitionDecision(pair=key, ignited=False, reason=rejection)

        first = self.settlements.get(key[0])
        second = self.settlements.get(key[1])
        assert first is not None and second is not None
        era = self.current_era()
        pressure = self.pressure.get(key)
        threshold = self.threshold(era, first, second)
        if pressure < threshold:
            return IgnitionDecision(
                pair=key,
                ignited=False,
                reason="below_threshold",
                era=era,
                pressure=pressure,
                threshold=threshold,
            )

        instigator, defender = self.choose_instigator(first, second)
        distance = instigator.distance_to(defender)
        if era is Era.SKIRMISH and distance > self.settings.raid_distance_limit:
            return IgnitionDecision(
                pair=key,
                ignited=False,
                reason="out_of_range",
                era=era,
                pressure=pressure,
                threshold=threshold,
                instigator=instigator.identifier,
                defender=defender.identifier,
            )

        chance = self.probability(era, pressure, threshold, instigator, defender)
        if chance <= 0.0 or self.rng.uniform() >= chance:
            return IgnitionDecision(
                pair=key,
                ignited=False,
                reason="roll_failed",
                era=era,
                pressure=pressure,
                threshold=threshold,
                probability=chance,
                instigator=instigator.identifier,
                defender=defender.identifier,
            )

        expires_day = None
        if era is Era.SKIRMISH:
            expires_day = today + self._skirmish_duration()
        conflict = self.registry.create(
            instigator.identifier,
            defender.identifier,
            day=today,
            era=era,
            expires_day=expires_day,
        )
        if expires_day is not None and self.queue is not None:
            self.queue.schedule(expires_day, SKIRMISH_EXPIRED, conflict.identifier)
        self.sink.emit(
            ConflictStarted(
                day=today,
                conflict_id=conflict.identifier,
                instigator=instigator.identifier,
                defender=defender.identifier,
                era=era,
                probability=chance,
                pressure=pressure,
            )
        )
        return IgnitionDecision(
            pair=key,
            ignited=True,
            reason="ignited",
            era=era,
            pressure=pressure,
            threshold=threshold,
            probability=chance,
            instigator=instigator.identifier,
            defender=defender.identifier,
            conflict_id=conflict.identifier,
        )

    def try_ignite(self, pair: PairKey, day: int | None = None) -> bool:
        return self.evaluate(pair, day).ignited

    def _skirmish_duration(self) -> int:
        low = self.settings.skirmish_min_days
        high = self.settings.skirmish_max_days
        span = high - low + 1
        return min(high, low + int(self.rng.uniform() * span))


__all__ = ["IgnitionEvaluator", "SeasonalModifier"]
