"""Decaying tension between settlement pairs.

Pressure accumulates from diplomatic, religious, economic and geographic
signals each time a pair is evaluated and bleeds away between evaluations.
The ledger owns all records; other subsystems read through :meth:`get`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Protocol

import polars as pl

from ..diplomacy import pair_key
from ..world.config import PressureSettings
from ..world.services import AllianceService, RelationService, SettlementDirectory, are_allied
from ..world.settlements import Settlement
from . import profiles

PairKey = tuple[str, str]

_SNAPSHOT_SCHEMA = {
    "settlement_a": pl.String,
    "settlement_b": pl.String,
    "value": pl.Float64,
    "last_day": pl.Int64,
}


class PressureSource(Protocol):
    def decay_rate(self, a: str, b: str) -> float: ...

    def delta(self, a: str, b: str) -> float: ...


@dataclass(slots=True)
class PressureRecord:
    value: float = 0.0
    last_day: int | None = None


class PressureEvaluator:
    """Computes decay rates and signal deltas for a settlement pair."""

    def __init__(
        self,
        settlements: SettlementDirectory,
        relations: RelationService,
        alliances: AllianceService,
        settings: PressureSettings | None = None,
    ) -> None:
        self.settlements = settlements
        self.relations = relations
        self.alliances = alliances
        self.settings = settings or PressureSettings()

    def _pair(self, a: str, b: str) -> tuple[Settlement, Settlement] | None:
        first = self.settlements.get(a)
        second = self.settlements.get(b)
        if first is None or second is None:
            return None
        return first, second

    def decay_rate(self, a: str, b: str) -> float:
        pair = self._pair(a, b)
        if pair is None:
            return self.settings.decay_per_bias
        first, second = pair
        bias = (profiles.diplomacy_bias(first) + profiles.diplomacy_bias(second)) / 2.0
        rate = self.settings.decay_per_bias * bias
        if are_allied(self.alliances, a, b):
            rate += self.settings.allied_decay_bonus
        return rate

    def signals(self, a: str, b: str) -> Dict[str, float]:
        """Return each weighted signal contributing to the pair's tension."""

        pair = self._pair(a, b)
        if pair is None:
            return {}
        first, second = pair
        settings = self.settings
        signals: Dict[str, float] = {}

        relation = self.relations.get(a, b)
        if relation < 0:
            signals["relation"] = min(-relation * settings.relation_weight, settings.relation_cap)

        signals["ideology"] = profiles.ideology_tension(first.government, second.government)

        if first.religion is not None and second.religion is not None:
            compatibility = first.religion.compatibility(second.religion)
            signals["religion"] = -compatibility * settings.religion_weight

        grudge = first.grudges.get(b, 0.0) + second.grudges.get(a, 0.0)
        if grudge > 0:
            signals["grudge"] = min(grudge * settings.grudge_weight, settings.grudge_cap)

        if b in first.embargoes or a in second.embargoes:
            signals["embargo"] = settings.embargo_bonus

        shortages = sum(
            int(flag)
            for flag in (first.famine, first.drought, second.famine, second.drought)
        )
        if shortages:
            signals["scarcity"] = shortages * settings.scarcity_bonus

        raid = profiles.raid_attractiveness(first, second) + profiles.raid_attractiveness(
            second, first
        )
        if raid:
            signals["raid"] = raid * settings.raid_weight

        # Nearness only sharpens an existing grievance.
        if any(value > 0 for value in signals.values()):
            distance = first.distance_to(second)
            signals["proximity"] = min(
                settings.proximity_cap, settings.proximity_scale / max(distance, 1)
            )
            if first.landmass is not None and first.landmass == second.landmass:
                signals["landmass"] = settings.landmass_bonus

        if are_allied(self.alliances, a, b):
            signals["allied"] = -settings.allied_dampening
        if b in first.bonds or a in second.bonds:
            signals["bonded"] = -settings.bonded_dampening
        return signals

    def delta(self, a: str, b: str) -> float:
        pair = self._pair(a, b)
        if pair is None:
            return 0.0
        first, second = pair
        mean_aggression = (profiles.aggression(first) + profiles.aggression(second)) / 2.0
        return sum(self.signals(a, b).values()) * mean_aggression


class PressureLedger:
    """Holds one decaying tension record per unordered settlement pair."""

    def __init__(
        self,
        source: PressureSource,
        settings: PressureSettings | None = None,
    ) -> None:
        self.source = source
        self.settings = settings or PressureSettings()
        self._records: Dict[PairKey, PressureRecord] = {}

    def _clamp(self, value: float) -> float:
        return max(0.0, min(self.settings.ceiling, value))

    def update(self, pair: PairKey, day: int) -> float:
        """Decay and re-evaluate ``pair`` for ``day`` and return the new value.

        A pair is evaluated at most once per day; later calls on the same day
        return the stored value unchanged.
        """

        key = pair_key(*pair)
        record = self._records.get(key)
        if record is None:
            record = PressureRecord()
            self._records[key] = record
        if record.last_day is not None and day <= record.last_day:
            return record.value

        elapsed = 0 if record.last_day is None else day - record.last_day
        if elapsed:
            decay = elapsed * self.source.decay_rate(*key)
            record.value = max(0.0, record.value - decay)
        record.value = self._clamp(record.value + self.source.delta(*key))
        record.last_day = day
        return record.value

    def get(self, pair: PairKey) -> float:
        record = self._records.get(pair_key(*pair))
        return record.value if record is not None else 0.0

    def inject(self, pair: PairKey, amount: float) -> float:
        """Add an externally observed hostility delta to ``pair``.

        Injection does not count as an evaluation, so the pair still decays and
        gathers its own signals on the next :meth:`update`.
        """

        key = pair_key(*pair)
        record = self._records.setdefault(key, PressureRecord())
        record.value = self._clamp(record.value + float(amount))
        return record.value

    def reset(self, pair: PairKey) -> None:
        record = self._records.get(pair_key(*pair))
        if record is not None:
            record.value = 0.0

    def records(self) -> Iterator[tuple[PairKey, PressureRecord]]:
        for key in sorted(self._records):
            yield key, self._records[key]

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> pl.DataFrame:
        """Return every record as a DataFrame ordered by pair."""

        rows = [
            {
                "settlement_a": key[0],
                "settlement_b": key[1],
                "value": record.value,
                "last_day": record.last_day,
            }
            for key, record in self.records()
        ]
        return pl.DataFrame(rows, schema=_SNAPSHOT_SCHEMA)


__all__ = ["PairKey", "PressureEvaluator", "PressureLedger", "PressureRecord", "PressureSource"]
