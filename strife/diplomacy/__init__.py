"""Bilateral relations between settlements."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..world.graph import build_relation_graph

if TYPE_CHECKING:
    import networkx as nx

__all__ = ["RelationLedger", "pair_key"]


def pair_key(settlement_a: str, settlement_b: str) -> tuple[str, str]:
    """Return the canonical unordered key for two settlements."""

    if settlement_a <= settlement_b:
        return (settlement_a, settlement_b)
    return (settlement_b, settlement_a)


@dataclass(slots=True)
class RelationLedger:
    """Sparse store of standings; absent pairs read as ``neutral_value``.

    A settlement always regards itself at ``max_value``; writes for such pairs
    are ignored.
    """

    neutral_value: float = 0.0
    min_value: float = -100.0
    max_value: float = 100.0
    daily_decay: float = 0.2
    _standings: dict[tuple[str, str], float] = field(init=False, default_factory=dict)

    def _bounded(self, value: float) -> float:
        return max(self.min_value, min(self.max_value, float(value)))

    def get(self, settlement_a: str, settlement_b: str) -> float:
        if settlement_a == settlement_b:
            return self.max_value
        return self._standings.get(pair_key(settlement_a, settlement_b), self.neutral_value)

    def set(self, settlement_a: str, settlement_b: str, value: float) -> None:
        if settlement_a != settlement_b:
            self._standings[pair_key(settlement_a, settlement_b)] = self._bounded(value)

    def adjust(self, settlement_a: str, settlement_b: str, amount: float) -> float:
        if settlement_a == settlement_b:
            return self.max_value
        updated = self._bounded(self.get(settlement_a, settlement_b) + float(amount))
        self._standings[pair_key(settlement_a, settlement_b)] = updated
        return updated

    def decay(self) -> None:
        """Move every stored standing ``daily_decay`` closer to neutral.

        Standings that reach neutral are forgotten so the store stays sparse.
        """

        step = self.daily_decay
        neutral = self.neutral_value
        drifted: dict[tuple[str, str], float] = {}
        for key, value in self._standings.items():
            offset = value - neutral
            if abs(offset) <= step:
                continue
            drifted[key] = value - step if offset > 0 else value + step
        self._standings = drifted

    def as_graph(self, settlements: Iterable[str]) -> nx.Graph:
        """Return a networkx view of the standings among ``settlements``."""

        return build_relation_graph(
            settlements, self._standings, neutral_value=self.neutral_value
        )
