"""Shared fixtures for the conflict simulation tests."""

from __future__ import annotations

from typing import Callable, Iterable, List

import pytest

from strife.conflict.pressure import PressureEvaluator, PressureLedger
from strife.conflict.registry import ConflictRegistry
from strife.diplomacy import RelationLedger
from strife.events.channels import NotificationChannel
from strife.events.event_queue import EventQueue
from strife.world.coords import HexCoord
from strife.world.services import AllianceRegistry, SettlementEffects
from strife.world.settlements import GovernmentType, Settlement, SettlementManager


class ScriptedRandom:
    """Random source replaying fixed values, then a constant default."""

    def __init__(self, values: Iterable[float] = (), *, default: float = 0.0) -> None:
        self._values: List[float] = list(values)
        self.default = default
        self.calls = 0

    def uniform(self) -> float:
        self.calls += 1
        if self._values:
            return self._values.pop(0)
        return self.default


SettlementFactory = Callable[..., Settlement]


@pytest.fixture
def scripted() -> type[ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture
def make_settlement() -> SettlementFactory:
    def _make(
        identifier: str,
        *,
        population: int = 100,
        q: int = 0,
        r: int = 0,
        government: GovernmentType = GovernmentType.CHIEFDOM,
        **fields: object,
    ) -> Settlement:
        return Settlement(
            identifier=identifier,
            name=identifier.title(),
            population=population,
            government=government,
            location=HexCoord(q, r),
            **fields,
        )

    return _make


@pytest.fixture
def settlements() -> SettlementManager:
    return SettlementManager()


@pytest.fixture
def relations() -> RelationLedger:
    return RelationLedger()


@pytest.fixture
def alliances() -> AllianceRegistry:
    return AllianceRegistry()


@pytest.fixture
def effects(settlements: SettlementManager) -> SettlementEffects:
    return SettlementEffects(settlements)


@pytest.fixture
def registry(settlements: SettlementManager) -> ConflictRegistry:
    return ConflictRegistry(settlements)


@pytest.fixture
def ledger(
    settlements: SettlementManager,
    relations: RelationLedger,
    alliances: AllianceRegistry,
) -> PressureLedger:
    return PressureLedger(PressureEvaluator(settlements, relations, alliances))


@pytest.fixture
def channel() -> NotificationChannel:
    return NotificationChannel()


@pytest.fixture
def queue() -> EventQueue:
    return EventQueue()
