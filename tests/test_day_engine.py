"""End-to-end tests for the day engine and its ECS world."""

from __future__ import annotations

from typing import Callable, List

import pytest

from strife.conflict.models import Era, TerminationReason
from strife.conflict.registry import ConflictRegistry
from strife.engine.day_engine import DayEngine
from strife.engine.world import (
    GameWorld,
    PressureComponent,
    PressureSystem,
    RegistryComponent,
)
from strife.events.channels import DayLogChannel
from strife.world.config import ConflictConfig, PressureSettings
from strife.world.services import AllianceRegistry, StaticTechnologyGate
from strife.world.settlements import GovernmentType, SettlementManager


@pytest.fixture
def build_engine():
    engines: List[DayEngine] = []

    def _build(settlements: SettlementManager, **kwargs) -> DayEngine:
        engine = DayEngine(settlements, **kwargs)
        engines.append(engine)
        return engine

    yield _build
    for engine in engines:
        engine.world.dispose()


def test_pressure_builds_until_a_skirmish_breaks_out(
    build_engine, settlements, make_settlement, scripted
) -> None:
    settlements.add(make_settlement("alpha", q=0))
    settlements.add(make_settlement("beta", q=2))
    engine = build_engine(settlements, random_source=scripted(default=0.0))

    decision = None
    for _ in range(20):
        engine.pressure.inject(("alpha", "beta"), 6.0)
        context = engine.run_day()
        if context.ignitions:
            decision = context.ignitions[0]
            break
        assert [item.reason for item in context.decisions] == ["below_threshold"]

    assert decision is not None
    assert context.day == 10
    assert decision.instigator == "alpha" and decision.defender == "beta"
    assert decision.era is Era.SKIRMISH
    conflict = engine.registry.get(decision.conflict_id)
    assert (conflict.members(0), conflict.members(1)) == (["alpha"], ["beta"])
    assert conflict.expires_day == 15
    assert engine.has_pending_events()

    engine.run(5)
    assert conflict.reason is TerminationReason.EXHAUSTED
    assert conflict.end_day == 15
    assert not engine.has_pending_events()
    assert engine.registry.cooldown_active(("alpha", "beta"), engine.current_day)


def _seeded_ignition_day(build_engine, make_settlement, seed: int) -> int | None:
    settlements = SettlementManager()
    settlements.add(make_settlement("alpha", soldiers=20))
    settlements.add(make_settlement("beta", q=2, soldiers=20))
    engine = build_engine(settlements, config=ConflictConfig(randomness={"seed": seed}))
    for _ in range(20):
        engine.pressure.inject(("alpha", "beta"), 6.0)
        context = engine.run_day()
        if context.ignitions:
            conflict = engine.registry.get(context.ignitions[0].conflict_id)
            assert (conflict.members(0), conflict.members(1)) == (["alpha"], ["beta"])
            return context.day
    return None


def test_seeded_pressure_ignites_within_twenty_days(build_engine, make_settlement) -> None:
    days = [_seeded_ignition_day(build_engine, make_settlement, seed) for seed in range(10)]

    ignited = [day for day in days if day is not None]
    assert len(ignited) >= 7
    assert all(10 <= day < 20 for day in ignited)
    assert _seeded_ignition_day(build_engine, make_settlement, seed=0) == days[0]


def test_fallen_members_leave_before_allies_are_called(
    build_engine, settlements, make_settlement, scripted
) -> None:
    for index, name in enumerate(("alpha", "delta", "xeno")):
        settlements.add(make_settlement(name, q=index * 2))
    alliances = AllianceRegistry({"delta": "south"})
    engine = build_engine(
        settlements, alliances=alliances, random_source=scripted(default=0.0)
    )
    engine.pressure.inject(("alpha", "delta"), 70.0)
    conflict = engine.registry.get(engine.run_day().ignitions[0].conflict_id)
    assert conflict.members(1) == ["delta"]

    engine.registry.mark_dead("delta")
    alliances.join("xeno", "south")
    context = engine.run_day()

    [result] = context.terminations
    assert result.reason is TerminationReason.COLLAPSED
    assert result.winner == 0
    assert conflict.fallen == ["delta"]
    assert "xeno" not in conflict.participants
    assert settlements.get("xeno").active_conflict is None
    assert settlements.get("delta").active_conflict is None


def test_alliances_are_called_to_arms_on_ignition(
    build_engine, settlements, make_settlement, scripted
) -> None:
    for index, name in enumerate(("a1", "a2", "b1", "b2")):
        settlements.add(make_settlement(name, q=index))
    alliances = AllianceRegistry({"a1": "north", "a2": "north", "b1": "south", "b2": "south"})
    engine = build_engine(
        settlements, alliances=alliances, random_source=scripted(default=0.0)
    )
    engine.pressure.inject(("a1", "b1"), 70.0)

    context = engine.run_day()

    assert [decision.pair for decision in context.ignitions] == [("a1", "b1")]
    conflict = engine.registry.get(context.ignitions[0].conflict_id)
    assert conflict.members(0) == ["a1", "a2"]
    assert conflict.members(1) == ["b1", "b2"]
    assert conflict.sides_consistent()
    for name in ("a1", "a2", "b1", "b2"):
        assert settlements.get(name).active_conflict == conflict.identifier


def test_attrition_collapse_ends_the_war_the_same_day(
    build_engine, settlements, make_settlement, scripted
) -> None:
    settlements.add(make_settlement("empire", population=500, soldiers=100))
    settlements.add(make_settlement("hamlet", population=1, q=3, regions=["r1"]))
    engine = build_engine(
        settlements,
        technology=StaticTechnologyGate(20.0),
        random_source=scripted(default=0.0),
    )
    engine.pressure.inject(("empire", "hamlet"), 100.0)

    context = engine.run_day()

    decision = context.ignitions[0]
    assert decision.era is Era.ATTRITION
    assert decision.instigator == "empire"
    assert context.outcomes[0].regions == ("r1",)
    assert settlements.get("hamlet").population == 0
    assert settlements.get("empire").regions == ["r1"]
    [result] = context.terminations
    assert result.reason is TerminationReason.COLLAPSED
    assert result.winner == 0
    conflict = engine.registry.get(result.conflict_id)
    assert conflict.fallen == ["hamlet"]
    assert settlements.get("empire").active_conflict is None


def _frontier(make_settlement) -> SettlementManager:
    manager = SettlementManager()
    manager.add(
        make_settlement(
            "ashford", population=220, soldiers=30, government=GovernmentType.JUNTA
        )
    )
    manager.add(
        make_settlement("brook", population=180, q=2, government=GovernmentType.DEMOCRACY)
    )
    manager.add(make_settlement("cairn", population=90, q=1, r=2, famine=True))
    manager.add(
        make_settlement(
            "dunmore", population=140, q=-2, r=1, government=GovernmentType.THEOCRACY
        )
    )
    manager.add(
        make_settlement(
            "elmstead",
            population=60,
            q=3,
            r=-1,
            government=GovernmentType.ANARCHY,
            regions=["e1"],
        )
    )
    manager.get("ashford").grudges["brook"] = 10.0
    return manager


def _seeded_run(build_engine, make_settlement, seed: int) -> DayEngine:
    settlements = _frontier(make_settlement)
    engine = build_engine(
        settlements,
        config=ConflictConfig(randomness={"seed": seed}),
        alliances=AllianceRegistry({"brook": "river", "elmstead": "river"}),
    )
    engine.relations.set("ashford", "brook", -60.0)
    engine.relations.set("dunmore", "cairn", -40.0)
    for _ in range(60):
        for pair in (("ashford", "brook"), ("cairn", "dunmore")):
            engine.pressure.inject(pair, 3.0)
        engine.run_day()
    return engine


def test_same_seed_replays_identically(build_engine, make_settlement) -> None:
    first = _seeded_run(build_engine, make_settlement, seed=11)
    second = _seeded_run(build_engine, make_settlement, seed=11)

    assert first.registry.snapshot().equals(second.registry.snapshot())
    assert first.pressure.snapshot().equals(second.pressure.snapshot())
    populations = [
        {item.identifier: item.population for item in engine.settlements.living()}
        for engine in (first, second)
    ]
    assert populations[0] == populations[1]


def test_sides_stay_disjoint_across_a_long_run(build_engine, make_settlement) -> None:
    engine = _seeded_run(build_engine, make_settlement, seed=3)

    seen: set[str] = set()
    for conflict in engine.registry:
        assert conflict.sides_consistent()
        if not conflict.active:
            continue
        assert not seen & conflict.participants
        seen |= conflict.participants
    for settlement in engine.settlements.settlements.values():
        assert settlement.population >= 0
        assert settlement.soldiers >= 0


def test_systems_run_in_phase_then_priority_order(build_engine, settlements) -> None:
    engine = build_engine(settlements)
    seen: List[str] = []

    def recorder(label: str) -> Callable[[GameWorld, object], None]:
        return lambda world, context: seen.append(label)

    for phase in DayEngine.PHASE_ORDER:
        engine.world.register_system(phase, recorder(phase), priority=0)
    engine.world.register_system("combat", recorder("late"), priority=500)
    engine.world.register_system("combat", recorder("early"), priority=-5)

    engine.run_day()

    assert seen == [
        "timers",
        "pressure",
        "ignition",
        "coalition",
        "participation",
        "early",
        "combat",
        "late",
        "termination",
    ]


def test_default_systems_register_once_per_world(settlements) -> None:
    world = GameWorld()
    try:
        DayEngine(settlements, world=world)
        DayEngine(settlements, world=world)
        pressure_systems = [
            entry
            for entry in world._systems["pressure"]
            if isinstance(entry.callback.__self__, PressureSystem)
        ]
        assert len(pressure_systems) == 1
        assert world.has_system_type(PressureSystem)
    finally:
        world.dispose()


def test_register_system_rejects_plain_objects() -> None:
    world = GameWorld()
    with pytest.raises(TypeError):
        world.register_system("timers", object())


def test_singletons_are_replaced_and_worlds_isolated(settlements) -> None:
    north, south = GameWorld(), GameWorld()
    first, second = ConflictRegistry(settlements), ConflictRegistry(settlements)
    try:
        entity = north.add_singleton(RegistryComponent(first))
        south.add_singleton(RegistryComponent(second))
        replacement = ConflictRegistry(settlements)

        assert north.add_singleton(RegistryComponent(replacement)) == entity
        assert north.get_singleton(RegistryComponent).registry is replacement
        assert south.get_singleton(RegistryComponent).registry is second
        assert north.get_singleton(PressureComponent) is None
    finally:
        north.dispose()
        south.dispose()
    assert north.get_singleton(RegistryComponent) is None


def test_daily_sample_respects_budget(settlements, relations, make_settlement, scripted) -> None:
    for index, name in enumerate("abcdef"):
        settlements.add(make_settlement(name, q=index))
    system = PressureSystem(scripted(default=0.5), PressureSettings(pairs_per_day=4))

    pairs = system.sample_pairs(settlements, relations)

    assert len(pairs) == 4 and len(set(pairs)) == 4
    assert all(first < second for first, second in pairs)


def test_hostile_pairs_are_sampled_first(
    settlements, relations, make_settlement, scripted
) -> None:
    for index, name in enumerate("abcdefg"):
        settlements.add(make_settlement(name, q=index))
    settlements.get("g").population = 0
    relations.set("e", "c", -40.0)
    relations.set("a", "f", -30.0)
    relations.set("a", "b", -10.0)
    relations.set("a", "g", -90.0)
    rng = scripted(default=0.5)
    system = PressureSystem(rng, PressureSettings(pairs_per_day=3))

    pairs = system.sample_pairs(settlements, relations)

    assert pairs[:2] == [("a", "f"), ("c", "e")]
    assert len(pairs) == 3
    assert all("g" not in pair for pair in pairs)
    assert rng.calls == 1


def test_log_channel_records_each_day(build_engine, settlements, make_settlement) -> None:
    settlements.add(make_settlement("alpha"))
    log = DayLogChannel()
    engine = build_engine(settlements, log_channel=log)

    engine.run(2)

    assert [entry.day for entry in log.entries] == [0, 1]
    assert log.entries[0].summary == "Quiet day across the settlements."
    assert engine.current_day == 2
    with pytest.raises(ValueError):
        engine.run(-1)
