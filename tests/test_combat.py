"""Tests for skirmish and attrition combat resolution."""

from __future__ import annotations

import pytest

from strife.conflict.combat import CombatResolver
from strife.conflict.models import Engagement, Era
from strife.world.services import SettlementEffects


def _engagement(conflict_id: int = 1, score: float = 1.0) -> Engagement:
    return Engagement(
        conflict_id=conflict_id, attacker="keep", defender="mill", score=score, distance=2.0
    )


@pytest.fixture
def skirmish(settlements, registry, make_settlement):
    settlements.add(make_settlement("keep"))
    settlements.add(make_settlement("mill", q=2, regions=["m1", "m2"]))
    return registry.create("keep", "mill", day=0, era=Era.SKIRMISH)


def test_skirmish_winner_takes_border_region(
    settlements, registry, effects, scripted, skirmish
) -> None:
    resolver = CombatResolver(settlements, registry, effects, scripted([0.1, 0.2]))

    outcomes = resolver.resolve(skirmish, [_engagement()])

    outcome = outcomes[0]
    assert outcome.occurred
    assert (outcome.winner, outcome.loser) == ("keep", "mill")
    assert outcome.regions == ("m2",)
    assert outcome.casualties == 2
    assert settlements.get("mill").population == 98
    assert settlements.get("keep").regions == ["m2"]
    assert skirmish.casualties == 2
    assert skirmish.regions_captured == 1


def test_skirmish_raid_may_not_happen(settlements, registry, effects, scripted, skirmish) -> None:
    resolver = CombatResolver(settlements, registry, effects, scripted([0.5]))
    outcome = resolver.skirmish(_engagement())

    assert not outcome.occurred
    assert settlements.get("mill").population == 100


def test_defender_can_win_and_scarcity_raises_losses(
    settlements, registry, effects, scripted, skirmish
) -> None:
    settlements.get("keep").famine = True
    settlements.get("mill").drought = True
    resolver = CombatResolver(settlements, registry, effects, scripted([0.1, 0.9]))

    outcome = resolver.skirmish(_engagement())

    assert outcome.winner == "mill"
    assert outcome.regions == ()
    assert outcome.casualties == 3
    assert settlements.get("keep").population == 97


def test_skirmish_losses_never_go_negative(
    settlements, registry, effects, scripted, skirmish
) -> None:
    settlements.get("mill").population = 1
    resolver = CombatResolver(settlements, registry, effects, scripted([0.1, 0.0]))

    outcome = resolver.skirmish(_engagement())

    assert outcome.casualties == 1
    assert settlements.get("mill").population == 0
    follow_up = resolver.skirmish(_engagement())
    assert not follow_up.occurred


def test_attrition_captures_scale_with_dominance(
    settlements, registry, scripted, make_settlement
) -> None:
    settlements.add(make_settlement("keep", population=400, soldiers=100))
    settlements.add(
        make_settlement("mill", population=200, soldiers=10, regions=["d1", "d2", "d3", "d4"])
    )
    conflict = registry.create("keep", "mill", day=0, era=Era.ATTRITION)
    effects = SettlementEffects(settlements, structures={"d4": 2, "d2": 1})
    resolver = CombatResolver(
        settlements, registry, effects, scripted([0.5, 0.1, 0.9, 0.1])
    )

    outcome = resolver.resolve(conflict, [_engagement()])[0]

    assert outcome.era is Era.ATTRITION
    assert outcome.winner == "keep"
    assert outcome.regions == ("d4", "d3", "d2")
    assert outcome.casualties == 29
    assert outcome.structures_lost == 3
    assert settlements.get("mill").regions == ["d1"]
    assert settlements.get("mill").population == 171
    assert conflict.regions_captured == 3


@pytest.mark.parametrize("roll, regions", [(0.1, ("k1",)), (0.9, ())])
def test_fractional_captures_are_rolled(
    settlements, registry, effects, scripted, make_settlement, roll, regions
) -> None:
    settlements.add(make_settlement("keep", soldiers=5, regions=["k1"]))
    settlements.add(make_settlement("mill", soldiers=20))
    registry.create("keep", "mill", day=0, era=Era.ATTRITION)
    resolver = CombatResolver(settlements, registry, effects, scripted([roll], default=0.99))

    outcome = resolver.attrition(_engagement(score=0.3))

    assert (outcome.winner, outcome.loser) == ("mill", "keep")
    assert outcome.regions == regions
    assert settlements.get("mill").regions == list(regions)
    assert settlements.get("keep").population == (95 if regions else 100)


def test_evenly_matched_armies_hold_their_lines(
    settlements, registry, effects, scripted, make_settlement
) -> None:
    settlements.add(make_settlement("keep"))
    settlements.add(make_settlement("mill", regions=["m1"]))
    conflict = registry.create("keep", "mill", day=0, era=Era.ATTRITION)
    rng = scripted()
    resolver = CombatResolver(settlements, registry, effects, rng)

    [outcome] = resolver.resolve(conflict, [_engagement(score=0.3)])

    assert not outcome.occurred
    assert outcome.regions == () and outcome.casualties == 0
    assert settlements.get("mill").regions == ["m1"]
    assert settlements.get("keep").population == 100
    assert rng.calls == 0


def test_daily_capture_cap_is_shared_by_both_directions(
    settlements, registry, effects, scripted, make_settlement
) -> None:
    settlements.add(make_settlement("keep", soldiers=100))
    settlements.add(
        make_settlement("mill", soldiers=10, regions=[f"m{index}" for index in range(10)])
    )
    conflict = registry.create("keep", "mill", day=0, era=Era.ATTRITION)
    resolver = CombatResolver(settlements, registry, effects, scripted(default=0.99))
    counter = Engagement(
        conflict_id=conflict.identifier, attacker="mill", defender="keep", score=1.0, distance=2.0
    )

    outcomes = resolver.resolve(conflict, [_engagement(), counter])

    assert [outcome.winner for outcome in outcomes] == ["keep", "keep"]
    assert sum(len(outcome.regions) for outcome in outcomes) == resolver.settings.max_captures
    assert outcomes[1].regions == () and outcomes[1].casualties == 0
    assert conflict.regions_captured == 3
    assert settlements.get("keep").regions == ["m9", "m8", "m7"]

    resolver.resolve(conflict, [_engagement()])
    assert conflict.regions_captured == 6
    assert len(settlements.get("mill").regions) == 4


def test_attrition_collapse_of_a_tiny_settlement(
    settlements, registry, effects, scripted, make_settlement
) -> None:
    settlements.add(make_settlement("keep", population=500, soldiers=100))
    settlements.add(make_settlement("mill", population=1, soldiers=0, regions=["m1"]))
    conflict = registry.create("keep", "mill", day=0, era=Era.ATTRITION)
    resolver = CombatResolver(settlements, registry, effects, scripted())

    outcome = resolver.resolve(conflict, [_engagement()])[0]

    assert outcome.casualties == 1
    assert outcome.regions == ("m1",)
    assert settlements.get("mill").population == 0
    assert settlements.get("keep").regions == ["m1"]
