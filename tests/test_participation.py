"""Tests for the daily participation model."""

from __future__ import annotations

import pytest

from strife.conflict.cohesion import CohesionMonitor
from strife.conflict.models import Era
from strife.conflict.participation import ParticipationModel
from strife.world.settlements import GovernmentType


@pytest.fixture
def front(settlements, registry, make_settlement):
    settlements.add(make_settlement("keep", influences={"happiness": 2.0}))
    settlements.add(make_settlement("mill", q=8))
    return registry.create("keep", "mill", day=0, era=Era.SKIRMISH)


def _model(settlements, registry, relations, effects, rng, cohesion=None):
    return ParticipationModel(
        settlements, registry, relations, effects, rng, cohesion=cohesion
    )


def test_score_applies_modifiers(
    settlements, registry, relations, effects, make_settlement
) -> None:
    model = _model(settlements, registry, relations, effects, None)
    enemy = make_settlement("enemy", q=8)

    plain = make_settlement("plain")
    assert model.score(plain, [enemy], age=0) == pytest.approx(0.5)
    assert model.score(plain, [enemy], age=25) == pytest.approx(0.45)

    drilled = make_settlement(
        "drilled", influences={"military": 10.0}, traditions=frozenset({"martial"})
    )
    assert model.score(drilled, [], age=0) == pytest.approx(1.4)

    diplomatic = make_settlement("diplomatic", government=GovernmentType.DEMOCRACY)
    assert model.score(diplomatic, [], age=0) == pytest.approx(0.85)

    wrecked = make_settlement("wrecked", unrest=90.0, disaster=True)
    far = make_settlement("far", q=60)
    assert model.score(wrecked, [far], age=30) == pytest.approx(0.3)


def test_chance_is_clamped(settlements, registry, relations, effects) -> None:
    model = _model(settlements, registry, relations, effects, None)
    assert model.chance(0.1) == 0.1
    assert model.chance(1.0) == 0.5
    assert model.chance(5.0) == 0.85


def test_engagement_applies_strain(
    settlements, registry, relations, effects, scripted, front
) -> None:
    rng = scripted([0.1, 0.0], default=0.99)
    engagements = _model(settlements, registry, relations, effects, rng).step(front, day=1)

    assert len(engagements) == 1
    engagement = engagements[0]
    assert (engagement.attacker, engagement.defender) == ("keep", "mill")
    assert engagement.conflict_id == front.identifier
    assert engagement.score == pytest.approx(0.5)
    assert engagement.distance == 8.0
    assert relations.get("keep", "mill") == -0.5
    assert settlements.get("keep").influence("happiness") == 1.0
    assert settlements.get("mill").influence("happiness") == -1.0


def test_targets_prefer_near_undefended_enemies(
    settlements, registry, relations, effects, scripted, make_settlement
) -> None:
    model = _model(settlements, registry, relations, effects, scripted([0.0, 0.99]))
    raider = make_settlement("raider")
    near = make_settlement("near", q=1)
    fort = make_settlement("fort", q=1, specializations=frozenset({"fortified", "walls"}))
    distant = make_settlement("distant", q=30)

    assert model.choose_target(raider, [near, fort, distant]) is near
    assert model.choose_target(raider, [near, fort, distant]) is distant


def test_dead_members_and_ended_conflicts_do_not_fight(
    settlements, registry, relations, effects, scripted, front
) -> None:
    model = _model(settlements, registry, relations, effects, scripted())
    registry.mark_dead("mill")
    assert model.step(front, day=1) == []

    front.end_day = 2
    assert model.step(front, day=2) == []


def test_cohesion_runs_before_sampling(
    settlements, registry, relations, effects, scripted, front, make_settlement
) -> None:
    settlements.add(make_settlement("inn", q=-40, unrest=90.0, disaster=True))
    registry.join(front.identifier, "inn")
    front.assign("inn", 0)
    cohesion = CohesionMonitor(relations)
    model = _model(settlements, registry, relations, effects, scripted(default=0.99), cohesion)

    model.step(front, day=1)

    assert cohesion.slack_days(front.identifier, 0, "inn") == 1
    assert cohesion.slack_days(front.identifier, 0, "keep") == 0
