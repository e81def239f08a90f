"""Tests for the validated conflict configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from strife.world.config import (
    CohesionSettings,
    ConflictConfig,
    IgnitionSettings,
    PressureSettings,
)
from strife.world.rng import WorldRandomness


def test_defaults_match_documented_constants() -> None:
    config = ConflictConfig()

    assert config.pressure.ceiling == 100.0
    assert config.ignition.skirmish_threshold < config.ignition.attrition_threshold
    assert config.ignition.raid_distance_limit == pytest.approx(18.0)
    assert config.cohesion.slack_ratio == 0.75
    assert config.combat.max_captures == 3
    assert config.termination.max_duration_days == 365
    assert config.seed == 0


def test_nested_payload_round_trips_through_model_dump() -> None:
    config = ConflictConfig.model_validate(
        {
            "name": "Border wars",
            "ignition": {"cooldown_days": 10, "skirmish_min_days": 2, "skirmish_max_days": 4},
            "randomness": {"seed": 42},
            "metadata": {"scenario": 3},
        }
    )

    restored = ConflictConfig.model_validate(config.model_dump())
    assert restored == config
    assert restored.ignition.cooldown_days == 10
    assert restored.metadata == {"scenario": 3}


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ConflictConfig.model_validate({"pressure": {"ceiling": 50, "bogus": 1}})


@pytest.mark.parametrize(
    "factory",
    [
        lambda: PressureSettings(ceiling=0),
        lambda: IgnitionSettings(skirmish_min_days=10, skirmish_max_days=3),
        lambda: IgnitionSettings(skirmish_max_chance=1.5),
        lambda: CohesionSettings(grace_days=10, max_penalty_days=5),
    ],
)
def test_invalid_settings_raise(factory) -> None:
    with pytest.raises(ValidationError):
        factory()


def test_metadata_must_be_a_mapping() -> None:
    with pytest.raises((TypeError, ValidationError)):
        ConflictConfig(metadata=["not", "a", "mapping"])


def test_randomness_factory_uses_configured_seed() -> None:
    config = ConflictConfig.model_validate({"randomness": {"seed": 7}})
    randomness = config.randomness_factory()

    assert isinstance(randomness, WorldRandomness)
    assert randomness.seed == 7
