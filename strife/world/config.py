"""Validated configuration models for the conflict simulation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .rng import WorldRandomness


class PressureSettings(BaseModel):
    """Weights for the tension signals accumulated per settlement pair."""

    model_config = ConfigDict(extra="forbid")

    ceiling: float = Field(default=100.0, gt=0.0)
    decay_per_bias: float = Field(default=0.2, ge=0.0)
    allied_decay_bonus: float = Field(default=1.0, ge=0.0)
    relation_weight: float = Field(default=0.25, ge=0.0)
    relation_cap: float = Field(default=5.0, ge=0.0)
    religion_weight: float = Field(default=1.0, ge=0.0)
    grudge_weight: float = Field(default=0.2, ge=0.0)
    grudge_cap: float = Field(default=3.0, ge=0.0)
    embargo_bonus: float = Field(default=1.5, ge=0.0)
    proximity_scale: float = Field(default=6.0, ge=0.0)
    proximity_cap: float = Field(default=2.0, ge=0.0)
    landmass_bonus: float = Field(default=0.5, ge=0.0)
    scarcity_bonus: float = Field(default=0.5, ge=0.0)
    raid_weight: float = Field(default=1.0, ge=0.0)
    allied_dampening: float = Field(default=3.0, ge=0.0)
    bonded_dampening: float = Field(default=1.0, ge=0.0)
    pairs_per_day: int = Field(default=12, ge=1)
    hostile_threshold: float = Field(default=-25.0)


class IgnitionSettings(BaseModel):
    """Thresholds and odds for turning pressure into open conflict."""

    model_config = ConfigDict(extra="forbid")

    skirmish_threshold: float = Field(default=60.0, ge=0.0)
    attrition_threshold: float = Field(default=75.0, ge=0.0)
    threshold_per_aggression: float = Field(default=10.0, ge=0.0)
    base_chance_floor: float = Field(default=0.02, ge=0.0, le=1.0)
    base_chance_slope: float = Field(default=0.01, ge=0.0)
    skirmish_max_chance: float = Field(default=0.35, ge=0.0, le=1.0)
    attrition_max_chance: float = Field(default=0.2, ge=0.0, le=1.0)
    deterrence_weight: float = Field(default=0.5, ge=0.0, le=1.0)
    era_tech_threshold: float = Field(default=10.0, ge=0.0)
    base_raid_distance: float = Field(default=6.0, gt=0.0)
    raid_distance_multiple: float = Field(default=3.0, gt=0.0)
    cooldown_days: int = Field(default=30, ge=0)
    skirmish_min_days: int = Field(default=5, ge=1)
    skirmish_max_days: int = Field(default=15, ge=1)

    @model_validator(mode="after")
    def _check_skirmish_range(self) -> "IgnitionSettings":
        if self.skirmish_min_days > self.skirmish_max_days:
            raise ValueError("skirmish_min_days must not exceed skirmish_max_days")
        return self

    @property
    def raid_distance_limit(self) -> float:
        return self.base_raid_distance * self.raid_distance_multiple


class CoalitionSettings(BaseModel):
    """Affinity weights used when assigning extra participants to a side."""

    model_config = ConfigDict(extra="forbid")

    allied_bonus: float = Field(default=1000.0, ge=0.0)
    call_to_arms: bool = Field(default=True)


class ParticipationSettings(BaseModel):
    """Daily participation scoring for combatants."""

    model_config = ConfigDict(extra="forbid")

    basis_rate: float = Field(default=0.5, gt=0.0)
    military_weight: float = Field(default=0.02, ge=0.0)
    martial_bonus: float = Field(default=0.2, ge=0.0)
    festive_penalty: float = Field(default=0.05, ge=0.0)
    unrest_threshold: float = Field(default=60.0, ge=0.0, le=100.0)
    unrest_penalty: float = Field(default=0.8, gt=0.0, le=1.0)
    disaster_penalty: float = Field(default=0.7, gt=0.0, le=1.0)
    proximity_half_range: float = Field(default=8.0, gt=0.0)
    proximity_floor: float = Field(default=0.35, gt=0.0, le=1.0)
    diplomacy_bias_cutoff: float = Field(default=1.1, gt=0.0)
    diplomacy_penalty: float = Field(default=0.85, gt=0.0, le=1.0)
    age_decay_days: int = Field(default=20, ge=0)
    age_decay: float = Field(default=0.9, gt=0.0, le=1.0)
    score_min: float = Field(default=0.3, gt=0.0)
    score_max: float = Field(default=1.6, gt=0.0)
    chance_min: float = Field(default=0.1, ge=0.0, le=1.0)
    chance_max: float = Field(default=0.85, ge=0.0, le=1.0)
    relation_penalty: float = Field(default=0.5, ge=0.0)
    happiness_penalty: float = Field(default=1.0, ge=0.0)
    target_deterrence_weight: float = Field(default=0.5, ge=0.0, le=1.0)


class CohesionSettings(BaseModel):
    """Tolerance for coalition members that lag behind their side."""

    model_config = ConfigDict(extra="forbid")

    slack_ratio: float = Field(default=0.75, gt=0.0, le=1.0)
    grace_days: int = Field(default=5, ge=0)
    max_penalty_days: int = Field(default=15, ge=0)
    counter_cap: int = Field(default=30, ge=1)
    relation_penalty: float = Field(default=2.0, ge=0.0)

    @model_validator(mode="after")
    def _check_window(self) -> "CohesionSettings":
        if self.max_penalty_days < self.grace_days:
            raise ValueError("max_penalty_days must not be below grace_days")
        return self


class CombatSettings(BaseModel):
    """Casualty and territory parameters for both combat eras."""

    model_config = ConfigDict(extra="forbid")

    military_strength_weight: float = Field(default=0.04, ge=0.0)
    unrest_threshold: float = Field(default=60.0, ge=0.0, le=100.0)
    raid_chance: float = Field(default=0.25, ge=0.0, le=1.0)
    casualty_rate: float = Field(default=0.02, ge=0.0, le=1.0)
    scarcity_pressure: float = Field(default=0.25, ge=0.0)
    attrition_military_weight: float = Field(default=0.02, ge=0.0)
    max_captures: int = Field(default=3, ge=1)
    capture_scale: float = Field(default=0.5, gt=0.0)
    max_dominance: float = Field(default=10.0, ge=1.0)
    region_casualty_fraction: float = Field(default=0.05, ge=0.0, le=1.0)
    structure_loss_chance: float = Field(default=0.3, ge=0.0, le=1.0)


class TerminationSettings(BaseModel):
    """Gates for surrender, peace and exhaustion."""

    model_config = ConfigDict(extra="forbid")

    surrender_min_age: int = Field(default=10, ge=0)
    surrender_ratio: float = Field(default=0.4, gt=0.0, le=1.0)
    surrender_chance: float = Field(default=0.2, ge=0.0, le=1.0)
    peace_min_age: int = Field(default=15, ge=0)
    peace_ratio: float = Field(default=0.6, ge=0.0, le=1.0)
    max_duration_days: int = Field(default=365, ge=1)


class WorldRandomnessSettings(BaseModel):
    """Configuration for deterministic RNG streams."""

    model_config = ConfigDict(extra="forbid")

    seed: int = Field(default=0, ge=0)

    def factory(self) -> WorldRandomness:
        """Instantiate a :class:`~strife.world.rng.WorldRandomness` helper."""

        from .rng import WorldRandomness

        return WorldRandomness(seed=self.seed)


class ConflictConfig(BaseModel):
    """Top-level configuration payload for the conflict subsystem."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(default="Strife")
    pressure: PressureSettings = Field(default_factory=PressureSettings)
    ignition: IgnitionSettings = Field(default_factory=IgnitionSettings)
    coalition: CoalitionSettings = Field(default_factory=CoalitionSettings)
    participation: ParticipationSettings = Field(default_factory=ParticipationSettings)
    cohesion: CohesionSettings = Field(default_factory=CohesionSettings)
    combat: CombatSettings = Field(default_factory=CombatSettings)
    termination: TerminationSettings = Field(default_factory=TerminationSettings)
    randomness: WorldRandomnessSettings = Field(default_factory=WorldRandomnessSettings)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _ensure_metadata_mapping(cls, value: object) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise TypeError("metadata must be a mapping")
        return {str(key): item for key, item in value.items()}

    @property
    def seed(self) -> int:
        return self.randomness.seed

    def randomness_factory(self) -> WorldRandomness:
        """Return a new :class:`~strife.world.rng.WorldRandomness` instance."""

        return self.randomness.factory()


__all__ = [
    "CoalitionSettings",
    "CohesionSettings",
    "CombatSettings",
    "ConflictConfig",
    "IgnitionSettings",
    "ParticipationSettings",
    "PressureSettings",
    "TerminationSettings",
    "WorldRandomnessSettings",
]
