"""Per-settlement scores shared by the ignition, participation and combat models."""

from __future__ import annotations

from typing import Mapping

from ..world.config import CombatSettings
from ..world.settlements import GovernmentType, Settlement
from .models import Era

AGGRESSION_MIN = 0.6
AGGRESSION_MAX = 1.6
DIPLOMACY_MIN = 0.75
DIPLOMACY_MAX = 1.3
DETERRENCE_MAX = 0.9
DAMPENER_THRESHOLD = 15.0
MODERATE_UNREST = 40.0
EXTREME_UNREST = 75.0

GOVERNMENT_AGGRESSION: Mapping[GovernmentType, float] = {
    GovernmentType.TRIBAL: 1.1,
    GovernmentType.CHIEFDOM: 1.0,
    GovernmentType.MONARCHY: 1.05,
    GovernmentType.REPUBLIC: 0.9,
    GovernmentType.DEMOCRACY: 0.8,
    GovernmentType.THEOCRACY: 1.1,
    GovernmentType.OLIGARCHY: 0.95,
    GovernmentType.JUNTA: 1.3,
    GovernmentType.ANARCHY: 1.15,
}

GOVERNMENT_DIPLOMACY: Mapping[GovernmentType, float] = {
    GovernmentType.TRIBAL: 0.85,
    GovernmentType.CHIEFDOM: 1.0,
    GovernmentType.MONARCHY: 0.95,
    GovernmentType.REPUBLIC: 1.15,
    GovernmentType.DEMOCRACY: 1.3,
    GovernmentType.THEOCRACY: 0.9,
    GovernmentType.OLIGARCHY: 1.1,
    GovernmentType.JUNTA: 0.75,
    GovernmentType.ANARCHY: 0.8,
}

# Unlisted pairs of distinct governments fall back to DEFAULT_IDEOLOGY_TENSION.
IDEOLOGY_TENSION: Mapping[frozenset[GovernmentType], float] = {
    frozenset({GovernmentType.DEMOCRACY, GovernmentType.JUNTA}): 2.0,
    frozenset({GovernmentType.REPUBLIC, GovernmentType.JUNTA}): 1.5,
    frozenset({GovernmentType.ANARCHY, GovernmentType.JUNTA}): 1.5,
    frozenset({GovernmentType.DEMOCRACY, GovernmentType.THEOCRACY}): 1.25,
    frozenset({GovernmentType.ANARCHY, GovernmentType.MONARCHY}): 1.25,
    frozenset({GovernmentType.DEMOCRACY, GovernmentType.MONARCHY}): 1.0,
    frozenset({GovernmentType.REPUBLIC, GovernmentType.MONARCHY}): 0.75,
    frozenset({GovernmentType.REPUBLIC, GovernmentType.THEOCRACY}): 0.75,
    frozenset({GovernmentType.DEMOCRACY, GovernmentType.OLIGARCHY}): 0.75,
    frozenset({GovernmentType.TRIBAL, GovernmentType.REPUBLIC}): 0.5,
    frozenset({GovernmentType.TRIBAL, GovernmentType.DEMOCRACY}): 0.5,
}
DEFAULT_IDEOLOGY_TENSION = 0.25

DEFENSIVE_SPECIALIZATIONS: Mapping[str, float] = {
    "fortified": 0.25,
    "walls": 0.2,
    "garrison": 0.15,
    "watchtowers": 0.1,
}
RAIDING_SPECIALIZATIONS = frozenset({"raiders", "warband"})
LOOT_SPECIALIZATIONS: Mapping[str, float] = {
    "trade_hub": 1.0,
    "mining": 0.75,
    "farming": 0.5,
    "fishing": 0.25,
}


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def aggression(settlement: Settlement) -> float:
    """Return the settlement's appetite for conflict in ``[0.6, 1.6]``."""

    score = GOVERNMENT_AGGRESSION[settlement.government]
    if settlement.religion is not None:
        if "militarism" in settlement.religion.tenets:
            score += 0.2
        if "pacifism" in settlement.religion.tenets:
            score -= 0.2
    if "martial" in settlement.traditions:
        score += 0.15
    if "festive" in settlement.traditions:
        score -= 0.05
    if settlement.unrest >= EXTREME_UNREST:
        score -= 0.1
    elif settlement.unrest >= MODERATE_UNREST:
        score += 0.1
    for influence in ("happiness", "trade", "law"):
        if settlement.influence(influence) >= DAMPENER_THRESHOLD:
            score -= 0.05
    return _clamp(score, AGGRESSION_MIN, AGGRESSION_MAX)


def diplomacy_bias(settlement: Settlement) -> float:
    return _clamp(GOVERNMENT_DIPLOMACY[settlement.government], DIPLOMACY_MIN, DIPLOMACY_MAX)


def ideology_tension(a: GovernmentType, b: GovernmentType) -> float:
    if a == b:
        return 0.0
    return IDEOLOGY_TENSION.get(frozenset({a, b}), DEFAULT_IDEOLOGY_TENSION)


def strength(settlement: Settlement, settings: CombatSettings | None = None) -> float:
    """Skirmish-era fighting strength derived from raw population."""

    settings = settings or CombatSettings()
    value = settlement.population * (
        1.0 + settlement.influence("military") * settings.military_strength_weight
    )
    if settlement.unrest > settings.unrest_threshold:
        value *= 0.85
    if settlement.famine:
        value *= 0.8
    if settlement.disaster or settlement.revolution:
        value *= 0.7
    if "martial" in settlement.traditions:
        value *= 1.15
    return max(0.0, value)


def military_power(settlement: Settlement, settings: CombatSettings | None = None) -> float:
    """Attrition-era power from standing soldiers rather than population."""

    settings = settings or CombatSettings()
    return max(0, settlement.soldiers) * (
        1.0 + settlement.influence("military") * settings.attrition_military_weight
    )


def readiness(
    instigator: Settlement,
    defender: Settlement,
    settings: CombatSettings | None = None,
) -> float:
    """How prepared ``instigator`` is to attack ``defender``."""

    own = strength(instigator, settings)
    other = strength(defender, settings)
    if other <= 0:
        ratio = 2.0
    else:
        ratio = _clamp(own / other, 0.25, 2.0)
    soldier_ratio = instigator.soldiers / instigator.population if instigator.population else 0.0
    ratio *= 0.8 + min(soldier_ratio, 0.2) * 2.0
    if instigator.disaster:
        ratio *= 0.6
    if instigator.famine:
        ratio *= 0.7
    return _clamp(ratio, 0.1, 2.0)


def deterrence(settlement: Settlement) -> float:
    score = sum(
        weight
        for name, weight in DEFENSIVE_SPECIALIZATIONS.items()
        if name in settlement.specializations
    )
    score += settlement.influence("military") * 0.01
    return _clamp(score, 0.0, DETERRENCE_MAX)


def scarcity(settlement: Settlement, settings: CombatSettings | None = None) -> float:
    settings = settings or CombatSettings()
    return settings.scarcity_pressure * (int(settlement.famine) + int(settlement.drought))


def raid_attractiveness(raider: Settlement, target: Settlement) -> float:
    """Value of ``target``'s specializations to a raiding ``raider``."""

    if not raider.specializations & RAIDING_SPECIALIZATIONS:
        return 0.0
    return sum(
        weight
        for name, weight in LOOT_SPECIALIZATIONS.items()
        if name in target.specializations
    )


def detect_era(tech_level: float, threshold: float) -> Era:
    return Era.SKIRMISH if tech_level < threshold else Era.ATTRITION


__all__ = [
    "aggression",
    "deterrence",
    "detect_era",
    "diplomacy_bias",
    "GOVERNMENT_AGGRESSION",
    "GOVERNMENT_DIPLOMACY",
    "ideology_tension",
    "military_power",
    "raid_attractiveness",
    "readiness",
    "scarcity",
    "strength",
]
