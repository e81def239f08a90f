"""World domain models and collaborator interfaces."""

from .config import (
    CoalitionSettings,
    CohesionSettings,
    CombatSettings,
    ConflictConfig,
    IgnitionSettings,
    ParticipationSettings,
    PressureSettings,
    TerminationSettings,
    WorldRandomnessSettings,
)
from .coords import HexCoord
from .graph import build_relation_graph, hostile_pairs
from .rng import GeneratorRandomSource, WorldRandomness
from .services import (
    AllianceRegistry,
    NullSink,
    SettlementEffects,
    StaticTechnologyGate,
    are_allied,
)
from .settlements import GovernmentType, ReligionProfile, Settlement, SettlementManager

__all__ = [
    "AllianceRegistry",
    "are_allied",
    "build_relation_graph",
    "CoalitionSettings",
    "CohesionSettings",
    "CombatSettings",
    "ConflictConfig",
    "GeneratorRandomSource",
    "GovernmentType",
    "HexCoord",
    "hostile_pairs",
    "IgnitionSettings",
    "NullSink",
    "ParticipationSettings",
    "PressureSettings",
    "ReligionProfile",
    "Settlement",
    "SettlementEffects",
    "SettlementManager",
    "StaticTechnologyGate",
    "TerminationSettings",
    "WorldRandomness",
    "WorldRandomnessSettings",
]
