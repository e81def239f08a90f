"""Conflict core: pressure, ignition, coalitions, fighting and termination."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .coalition import CoalitionBuilder
    from .cohesion import CohesionMonitor
    from .combat import CombatResolver
    from .ignition import IgnitionEvaluator
    from .models import (
        CombatOutcome,
        Conflict,
        ConflictState,
        Engagement,
        Era,
        IgnitionDecision,
        Side,
        TerminationReason,
        TerminationResult,
    )
    from .participation import ParticipationModel
    from .pressure import PressureEvaluator, PressureLedger
    from .registry import ConflictRegistry
    from .termination import TerminationEngine

__all__ = [
    "CoalitionBuilder",
    "CohesionMonitor",
    "CombatOutcome",
    "CombatResolver",
    "Conflict",
    "ConflictRegistry",
    "ConflictState",
    "Engagement",
    "Era",
    "IgnitionDecision",
    "IgnitionEvaluator",
    "ParticipationModel",
    "PressureEvaluator",
    "PressureLedger",
    "Side",
    "TerminationEngine",
    "TerminationReason",
    "TerminationResult",
]

_EXPORTS = {
    "CoalitionBuilder": "strife.conflict.coalition",
    "CohesionMonitor": "strife.conflict.cohesion",
    "CombatOutcome": "strife.conflict.models",
    "CombatResolver": "strife.conflict.combat",
    "Conflict": "strife.conflict.models",
    "ConflictRegistry": "strife.conflict.registry",
    "ConflictState": "strife.conflict.models",
    "Engagement": "strife.conflict.models",
    "Era": "strife.conflict.models",
    "IgnitionDecision": "strife.conflict.models",
    "IgnitionEvaluator": "strife.conflict.ignition",
    "ParticipationModel": "strife.conflict.participation",
    "PressureEvaluator": "strife.conflict.pressure",
    "PressureLedger": "strife.conflict.pressure",
    "Side": "strife.conflict.models",
    "TerminationEngine": "strife.conflict.termination",
    "TerminationReason": "strife.conflict.models",
    "TerminationResult": "strife.conflict.models",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted({*globals(), *__all__})
