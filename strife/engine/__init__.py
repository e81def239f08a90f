"""Day engine and ECS world wiring."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .day_engine import DayContext, DayEngine
    from .world import (
        ConflictCoreComponent,
        GameWorld,
        PressureSystem,
        RegistryComponent,
        SettlementsComponent,
    )

__all__ = [
    "ConflictCoreComponent",
    "DayContext",
    "DayEngine",
    "GameWorld",
    "PressureSystem",
    "RegistryComponent",
    "SettlementsComponent",
]

_EXPORTS = {
    "ConflictCoreComponent": "strife.engine.world",
    "DayContext": "strife.engine.day_engine",
    "DayEngine": "strife.engine.day_engine",
    "GameWorld": "strife.engine.world",
    "PressureSystem": "strife.engine.world",
    "RegistryComponent": "strife.engine.world",
    "SettlementsComponent": "strife.engine.world",
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
