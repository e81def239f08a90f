"""Emergent inter-settlement conflict simulation."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .engine.day_engine import DayContext, DayEngine
    from .world.config import ConflictConfig

__all__ = ["ConflictConfig", "DayContext", "DayEngine", "__version__"]

_EXPORTS = {
    "ConflictConfig": "strife.world.config",
    "DayContext": "strife.engine.day_engine",
    "DayEngine": "strife.engine.day_engine",
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
