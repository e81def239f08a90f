"""ECS world abstraction for the conflict simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Protocol,
    Type,
    TypeVar,
)

import esper

from ..conflict.coalition import CoalitionBuilder
from ..conflict.combat import CombatResolver
from ..conflict.ignition import IgnitionEvaluator
from ..conflict.participation import ParticipationModel
from ..conflict.pressure import PairKey, PressureLedger
from ..conflict.registry import ConflictRegistry
from ..conflict.termination import TerminationEngine
from ..world.config import PressureSettings
from ..world.graph import hostile_pairs
from ..world.services import RandomSource, RelationService
from ..world.settlements import SettlementManager

if TYPE_CHECKING:  # pragma: no cover - imported only for typing
    from .day_engine import DayContext

PhaseName = str

T = TypeVar("T")

_WORLD_IDS = count(1)


@dataclass(slots=True)
class SettlementsComponent:
    """Singleton component exposing every known settlement."""

    settlements: SettlementManager


@dataclass(slots=True)
class RelationsComponent:
    """Singleton component holding bilateral standings."""

    relations: RelationService


@dataclass(slots=True)
class EffectsComponent:
    """Singleton component applying conflict effects to settlements."""

    effects: Any


@dataclass(slots=True)
class RegistryComponent:
    registry: ConflictRegistry


@dataclass(slots=True)
class PressureComponent:
    ledger: PressureLedger


@dataclass(slots=True)
class ConflictCoreComponent:
    """Singleton component bundling the per-phase conflict subsystems."""

    ignition: IgnitionEvaluator
    coalition: CoalitionBuilder
    participation: ParticipationModel
    combat: CombatResolver
    termination: TerminationEngine


class SystemCallback(Protocol):
    """Callable protocol describing a world system."""

    def __call__(self, world: "GameWorld", context: "DayContext") -> None:  # noqa: D401
        ...


@dataclass(slots=True)
class _SystemEntry:
    priority: int
    order: int
    callback: SystemCallback


class GameWorld:
    """Wrapper around a named esper world providing ordered system execution.

    esper keeps its entity database in module-level contexts; each
    :class:`GameWorld` owns one context and switches to it before every
    operation so several worlds can coexist in one process.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name or f"strife-{next(_WORLD_IDS)}"
        self._singletons: Dict[Type[Any], int] = {}
        self._systems: Dict[PhaseName, List[_SystemEntry]] = {}
        self._system_counter = 0

    def _activate(self) -> None:
        if esper.current_world != self.name:
            esper.switch_world(self.name)

    # ------------------------------------------------------------------
    def create_entity(self, *components: object) -> int:
        """Create an entity with the provided components."""

        self._activate()
        return esper.create_entity(*components)

    def add_component(self, entity: int, component: object) -> None:
        """Attach ``component`` to ``entity`` inside the world."""

        self._activate()
        esper.add_component(entity, component)

    def add_singleton(self, component: object) -> int:
        """Register ``component`` as the singleton instance for its type."""

        self._activate()
        component_type = type(component)
        entity = self._singletons.get(component_type)
        if entity is None:
            entity = esper.create_entity(component)
            self._singletons[component_type] = entity
        else:
            # Replace the component instance on the existing entity.
            if esper.has_component(entity, component_type):
                esper.remove_component(entity, component_type)
            esper.add_component(entity, component)
        return entity

    def get_singleton(self, component_type: Type[T]) -> T | None:
        """Retrieve the singleton component for ``component_type`` if registered."""

        entity = self._singletons.get(component_type)
        if entity is None:
            return None
        self._activate()
        try:
            return esper.component_for_entity(entity, component_type)
        except KeyError:
            self._singletons.pop(component_type, None)
            return None

    def has_system_type(self, system_type: Type[object]) -> bool:
        """Return ``True`` if any registered system is an instance of ``system_type``."""

        for entries in self._systems.values():
            for entry in entries:
                if isinstance(getattr(entry.callback, "__self__", entry.callback), system_type):
                    return True
        return False

    # ------------------------------------------------------------------
    def register_system(
        self,
        phase: PhaseName,
        system: SystemCallback | object,
        *,
        priority: int = 100,
    ) -> None:
        """Register ``system`` to execute during ``phase`` with ``priority`` ordering."""

        if hasattr(system, "process") and callable(getattr(system, "process")):
            callback = getattr(system, "process")
        elif callable(system):
            callback = system
        else:
            raise TypeError("system must be callable or expose a process() method")

        self._system_counter += 1
        entry = _SystemEntry(priority=priority, order=self._system_counter, callback=callback)
        phase_systems = self._systems.setdefault(phase, [])
        phase_systems.append(entry)
        phase_systems.sort(key=lambda item: (item.priority, item.order))

    def process_phase(self, phase: PhaseName, context: "DayContext") -> None:
        """Execute all systems registered for ``phase`` in priority order."""

        for entry in self._systems.get(phase, []):
            entry.callback(self, context)

    def dispose(self) -> None:
        """Delete the underlying esper context."""

        if esper.current_world == self.name:
            esper.switch_world("default")
        esper.delete_world(self.name)
        self._singletons.clear()


# ----------------------------------------------------------------------
# Systems


class RosterSystem:
    """Drop participants that died since yesterday before anything else runs."""

    def process(self, world: GameWorld, context: "DayContext") -> None:
        registry = world.get_singleton(RegistryComponent)
        if registry is None:
            return
        for conflict in registry.registry.active():
            for settlement_id in registry.registry.prune_dead(conflict):
                context.log(f"{settlement_id} falls out of conflict {conflict.identifier}")


class TimerSystem:
    """Resolve conflict timers that fell due today."""

    def process(self, world: GameWorld, context: "DayContext") -> None:
        core = world.get_singleton(ConflictCoreComponent)
        if core is None:
            return
        for event in context.events:
            result = core.termination.handle_timer(event, context.day)
            if result is not None:
                context.terminations.append(result)
                context.log(f"Conflict {result.conflict_id} expired")


@dataclass
class PressureSystem:
    """Re-evaluate a bounded sample of settlement pairs each day.

    Pairs whose standing is already hostile are evaluated first; the rest of
    the daily budget is filled by a uniform sample of the remaining pairs.
    """

    rng: RandomSource
    settings: PressureSettings = field(default_factory=PressureSettings)

    def sample_pairs(
        self, settlements: SettlementManager, relations: RelationService
    ) -> List[PairKey]:
        living = sorted(settlement.identifier for settlement in settlements.living())
        pairs = [
            (first, second)
            for index, first in enumerate(living)
            for second in living[index + 1 :]
        ]
        budget = self.settings.pairs_per_day
        prioritised: List[PairKey] = []
        as_graph = getattr(relations, "as_graph", None)
        if callable(as_graph):
            prioritised = hostile_pairs(as_graph(living), self.settings.hostile_threshold)
        chosen = prioritised[:budget]
        taken = set(chosen)
        remaining = [pair for pair in pairs if pair not in taken]
        needed = min(budget - len(chosen), len(remaining))
        # Partial Fisher-Yates shuffle driven by the injected random source.
        for index in range(needed):
            swap = index + int(self.rng.uniform() * (len(remaining) - index))
            swap = min(swap, len(remaining) - 1)
            remaining[index], remaining[swap] = remaining[swap], remaining[index]
        chosen.extend(remaining[:needed])
        return chosen

    def process(self, world: GameWorld, context: "DayContext") -> None:
        settlements = world.get_singleton(SettlementsComponent)
        relations = world.get_singleton(RelationsComponent)
        pressure = world.get_singleton(PressureComponent)
        if settlements is None or relations is None or pressure is None:
            return
        context.sampled_pairs = self.sample_pairs(settlements.settlements, relations.relations)
        for pair in context.sampled_pairs:
            pressure.ledger.update(pair, context.day)


class IgnitionSystem:
    def process(self, world: GameWorld, context: "DayContext") -> None:
        core = world.get_singleton(ConflictCoreComponent)
        if core is None:
            return
        for pair in context.sampled_pairs:
            decision = core.ignition.evaluate(pair, context.day)
            context.decisions.append(decision)
            if decision.ignited:
                context.log(
                    f"{decision.instigator} attacks {decision.defender} "
                    f"(p={decision.probability:.2f})"
                )
                context.notify(
                    f"Conflict {decision.conflict_id} breaks out",
                    category="conflict",
                    payload={"era": decision.era.value if decision.era else None},
                )


class CoalitionSystem:
    def process(self, world: GameWorld, context: "DayContext") -> None:
        core = world.get_singleton(ConflictCoreComponent)
        registry = world.get_singleton(RegistryComponent)
        if core is None or registry is None:
            return
        for conflict in registry.registry.active():
            joined = core.coalition.call_to_arms(conflict)
            core.coalition.ensure_sides(conflict)
            if joined:
                context.log(f"Conflict {conflict.identifier} joined by {', '.join(joined)}")


class ParticipationSystem:
    def process(self, world: GameWorld, context: "DayContext") -> None:
        core = world.get_singleton(ConflictCoreComponent)
        registry = world.get_singleton(RegistryComponent)
        if core is None or registry is None:
            return
        for conflict in registry.registry.active():
            context.engagements.extend(core.participation.step(conflict, context.day))


class CombatSystem:
    def process(self, world: GameWorld, context: "DayContext") -> None:
        core = world.get_singleton(ConflictCoreComponent)
        registry = world.get_singleton(RegistryComponent)
        if core is None or registry is None:
            return
        for conflict in registry.registry.active():
            engagements = [
                engagement
                for engagement in context.engagements
                if engagement.conflict_id == conflict.identifier
            ]
            if engagements:
                context.outcomes.extend(core.combat.resolve(conflict, engagements))


class TerminationSystem:
    def process(self, world: GameWorld, context: "DayContext") -> None:
        core = world.get_singleton(ConflictCoreComponent)
        if core is None:
            return
        for result in core.termination.check_all(context.day):
            context.terminations.append(result)
            context.log(f"Conflict {result.conflict_id} ends: {result.reason.value}")


class UpkeepSystem:
    """Drift relations towards neutral and expire temporary influences."""

    def process(self, world: GameWorld, context: "DayContext") -> None:
        relations = world.get_singleton(RelationsComponent)
        if relations is not None:
            decay = getattr(relations.relations, "decay", None)
            if callable(decay):
                decay()
        effects = world.get_singleton(EffectsComponent)
        if effects is not None:
            expire = getattr(effects.effects, "expire_temporary", None)
            if callable(expire):
                expire(context.day)


__all__ = [
    "CoalitionSystem",
    "CombatSystem",
    "ConflictCoreComponent",
    "EffectsComponent",
    "GameWorld",
    "IgnitionSystem",
    "ParticipationSystem",
    "PressureComponent",
    "PressureSystem",
    "RegistryComponent",
    "RelationsComponent",
    "RosterSystem",
    "SettlementsComponent",
    "TerminationSystem",
    "TimerSystem",
    "UpkeepSystem",
]
