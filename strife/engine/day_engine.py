"""Day engine coordinating the daily conflict phases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from ..conflict.coalition import CoalitionBuilder
from ..conflict.cohesion import CohesionMonitor
from ..conflict.combat import CombatResolver
from ..conflict.ignition import IgnitionEvaluator
from ..conflict.models import (
    CombatOutcome,
    Engagement,
    IgnitionDecision,
    TerminationResult,
)
from ..conflict.participation import ParticipationModel
from ..conflict.pressure import PairKey, PressureEvaluator, PressureLedger
from ..conflict.registry import ConflictRegistry
from ..conflict.termination import TerminationEngine
from ..diplomacy import RelationLedger
from ..events.channels import DayLogChannel, NotificationChannel, NotificationRecord
from ..events.event_queue import EventQueue, QueuedEvent
from ..time.season_tracker import SeasonProfile, SeasonTracker
from ..world.config import ConflictConfig
from ..world.rng import WorldRandomness
from ..world.services import (
    AllianceRegistry,
    AllianceService,
    EffectApplier,
    RandomSource,
    RelationService,
    SettlementEffects,
    StaticTechnologyGate,
    TechnologyGate,
)
from ..world.settlements import SettlementManager
from .world import (
    CoalitionSystem,
    CombatSystem,
    ConflictCoreComponent,
    EffectsComponent,
    GameWorld,
    IgnitionSystem,
    ParticipationSystem,
    PressureComponent,
    PressureSystem,
    RegistryComponent,
    RelationsComponent,
    RosterSystem,
    SettlementsComponent,
    TerminationSystem,
    TimerSystem,
    UpkeepSystem,
)

PhaseName = Literal[
    "timers",
    "pressure",
    "ignition",
    "coalition",
    "participation",
    "combat",
    "termination",
]


@dataclass
class DayContext:
    """Shared state passed to each phase system."""

    day: int
    season: SeasonProfile
    events: list[QueuedEvent]
    world: GameWorld
    notification_channel: NotificationChannel | None = None
    sampled_pairs: list[PairKey] = field(default_factory=list)
    decisions: list[IgnitionDecision] = field(default_factory=list)
    engagements: list[Engagement] = field(default_factory=list)
    outcomes: list[CombatOutcome] = field(default_factory=list)
    terminations: list[TerminationResult] = field(default_factory=list)
    summary_lines: list[str] = field(default_factory=list)
    notifications: list[NotificationRecord] = field(default_factory=list)

    def log(self, message: str) -> None:
        self.summary_lines.append(str(message))

    def notify(
        self,
        message: str,
        *,
        category: str = "info",
        payload: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        record = NotificationRecord(
            day=self.day,
            message=str(message),
            category=category,
            payload=dict(payload or {}),
        )
        self.notifications.append(record)
        if self.notification_channel is not None:
            self.notification_channel.push(record)
        return record

    @property
    def ignitions(self) -> list[IgnitionDecision]:
        return [decision for decision in self.decisions if decision.ignited]


class DayEngine:
    """Wires the conflict subsystems together and steps them one day at a time.

    Collaborators that are not supplied are replaced by the in-memory
    reference implementations. Every subsystem draws from its own named
    random stream unless ``random_source`` overrides them all.
    """

    PHASE_ORDER: list[PhaseName] = [
        "timers",
        "pressure",
        "ignition",
        "coalition",
        "participation",
        "combat",
        "termination",
    ]

    def __init__(
        self,
        settlements: SettlementManager,
        config: ConflictConfig | None = None,
        *,
        relations: RelationService | None = None,
        alliances: AllianceService | None = None,
        effects: EffectApplier | None = None,
        technology: TechnologyGate | None = None,
        randomness: WorldRandomness | None = None,
        random_source: RandomSource | None = None,
        season_tracker: SeasonTracker | None = None,
        event_queue: EventQueue | None = None,
        log_channel: DayLogChannel | None = None,
        notification_channel: NotificationChannel | None = None,
        world: GameWorld | None = None,
    ) -> None:
        self.config = config or ConflictConfig()
        self.settlements = settlements
        self.season_tracker = season_tracker or SeasonTracker()
        self.event_queue = event_queue or EventQueue()
        self.relations = relations if relations is not None else RelationLedger()
        self.alliances = alliances if alliances is not None else AllianceRegistry()
        self.effects = (
            effects
            if effects is not None
            else SettlementEffects(settlements, clock=self.season_tracker)
        )
        self.technology = technology or StaticTechnologyGate()
        self.randomness = randomness or self.config.randomness_factory()
        self._random_source = random_source
        self.log_channel = log_channel
        self.notification_channel = notification_channel or NotificationChannel()
        self.world = world or GameWorld()

        config = self.config
        self.registry = ConflictRegistry(
            settlements, cooldown_days=config.ignition.cooldown_days
        )
        self.pressure = PressureLedger(
            PressureEvaluator(settlements, self.relations, self.alliances, config.pressure),
            config.pressure,
        )
        self.cohesion = CohesionMonitor(
            self.relations, sink=self.notification_channel, settings=config.cohesion
        )
        self.ignition = IgnitionEvaluator(
            settlements,
            self.registry,
            self.pressure,
            self.alliances,
            self.technology,
            self._stream("ignition"),
            self.season_tracker,
            season=self.season_tracker,
            sink=self.notification_channel,
            queue=self.event_queue,
            settings=config.ignition,
            combat=config.combat,
        )
        self.coalition = CoalitionBuilder(
            settlements,
            self.registry,
            self.relations,
            self.alliances,
            self._stream("coalition"),
            config.coalition,
        )
        self.participation = ParticipationModel(
            settlements,
            self.registry,
            self.relations,
            self.effects,
            self._stream("participation"),
            cohesion=self.cohesion,
            settings=config.participation,
        )
        self.combat = CombatResolver(
            settlements, self.registry, self.effects, self._stream("combat"), config.combat
        )
        self.termination = TerminationEngine(
            settlements,
            self.registry,
            self.relations,
            self._stream("termination"),
            cohesion=self.cohesion,
            queue=self.event_queue,
            sink=self.notification_channel,
            settings=config.termination,
            combat=config.combat,
        )
        self._install_components()
        self._register_default_systems()

    def _stream(self, name: str) -> RandomSource:
        if self._random_source is not None:
            return self._random_source
        return self.randomness.source(name)

    # ------------------------------------------------------------------
    def run_day(self) -> DayContext:
        """Run all phases for a single day."""

        current_day = self.season_tracker.current_day
        context = DayContext(
            day=current_day,
            season=self.season_tracker.current_season,
            events=list(self.event_queue.pop_due(current_day)),
            world=self.world,
            notification_channel=self.notification_channel,
        )
        for phase in self.PHASE_ORDER:
            self.world.process_phase(phase, context)

        self.season_tracker.advance_day()
        if self.log_channel is not None:
            self.log_channel.record_context(context)
        return context

    def run(self, days: int) -> list[DayContext]:
        if days < 0:
            raise ValueError("days must be non-negative")
        return [self.run_day() for _ in range(days)]

    @property
    def current_day(self) -> int:
        return self.season_tracker.current_day

    def has_pending_events(self) -> bool:
        return self.event_queue.has_events()

    # ------------------------------------------------------------------
    def _install_components(self) -> None:
        world = self.world
        world.add_singleton(SettlementsComponent(self.settlements))
        world.add_singleton(RelationsComponent(self.relations))
        world.add_singleton(EffectsComponent(self.effects))
        world.add_singleton(RegistryComponent(self.registry))
        world.add_singleton(PressureComponent(self.pressure))
        world.add_singleton(
            ConflictCoreComponent(
                ignition=self.ignition,
                coalition=self.coalition,
                participation=self.participation,
                combat=self.combat,
                termination=self.termination,
            )
        )

    def _register_default_systems(self) -> None:
        defaults: list[tuple[PhaseName, object, int]] = [
            ("timers", RosterSystem(), 50),
            ("timers", TimerSystem(), 100),
            (
                "pressure",
                PressureSystem(self._stream("pressure"), self.config.pressure),
                100,
            ),
            ("ignition", IgnitionSystem(), 100),
            ("coalition", CoalitionSystem(), 100),
            ("participation", ParticipationSystem(), 100),
            ("combat", CombatSystem(), 100),
            ("termination", TerminationSystem(), 100),
            ("termination", UpkeepSystem(), 200),
        ]
        for phase, system, priority in defaults:
            if not self.world.has_system_type(type(system)):
                self.world.register_system(phase, system, priority=priority)


__all__ = ["DayContext", "DayEngine", "PhaseName"]
