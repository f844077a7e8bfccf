"""WorldLoop — the authoritative tick engine.

Per tick:
  1. Coarse cadence (every ``coarse_interval`` ticks) — territory mode
     evaluation for every agent, containment upkeep.
  2. Captive fallback — spawned captives still carrying the captive effect
     progress on a hash-staggered schedule so they do not all fire at once.
  3. Action phase — every ready entity decides (AIBrain) and the proposal
     is applied in entity-id order.
  4. Events — per-tick events are collected for the API feed and replay.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lairsim.ai.tactics import deposit_captive
from lairsim.core.enums import ActionType
from lairsim.core.snapshot import Snapshot
from lairsim.utils.event_log import CAPTURE, SimEvent

if TYPE_CHECKING:
    from lairsim.actions.base import ActionProposal
    from lairsim.ai.brain import AIBrain
    from lairsim.ai.controller import TerritoryController
    from lairsim.captivity.progression import CaptivityProgressionEngine
    from lairsim.config import SimulationConfig
    from lairsim.core.models import Entity
    from lairsim.core.world_state import WorldState
    from lairsim.utils.replay import ReplayRecorder

logger = logging.getLogger(__name__)


class WorldLoop:
    """The heartbeat of the simulation.

    Single-threaded mutation of WorldState. Agents change mode only on the
    coarse cadence; they act (move, wait, carry, deposit) on the fine one.
    """

    __slots__ = (
        "_config",
        "_world",
        "_brain",
        "_controller",
        "_progression",
        "_recorder",
        "_last_applied",
        "_tick_events",
    )

    def __init__(
        self,
        config: SimulationConfig,
        world: WorldState,
        brain: AIBrain,
        controller: TerritoryController,
        progression: CaptivityProgressionEngine,
        recorder: ReplayRecorder | None = None,
    ) -> None:
        self._config = config
        self._world = world
        self._brain = brain
        self._controller = controller
        self._progression = progression
        self._recorder = recorder
        self._last_applied: list[ActionProposal] = []
        self._tick_events: list[SimEvent] = []
        controller.bind_emitter(self.emit)
        progression.bind_notifier(self.notify)

    @property
    def world(self) -> WorldState:
        return self._world

    @property
    def last_applied(self) -> list[ActionProposal]:
        """Actions applied during the most recent tick."""
        return self._last_applied

    @property
    def tick_events(self) -> list[SimEvent]:
        """Events emitted during the most recent tick."""
        return self._tick_events

    def emit(self, category: str, message: str, entity_ids: tuple[int, ...] = ()) -> None:
        self._tick_events.append(SimEvent(
            tick=self._world.tick,
            category=category,
            message=message,
            entity_ids=entity_ids,
        ))

    def notify(self, event: SimEvent) -> None:
        """Sink for progression notifications."""
        self._tick_events.append(event)

    def tick_once(self) -> bool:
        """Execute a single tick. Returns False if simulation should stop."""
        tick = self._world.tick
        if tick >= self._config.max_ticks:
            logger.info("Tick %d: Max ticks reached.", tick)
            return False
        if not any(a.alive for a in self._world.agents()) and tick > 0:
            logger.info("Tick %d: No agents alive — simulation ended.", tick)
            return False

        self._step()
        self._world.tick += 1
        return True

    def create_snapshot(self) -> Snapshot:
        """Create an immutable snapshot of the current world state."""
        return Snapshot.from_world(self._world)

    def run(self) -> None:
        """Execute the simulation until max_ticks or no agents remain."""
        logger.info("=== Simulation started (seed=%d) ===", self._world.seed)

        while self._world.tick < self._config.max_ticks:
            if not self.tick_once():
                break

            if self._world.tick % self._config.ticks_per_day == 0:
                agents = self._world.agents()
                captives = sum(1 for c in self._world.containments() if c.occupied)
                logger.info(
                    "Tick %d: %d agents (%s), %d captives",
                    self._world.tick,
                    len(agents),
                    ", ".join(a.territory.mode.name for a in agents),
                    captives,
                )

        logger.info("=== Simulation finished at tick %d ===", self._world.tick)
        if self._recorder:
            self._recorder.flush()

    # ------------------------------------------------------------------
    # Tick phases
    # ------------------------------------------------------------------

    def _step(self) -> None:
        self._tick_events = []
        self._last_applied = []
        tick = self._world.tick
        interval = self._config.coarse_interval

        if tick % interval == 0:
            self._coarse_phase()
        self._captive_fallback_phase(tick, interval)

        applied: list[ActionProposal] = []
        for entity in self._ready_entities(tick):
            proposal = self._brain.decide(entity, self._world)
            if self._apply(entity, proposal):
                applied.append(proposal)
        self._last_applied = applied

        if applied:
            logger.debug("Tick %d: %d actions applied", tick, len(applied))
        # Replay keeps coarse frames plus any tick that produced events
        if self._recorder and (tick % interval == 0 or self._tick_events):
            self._recorder.record_tick(tick, applied, self._world)

    def _coarse_phase(self) -> None:
        world = self._world
        for agent in world.agents():
            self._controller.evaluate(agent, world)
        for containment in list(world.containments()):
            containment.maintain(world, self._progression, self._config.coarse_interval)

    def _captive_fallback_phase(self, tick: int, interval: int) -> None:
        effect_type = self._config.content.captive_effect
        if effect_type is None:
            return
        for _, entity in sorted(self._world.entities.items()):
            if (tick + entity.id) % interval != 0:
                continue
            if entity.spawned and entity.alive and entity.has_effect(effect_type):
                self._progression.advance(entity, interval, self._world)

    def _ready_entities(self, tick: int) -> list[Entity]:
        return [
            e for _, e in sorted(self._world.entities.items())
            if e.alive
            and e.spawned
            and not e.downed
            and e.carried_by is None
            and not e.is_stunned(tick)
            and e.next_act_at <= tick
        ]

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def _apply(self, actor: Entity, proposal: ActionProposal) -> bool:
        """Apply *proposal*. Returns False when it was rejected."""
        world = self._world
        verb = proposal.verb

        if verb == ActionType.WAIT:
            actor.next_act_at = world.tick + int(proposal.target or 1)
            return True

        if verb == ActionType.MOVE:
            dest = proposal.target
            if dest is None or actor.pos.manhattan(dest) != 1 or not world.is_standable(dest):
                actor.clear_path()
                actor.next_act_at = world.tick + 1
                return False
            world.move_entity(actor.id, dest)
            if actor.path and actor.path[0] == dest:
                actor.path.pop(0)
            if actor.carrying is not None:
                carried = world.entities.get(actor.carrying)
                if carried is not None:
                    world.move_entity(carried.id, dest)
            actor.next_act_at = world.tick + actor.move_ticks
            return True

        if verb == ActionType.CARRY:
            target = world.entities.get(proposal.target)
            if target is None or not target.downed or target.carried_by is not None:
                actor.next_act_at = world.tick + 1
                return False
            target.carried_by = actor.id
            target.in_bed = False
            actor.carrying = target.id
            world.move_entity(target.id, actor.pos)
            actor.next_act_at = world.tick + actor.move_ticks
            self.emit(CAPTURE, f"Agent {actor.id} picks up {target.kind} #{target.id}", (actor.id, target.id))
            return True

        if verb == ActionType.DEPOSIT:
            return self._apply_deposit(actor, proposal)

        return False

    def _apply_deposit(self, actor: Entity, proposal: ActionProposal) -> bool:
        world = self._world
        target = world.entities.get(proposal.target)
        rec = actor.territory
        if target is None or rec is None or actor.carrying != target.id:
            actor.next_act_at = world.tick + 1
            return False

        containment = deposit_captive(world, actor, target, actor.pos, self._config, self._progression)
        if containment is None:
            self._controller.end_hunt(actor, world, success=False, pause=False, reason="could not seal captive")
        else:
            self.emit(
                CAPTURE,
                f"Agent {actor.id} seals {target.kind} #{target.id} in containment {containment.structure_id}",
                (actor.id, target.id),
            )
            self._controller.end_hunt(actor, world, success=True, pause=False, reason="captive sealed")
        actor.next_act_at = world.tick + actor.move_ticks
        return True
