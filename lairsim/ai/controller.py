"""TerritoryController — the coarse-cadence mode state machine.

Modes:
  DEFEND → HUNT   (cooldown over, healthy, calm, qualifying target found)
  DEFEND → DRAG   (a downed, restrained hostile lies inside the territory)
  HUNT   → DRAG   (target downed)
  HUNT   → DEFEND (target gone, timeout, fled too far, reached colony
                   defenses, or agent badly hurt; short cooldown + pause)
  DRAG   → DEFEND (target gone: short cooldown, no pause;
                   deposited: full cooldown)

The controller owns every mode change so the record invariant
(DEFEND ⇔ no target ⇔ no start time) is kept in one place. Behavior
handlers call ``end_hunt`` rather than touching the record directly.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from lairsim.ai.perception import Perception
from lairsim.core.enums import Category, Domain, TerritoryMode
from lairsim.utils.event_log import MODE

if TYPE_CHECKING:
    from lairsim.config import SimulationConfig
    from lairsim.core.faction import FactionRegistry
    from lairsim.core.models import Entity, Vector2
    from lairsim.core.world_state import WorldState
    from lairsim.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

EmitFn = Callable[[str, str, tuple[int, ...]], None]


class TerritoryController:
    """Evaluates and applies territory mode transitions."""

    __slots__ = ("_config", "_rng", "_faction_reg", "_emit")

    def __init__(
        self,
        config: SimulationConfig,
        rng: DeterministicRNG,
        faction_reg: FactionRegistry,
        emit: EmitFn | None = None,
    ) -> None:
        self._config = config
        self._rng = rng
        self._faction_reg = faction_reg
        self._emit = emit

    def bind_emitter(self, emit: EmitFn | None) -> None:
        self._emit = emit

    # ------------------------------------------------------------------
    # Coarse evaluation
    # ------------------------------------------------------------------

    def evaluate(self, agent: Entity, world: WorldState) -> None:
        """Run one coarse-cadence evaluation for *agent*."""
        rec = agent.territory
        if rec is None:
            return
        if not agent.alive:
            self._drop_claims(agent, world)
            return
        if not agent.spawned:
            return

        if rec.mode == TerritoryMode.HUNT:
            self._check_hunt(agent, world)
        elif rec.mode == TerritoryMode.DRAG:
            self._check_drag(agent, world)
        else:
            if not self.try_start_capture(agent, world):
                self.try_start_hunt(agent, world)

    def _check_hunt(self, agent: Entity, world: WorldState) -> None:
        rec = agent.territory
        cfg = self._config
        now = world.tick
        target = rec.resolve_target(world)

        if target is None or not target.alive:
            self.end_hunt(agent, world, success=False, pause=True, reason="target lost")
            return
        if rec.hunt_started_at is not None and now - rec.hunt_started_at > cfg.hunt_timeout_ticks:
            self.end_hunt(agent, world, success=False, pause=True, reason="timed out")
            return
        if rec.home is not None and rec.home.distance_to(target.pos) > cfg.hunt_abort_distance:
            self.end_hunt(agent, world, success=False, pause=True, reason="target fled too far")
            return
        if Perception.near_colony_defenses(world, target.pos, cfg):
            self.end_hunt(agent, world, success=False, pause=True, reason="target reached colony defenses")
            return
        if agent.health_fraction < cfg.hunt_abort_health:
            self.end_hunt(agent, world, success=False, pause=True, reason="agent badly hurt")
            return
        if target.downed:
            rec.promote_to_drag()
            self._report(MODE, f"Agent {agent.id} drags target {target.id}", (agent.id, target.id))

    def _check_drag(self, agent: Entity, world: WorldState) -> None:
        target = agent.territory.resolve_target(world)
        if target is None or not target.alive:
            self.end_hunt(agent, world, success=False, pause=False, reason="lost the captive")

    # ------------------------------------------------------------------
    # DEFEND → HUNT / DRAG
    # ------------------------------------------------------------------

    def try_start_hunt(self, agent: Entity, world: WorldState) -> bool:
        rec = agent.territory
        cfg = self._config
        now = world.tick

        if rec is None or rec.mode != TerritoryMode.DEFEND or not rec.has_home:
            return False
        if not rec.can_hunt(now) or now < rec.next_scan_at:
            return False
        rec.next_scan_at = now + cfg.hunt_scan_interval

        if agent.downed or agent.health_fraction < cfg.hunt_start_health:
            return False
        if Perception.in_combat(agent, world, cfg, self._faction_reg):
            return False

        target = self.find_hunt_target(agent, world)
        if target is None:
            return False

        rec.begin_hunt(target.id, now)
        agent.enemy_target_id = target.id
        agent.clear_path()
        logger.info("Tick %d: agent %d starts hunting entity %d", now, agent.id, target.id)
        self._report(MODE, f"Agent {agent.id} hunts {target.kind} #{target.id}", (agent.id, target.id))
        return True

    def find_hunt_target(self, agent: Entity, world: WorldState) -> Entity | None:
        rec = agent.territory
        cfg = self._config
        home = rec.home
        max_dist = cfg.hunt_search_distance

        candidates = []
        for _, p in sorted(world.entities.items()):
            if p.id == agent.id or not p.alive or p.downed or not p.spawned:
                continue
            if p.category != Category.HUMANLIKE:
                continue
            if home.distance_to(p.pos) > max_dist:
                continue
            if not world.can_reach(agent.pos, p.pos):
                continue
            if not Perception.is_isolated(p, world, cfg.victim_isolation_radius, cfg.victim_max_nearby_humanlikes):
                continue
            if Perception.near_colony_defenses(world, p.pos, cfg):
                continue
            candidates.append(p)
        return Perception.nearest(agent.pos, candidates)

    def try_start_capture(self, agent: Entity, world: WorldState) -> bool:
        rec = agent.territory
        if rec is None or rec.mode != TerritoryMode.DEFEND or not rec.has_home:
            return False
        if agent.carrying is not None:
            return False
        target = self.find_capture_target(agent, world)
        if target is None:
            return False

        rec.begin_drag_capture(target.id, world.tick)
        agent.clear_path()
        logger.info("Tick %d: agent %d claims downed entity %d", world.tick, agent.id, target.id)
        self._report(MODE, f"Agent {agent.id} claims downed {target.kind} #{target.id}", (agent.id, target.id))
        return True

    def find_capture_target(self, agent: Entity, world: WorldState) -> Entity | None:
        rec = agent.territory
        cfg = self._config
        now = world.tick
        restrained = cfg.content.restrained_effect

        candidates = []
        for p in world.entities_near(rec.home, cfg.capture_radius):
            if p.id == agent.id or not p.alive or not p.spawned or not p.downed:
                continue
            if p.category != Category.HUMANLIKE or p.carried_by is not None or p.in_bed:
                continue
            if not self._faction_reg.is_hostile(agent.faction, p.faction):
                continue
            if restrained is not None and not p.has_effect(restrained):
                continue
            if p.last_harmed_tick is None or now - p.last_harmed_tick > cfg.capture_recent_harm_ticks:
                continue
            if not world.can_reach(agent.pos, p.pos):
                continue
            candidates.append(p)
        return Perception.nearest(agent.pos, candidates)

    # ------------------------------------------------------------------
    # Exits
    # ------------------------------------------------------------------

    def end_hunt(
        self,
        agent: Entity,
        world: WorldState,
        success: bool,
        pause: bool = False,
        reason: str = "",
    ) -> int:
        """Return *agent* to DEFEND with the matching cooldown; returns its length."""
        rec = agent.territory
        cfg = self._config
        now = world.tick
        target_id = rec.target_id

        if not success and pause and agent.spawned:
            pause_ticks = self._rng.next_int(
                Domain.ABORT_PAUSE, agent.id, now, cfg.abort_pause_min_ticks, cfg.abort_pause_max_ticks)
            agent.stunned_until = max(agent.stunned_until, now + pause_ticks)

        length = rec.end_hunt(success, now, cfg.hunt_cooldown_ticks, cfg.failed_hunt_cooldown_divisor)
        agent.enemy_target_id = None
        agent.clear_path()
        self._release_carried(agent, world)

        outcome = "succeeded" if success else "failed"
        logger.info(
            "Tick %d: agent %d hunt %s (%s), cooldown %d",
            now, agent.id, outcome, reason or "-", length,
        )
        ids = (agent.id, target_id) if target_id is not None else (agent.id,)
        self._report(MODE, f"Agent {agent.id} hunt {outcome}: {reason or outcome}", ids)
        return length

    def _drop_claims(self, agent: Entity, world: WorldState) -> None:
        """Dead agents let go of whatever they hunt or carry."""
        rec = agent.territory
        if rec.mode == TerritoryMode.DEFEND and agent.carrying is None:
            return
        target_id = rec.target_id
        self._release_carried(agent, world)
        rec.reset_to_defend()
        agent.enemy_target_id = None
        agent.clear_path()
        logger.info("Tick %d: dead agent %d released its claim on %s", world.tick, agent.id, target_id)
        ids = (agent.id, target_id) if target_id is not None else (agent.id,)
        self._report(MODE, f"Agent {agent.id} died; its prey is free", ids)

    @staticmethod
    def _release_carried(agent: Entity, world: WorldState) -> None:
        if agent.carrying is None:
            return
        carried = world.entities.get(agent.carrying)
        if carried is not None and carried.carried_by == agent.id:
            carried.carried_by = None
        agent.carrying = None

    # ------------------------------------------------------------------
    # Debug hooks
    # ------------------------------------------------------------------

    def force_reset_cooldown(self, agent: Entity, world: WorldState) -> None:
        if agent.territory is None:
            return
        agent.territory.cooldown_until = world.tick
        agent.territory.next_scan_at = world.tick
        logger.info("Tick %d: debug cooldown reset for agent %d", world.tick, agent.id)

    def force_defend(self, agent: Entity, world: WorldState) -> None:
        if agent.territory is None:
            return
        agent.territory.reset_to_defend()
        agent.enemy_target_id = None
        agent.clear_path()
        self._release_carried(agent, world)
        logger.info("Tick %d: debug force-defend for agent %d", world.tick, agent.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def mode_of(agent: Entity) -> TerritoryMode | None:
        return agent.territory.mode if agent.territory else None

    @staticmethod
    def home_of(agent: Entity) -> Vector2 | None:
        return agent.territory.home if agent.territory else None

    @staticmethod
    def radius_of(agent: Entity) -> int | None:
        return agent.territory.radius if agent.territory else None

    @staticmethod
    def active_target(agent: Entity, world: WorldState) -> Entity | None:
        return agent.territory.resolve_target(world) if agent.territory else None

    def _report(self, category: str, message: str, ids: tuple[int, ...]) -> None:
        if self._emit is not None:
            self._emit(category, message, ids)
