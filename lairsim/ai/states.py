"""Behavior handlers — class-based, one per territory mode.

Architecture:
  - AIContext bundles all data a handler needs (actor, world, config, rng,
    controller, pathfinder, faction_reg).
  - Each handler is a class implementing the ``handle`` method and returns a
    single ActionProposal for the world loop to apply.
  - Handlers are registered in MODE_HANDLERS by TerritoryMode; entities
    without a territory record use the bystander WanderHandler.
  - Mode changes go through the TerritoryController; handlers only end a
    hunt or fall back from DRAG to HUNT when the target state demands it.

Per-act behavior:
  DEFEND  → walk back inside the territory radius, otherwise hold
  HUNT    → close to engage range via a standoff cell, then hold and engage
  DRAG    → reach the target, pick it up, carry it to the drop cell, deposit
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lairsim.actions.base import ActionProposal
from lairsim.ai.tactics import drop_cell, random_close_walk_cell, standoff_cell
from lairsim.core.enums import ActionType, Domain, TerritoryMode

if TYPE_CHECKING:
    from lairsim.ai.controller import TerritoryController
    from lairsim.ai.pathfinding import Pathfinder
    from lairsim.config import SimulationConfig
    from lairsim.core.faction import FactionRegistry
    from lairsim.core.models import Entity, Vector2
    from lairsim.core.world_state import WorldState
    from lairsim.systems.rng import DeterministicRNG


# =====================================================================
# AI Context: single object passed to every handler
# =====================================================================

@dataclass(slots=True)
class AIContext:
    """All data a handler might need."""

    actor: Entity
    world: WorldState
    config: SimulationConfig
    rng: DeterministicRNG
    controller: TerritoryController
    pathfinder: Pathfinder
    faction_reg: FactionRegistry

    @property
    def tick(self) -> int:
        return self.world.tick


# =====================================================================
# Shared helpers
# =====================================================================

def propose_wait(actor: Entity, ticks: int, reason: str) -> ActionProposal:
    return ActionProposal(actor_id=actor.id, verb=ActionType.WAIT, target=max(1, ticks), reason=reason)


def propose_travel(ctx: AIContext, goal: Vector2, reason: str) -> ActionProposal:
    """Propose the next MOVE along a cached path to *goal*, re-planning as needed."""
    actor = ctx.actor
    if actor.pos == goal:
        actor.clear_path()
        return propose_wait(actor, 1, f"{reason} (arrived)")

    path = actor.path if actor.path_goal == goal else None
    if not path or actor.pos.manhattan(path[0]) != 1 or not ctx.world.is_standable(path[0]):
        path = ctx.pathfinder.find_path(actor.pos, goal)
        if not path:
            actor.clear_path()
            return propose_wait(actor, 30, f"{reason} (path blocked)")
        actor.path = path
        actor.path_goal = goal

    return ActionProposal(actor_id=actor.id, verb=ActionType.MOVE, target=actor.path[0], reason=reason)


def _in_standoff_band(cell: Vector2, target_pos: Vector2, config: SimulationConfig) -> bool:
    d = cell.distance_to(target_pos)
    return (
        config.approach_min_range <= d <= config.approach_max_range
        and cell != target_pos
        and not cell.is_adjacent(target_pos)
    )


# =====================================================================
# Handler base
# =====================================================================

class ModeHandler(ABC):
    """Base class for per-act behavior handlers."""

    @abstractmethod
    def handle(self, ctx: AIContext) -> ActionProposal:
        ...


# =====================================================================
# DEFEND: stay near home
# =====================================================================

class DefendHandler(ModeHandler):
    """Return inside the territory radius when outside it, otherwise hold."""

    def handle(self, ctx: AIContext) -> ActionProposal:
        actor = ctx.actor
        rec = actor.territory
        if rec is None or rec.home is None:
            return propose_wait(actor, 60, "no home")

        if actor.pos.distance_to(rec.home) <= rec.radius:
            return propose_wait(actor, 60, "guarding lair")

        goal = rec.home
        if not ctx.world.is_standable(goal):
            if actor.path_goal is not None and actor.path_goal.distance_to(rec.home) <= ctx.config.home_return_fallback_radius:
                goal = actor.path_goal
            else:
                goal = random_close_walk_cell(
                    ctx.world, rec.home, ctx.config.home_return_fallback_radius, ctx.rng, actor.id,
                    reach_from=actor.pos)
                if goal is None:
                    return propose_wait(actor, 60, "home unreachable")
        return propose_travel(ctx, goal, "returning to territory")


# =====================================================================
# HUNT: stalk to engage range
# =====================================================================

class HuntHandler(ModeHandler):
    """Approach policy: hold inside engage range, else move to a standoff cell."""

    def handle(self, ctx: AIContext) -> ActionProposal:
        actor = ctx.actor
        cfg = ctx.config
        rec = actor.territory
        target = rec.resolve_target(ctx.world)

        if target is None or not target.alive or not target.spawned:
            ctx.controller.end_hunt(actor, ctx.world, success=False, pause=False, reason="target vanished")
            return propose_wait(actor, 1, "hunt ended")
        if target.downed:
            return propose_wait(actor, 1, "target down")

        actor.enemy_target_id = target.id

        if actor.pos.distance_to(target.pos) <= cfg.engage_range:
            actor.clear_path()
            return propose_wait(actor, cfg.engage_wait_ticks, f"engaging #{target.id}")

        goal = actor.path_goal if actor.path_goal is not None and _in_standoff_band(actor.path_goal, target.pos, cfg) else None
        if goal is None:
            goal = standoff_cell(ctx.world, actor, target, cfg)
        if goal is None:
            goal = random_close_walk_cell(
                ctx.world, target.pos, cfg.approach_max_range, ctx.rng, actor.id, reach_from=actor.pos)
        if goal is None or goal == target.pos:
            return propose_wait(actor, cfg.engage_wait_ticks, "no approach cell")
        return propose_travel(ctx, goal, f"stalking #{target.id}")


# =====================================================================
# DRAG: carry the target home
# =====================================================================

class DragHandler(ModeHandler):
    """Carry sequence: reach target → pick up → travel to drop cell → deposit."""

    def handle(self, ctx: AIContext) -> ActionProposal:
        actor = ctx.actor
        cfg = ctx.config
        world = ctx.world
        rec = actor.territory
        target = rec.resolve_target(world)

        if target is None or not target.alive or not target.spawned:
            ctx.controller.end_hunt(actor, world, success=False, pause=False, reason="captive vanished")
            return propose_wait(actor, 1, "drag ended")

        carrying = actor.carrying == target.id
        if not carrying and not target.downed:
            rec.revert_to_hunt()
            actor.clear_path()
            return propose_wait(actor, 1, "target recovered")
        if not carrying and target.carried_by is not None and target.carried_by != actor.id:
            ctx.controller.end_hunt(actor, world, success=False, pause=False, reason="captive taken")
            return propose_wait(actor, 1, "drag ended")

        if rec.drop_cell is None and rec.home is not None:
            rec.drop_cell = drop_cell(world, rec.home, cfg, ctx.rng, actor.id)
        if rec.drop_cell is None:
            ctx.controller.end_hunt(actor, world, success=False, pause=False, reason="no drop cell")
            return propose_wait(actor, 1, "drag ended")

        if not carrying:
            if actor.pos == target.pos or actor.pos.is_adjacent(target.pos):
                actor.clear_path()
                return ActionProposal(actor_id=actor.id, verb=ActionType.CARRY, target=target.id, reason="picking up")
            return propose_travel(ctx, target.pos, f"going to #{target.id}")

        if actor.pos == rec.drop_cell:
            return ActionProposal(actor_id=actor.id, verb=ActionType.DEPOSIT, target=target.id, reason="sealing captive")
        return propose_travel(ctx, rec.drop_cell, f"dragging #{target.id}")


# =====================================================================
# Bystanders: everyone without a territory
# =====================================================================

class WanderHandler(ModeHandler):
    """Idle wandering around an anchor point."""

    def handle(self, ctx: AIContext) -> ActionProposal:
        actor = ctx.actor
        cfg = ctx.config
        if actor.downed or actor.in_bed:
            return propose_wait(actor, 120, "resting")

        if actor.path and actor.path_goal is not None:
            return propose_travel(ctx, actor.path_goal, "wandering")

        if not ctx.rng.next_bool(Domain.WANDER, actor.id, ctx.tick, 0.3):
            return propose_wait(actor, ctx.rng.next_int(Domain.WANDER, actor.id, ctx.tick, 30, 120, seq=1), "idle")

        center = actor.anchor or actor.pos
        goal = random_close_walk_cell(ctx.world, center, cfg.bystander_wander_radius, ctx.rng, actor.id, seq=2)
        if goal is None or goal == actor.pos:
            return propose_wait(actor, 60, "idle")
        return propose_travel(ctx, goal, "wandering")


# =====================================================================
# Handler registry
# =====================================================================

MODE_HANDLERS: dict[TerritoryMode, ModeHandler] = {
    TerritoryMode.DEFEND: DefendHandler(),
    TerritoryMode.HUNT: HuntHandler(),
    TerritoryMode.DRAG: DragHandler(),
}

BYSTANDER_HANDLER = WanderHandler()
