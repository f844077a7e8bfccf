"""Perception system — what a territorial agent notices about its surroundings.

All methods are stateless queries against the live world.
Hostility checks use the faction system instead of string comparisons,
so adding new factions or changing alliances requires zero changes here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from lairsim.core.enums import Activity, Category, StructureKind
from lairsim.core.faction import FactionRegistry
from lairsim.core.models import Entity, Vector2

if TYPE_CHECKING:
    from lairsim.config import SimulationConfig
    from lairsim.core.world_state import WorldState


class Perception:
    """Stateless perception utilities."""

    __slots__ = ()

    # ------------------------------------------------------------------
    # Combat awareness
    # ------------------------------------------------------------------

    @staticmethod
    def in_combat(
        agent: Entity,
        world: WorldState,
        config: SimulationConfig,
        faction_reg: FactionRegistry,
    ) -> bool:
        """True when the agent is fighting or was hurt recently.

        Any one of: busy with melee or another combat activity, harmed within
        the recent-harm window, holding an enemy target, or a hostile
        humanlike standing within the threat radius.
        """
        if agent.activity in (Activity.MELEE, Activity.COMBAT):
            return True
        now = world.tick
        if agent.last_harmed_tick is not None and now - agent.last_harmed_tick <= config.combat_recent_harm_ticks:
            return True
        if agent.enemy_target_id is not None:
            return True
        for other in world.entities_near(agent.pos, config.combat_threat_radius):
            if other.id == agent.id or not other.alive or not other.spawned:
                continue
            if other.category != Category.HUMANLIKE:
                continue
            if faction_reg.is_hostile(agent.faction, other.faction):
                return True
        return False

    # ------------------------------------------------------------------
    # Victim qualification
    # ------------------------------------------------------------------

    @staticmethod
    def is_isolated(victim: Entity, world: WorldState, radius: float, max_others: int) -> bool:
        """At most *max_others* other live humanlikes within *radius* of *victim*."""
        count = 0
        for other in world.entities_near(victim.pos, radius):
            if other.id == victim.id or not other.alive or not other.spawned:
                continue
            if other.category != Category.HUMANLIKE:
                continue
            count += 1
            if count > max_others:
                return False
        return True

    @staticmethod
    def near_colony_defenses(world: WorldState, pos: Vector2, config: SimulationConfig) -> bool:
        """True within door-avoid range of a player door or turret-avoid range of a player turret."""
        for s in world.player_structures((StructureKind.DOOR, StructureKind.TURRET)):
            limit = config.door_avoid_radius if s.kind == StructureKind.DOOR else config.turret_avoid_radius
            if pos.distance_to(s.pos) <= limit:
                return True
        return False

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @staticmethod
    def nearest(origin: Vector2, candidates: Iterable[Entity]) -> Entity | None:
        """Closest candidate to *origin*; ties keep the first one seen."""
        best: Entity | None = None
        best_dist = float("inf")
        for c in candidates:
            d = origin.distance_to(c.pos)
            if d < best_dist:
                best_dist = d
                best = c
        return best
