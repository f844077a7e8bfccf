"""Agent generator — creates territorial agents and gives them a home.

``spawn_agent`` is the arrival path: pick a lair site, appear next to it,
start in DEFEND, and announce the arrival. ``spawn_hatchling`` is the path
for agents born on the map: ``adopt_home`` gives them the nearest existing
lair, or their own cell when there is none.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from lairsim.ai.site_selection import SiteSelector, find_spawn_cell
from lairsim.core.enums import Category, Domain
from lairsim.core.faction import Faction
from lairsim.core.models import ANIMAL_BODY_PARTS, HUMANLIKE_BODY_PARTS, Entity, Stats, Vector2
from lairsim.core.territory import TerritoryRecord
from lairsim.utils.event_log import ARRIVAL, SimEvent

if TYPE_CHECKING:
    from lairsim.config import SimulationConfig
    from lairsim.core.world_state import WorldState
    from lairsim.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)


class AgentGenerator:
    """Creates territorial agents and bystanders with deterministic stats."""

    __slots__ = ("_config", "_rng", "_selector", "_notify")

    def __init__(
        self,
        config: SimulationConfig,
        rng: DeterministicRNG,
        notify: Callable[[SimEvent], None] | None = None,
    ) -> None:
        self._config = config
        self._rng = rng
        self._selector = SiteSelector(config, rng)
        self._notify = notify

    @property
    def selector(self) -> SiteSelector:
        return self._selector

    # -- agents --

    def spawn_agent(self, world: WorldState) -> Entity:
        """Create an agent, choose its lair, and add it to the world next to it."""
        eid = world.allocate_entity_id()
        hp = 60 + self._rng.next_int(Domain.SPAWN, eid, world.tick, 0, 20)
        agent = self._new_agent(eid, world.grid.center, hp)
        home = self.establish_home(agent, world)
        world.add_entity(agent)

        if self._notify is not None:
            self._notify(SimEvent(
                tick=world.tick,
                category=ARRIVAL,
                message=f"A {agent.kind} has settled a lair at ({home.x}, {home.y})",
                entity_ids=(agent.id,),
                focus=(home.x, home.y),
            ))
        return agent

    def spawn_hatchling(self, world: WorldState, near: Vector2) -> Entity:
        """Create a young agent born on the map next to *near*; it adopts a lair."""
        eid = world.allocate_entity_id()
        hp = 20 + self._rng.next_int(Domain.SPAWN, eid, world.tick, 0, 10)
        hatchling = self._new_agent(eid, self._nearest_standable(world, near), hp)
        home = self.adopt_home(hatchling, world)
        world.add_entity(hatchling)
        logger.info("Agent %d: hatched at %s, adopts lair at %s", hatchling.id, hatchling.pos, home)
        return hatchling

    def _new_agent(self, eid: int, pos: Vector2, hp: int) -> Entity:
        cfg = self._config
        return Entity(
            id=eid,
            kind=cfg.content.agent_kind,
            pos=pos,
            category=Category.ARACHNID,
            faction=Faction.ARACHNOIDS,
            stats=Stats(hp=hp, max_hp=hp),
            body_parts=ANIMAL_BODY_PARTS,
            move_ticks=cfg.agent_move_ticks,
            territory=TerritoryRecord(radius=cfg.territory_default_radius),
        )

    def establish_home(self, agent: Entity, world: WorldState) -> Vector2:
        """Creation hook: select a site (map center if none) and place the agent near it."""
        cfg = self._config
        rec = agent.territory
        if rec is None:
            rec = agent.territory = TerritoryRecord(radius=cfg.territory_default_radius)

        home = self._selector.select(world, salt=agent.id)
        if home is None:
            home = world.grid.center
            logger.info("Agent %d: no lair site found, falling back to map center %s", agent.id, home)
        rec.set_home(home, cfg.territory_default_radius)
        rec.reset_to_defend()

        spawn = find_spawn_cell(world, home, cfg, self._rng, salt=agent.id)
        agent.pos = spawn if spawn is not None else home
        logger.info("Agent %d: lair at %s, appears at %s", agent.id, home, agent.pos)
        return home

    def adopt_home(self, agent: Entity, world: WorldState) -> Vector2:
        """Home for an agent born on the map: nearest existing lair, else its own cell."""
        cfg = self._config
        rec = agent.territory
        if rec is None:
            rec = agent.territory = TerritoryRecord(radius=cfg.territory_default_radius)
        rec.reset_to_defend()
        if rec.has_home:
            return rec.home

        best: Vector2 | None = None
        best_dist = float("inf")
        for other in world.agents():
            if other.id == agent.id or not other.alive or other.territory.home is None:
                continue
            d = agent.pos.distance_to(other.territory.home)
            if d < best_dist:
                best_dist = d
                best = other.territory.home
        rec.set_home(best if best is not None else agent.pos, cfg.territory_default_radius)
        return rec.home

    # -- bystanders --

    def spawn_bystander(
        self,
        world: WorldState,
        kind: str,
        faction: Faction,
        near: Vector2,
        spread: int = 4,
        category: Category = Category.HUMANLIKE,
    ) -> Entity:
        """Create a non-territorial entity on a standable cell near *near*."""
        eid = world.allocate_entity_id()
        tick = world.tick
        ox = self._rng.next_int(Domain.SPAWN, eid, tick, -spread, spread, seq=1)
        oy = self._rng.next_int(Domain.SPAWN, eid, tick, -spread, spread, seq=2)
        pos = self._nearest_standable(world, Vector2(near.x + ox, near.y + oy))
        hp = 30 + self._rng.next_int(Domain.SPAWN, eid, tick, 0, 20, seq=3)
        entity = Entity(
            id=eid,
            kind=kind,
            pos=pos,
            category=category,
            faction=faction,
            stats=Stats(hp=hp, max_hp=hp),
            body_parts=HUMANLIKE_BODY_PARTS if category == Category.HUMANLIKE else ANIMAL_BODY_PARTS,
            move_ticks=self._config.bystander_move_ticks,
            anchor=near,
        )
        world.add_entity(entity)
        return entity

    @staticmethod
    def _nearest_standable(world: WorldState, origin: Vector2) -> Vector2:
        for cell in world.grid.cells_in_radius(origin, 12):
            if world.is_standable(cell):
                return cell
        return origin
