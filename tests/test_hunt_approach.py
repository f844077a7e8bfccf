"""Tests for per-act behavior while defending and hunting.

Covers:
- DefendHandler holds inside the radius and walks home from outside it
- DefendHandler picks a nearby cell when home itself is not standable
- HuntHandler holds and engages inside engage range
- HuntHandler moves toward a standoff cell in the [min, max] annulus
- Standoff cells never touch the target; line of sight preferred
- HuntHandler ends the hunt when the target vanishes
- Blocked paths produce a wait instead of a move
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dataclasses import replace

from lairsim.ai.controller import TerritoryController
from lairsim.ai.pathfinding import Pathfinder
from lairsim.ai.states import AIContext, DefendHandler, HuntHandler, propose_travel
from lairsim.ai.tactics import standoff_cell
from lairsim.config import SimulationConfig
from lairsim.core.enums import ActionType, Category, Material, TerritoryMode
from lairsim.core.faction import Faction, FactionRegistry
from lairsim.core.grid import Grid
from lairsim.core.models import Entity, Stats, Vector2
from lairsim.core.territory import TerritoryRecord
from lairsim.core.world_state import WorldState
from lairsim.systems.rng import DeterministicRNG
from lairsim.systems.spatial_hash import SpatialHash


def _make_world(width: int = 80, height: int = 80) -> WorldState:
    return WorldState(seed=42, grid=Grid(width, height), spatial_index=SpatialHash(8))


def _make_agent(world: WorldState, x: int, y: int, home: Vector2) -> Entity:
    rec = TerritoryRecord(radius=20)
    rec.set_home(home)
    agent = Entity(
        id=world.allocate_entity_id(), kind="arachnoid", pos=Vector2(x, y),
        category=Category.ARACHNID, faction=Faction.ARACHNOIDS,
        stats=Stats(hp=60, max_hp=60), territory=rec,
    )
    world.add_entity(agent)
    return agent


def _make_victim(world: WorldState, x: int, y: int) -> Entity:
    e = Entity(id=world.allocate_entity_id(), kind="colonist", pos=Vector2(x, y))
    world.add_entity(e)
    return e


def _ctx(agent: Entity, world: WorldState, config: SimulationConfig | None = None) -> AIContext:
    cfg = config or SimulationConfig()
    rng = DeterministicRNG(42)
    reg = FactionRegistry.default()
    return AIContext(
        actor=agent,
        world=world,
        config=cfg,
        rng=rng,
        controller=TerritoryController(cfg, rng, reg),
        pathfinder=Pathfinder(world, cfg.path_max_nodes),
        faction_reg=reg,
    )


# ---------------------------------------------------------------------------
# DEFEND
# ---------------------------------------------------------------------------

class TestDefend:
    def test_inside_radius_holds(self):
        world = _make_world()
        agent = _make_agent(world, 45, 40, home=Vector2(40, 40))
        proposal = DefendHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.WAIT
        assert proposal.target == 60

    def test_outside_radius_walks_home(self):
        world = _make_world()
        agent = _make_agent(world, 70, 40, home=Vector2(40, 40))
        proposal = DefendHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.MOVE
        assert proposal.target == Vector2(69, 40)
        assert agent.path_goal == Vector2(40, 40)

    def test_blocked_home_uses_nearby_cell(self):
        world = _make_world()
        world.grid.set(Vector2(40, 40), Material.ROCK)
        agent = _make_agent(world, 70, 40, home=Vector2(40, 40))
        proposal = DefendHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.MOVE
        assert agent.path_goal is not None
        assert agent.path_goal.distance_to(Vector2(40, 40)) <= 6
        assert world.is_standable(agent.path_goal)

    def test_cached_path_is_reused(self):
        world = _make_world()
        agent = _make_agent(world, 70, 40, home=Vector2(40, 40))
        ctx = _ctx(agent, world)
        DefendHandler().handle(ctx)
        cached = list(agent.path)
        agent.pos = cached[0]
        agent.path.pop(0)
        proposal = DefendHandler().handle(ctx)
        assert proposal.target == cached[1]


# ---------------------------------------------------------------------------
# HUNT
# ---------------------------------------------------------------------------

class TestHuntApproach:
    def _hunting(self, agent_x: int, victim_x: int):
        world = _make_world()
        agent = _make_agent(world, agent_x, 40, home=Vector2(5, 40))
        victim = _make_victim(world, victim_x, 40)
        agent.territory.begin_hunt(victim.id, 0)
        return world, agent, victim

    def test_engage_inside_range(self):
        world, agent, victim = self._hunting(10, 25)
        proposal = HuntHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.WAIT
        assert proposal.target == 30
        assert agent.enemy_target_id == victim.id

    def test_moves_toward_standoff_band(self):
        world, agent, victim = self._hunting(5, 60)
        proposal = HuntHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.MOVE
        goal = agent.path_goal
        assert goal is not None
        d = goal.distance_to(victim.pos)
        assert 10 <= d <= 18
        assert not goal.is_adjacent(victim.pos)

    def test_standoff_goal_kept_while_valid(self):
        world, agent, victim = self._hunting(5, 60)
        ctx = _ctx(agent, world)
        HuntHandler().handle(ctx)
        first_goal = agent.path_goal
        HuntHandler().handle(ctx)
        assert agent.path_goal == first_goal

    def test_vanished_target_ends_hunt(self):
        world, agent, victim = self._hunting(5, 60)
        world.remove_entity(victim.id)
        proposal = HuntHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.WAIT
        assert agent.territory.mode == TerritoryMode.DEFEND
        assert agent.stunned_until == 0

    def test_downed_target_waits_for_promotion(self):
        world, agent, victim = self._hunting(5, 60)
        victim.downed = True
        proposal = HuntHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.WAIT
        assert agent.territory.mode == TerritoryMode.HUNT


# ---------------------------------------------------------------------------
# Standoff cell geometry
# ---------------------------------------------------------------------------

class TestStandoffCell:
    def test_never_touches_target(self):
        world = _make_world()
        agent = _make_agent(world, 5, 40, home=Vector2(5, 40))
        victim = _make_victim(world, 40, 40)
        cfg = replace(SimulationConfig(), approach_min_range=0)
        cell = standoff_cell(world, agent, victim, cfg)
        assert cell is not None
        assert cell != victim.pos
        assert not cell.is_adjacent(victim.pos)

    def test_prefers_line_of_sight(self):
        world = _make_world()
        agent = _make_agent(world, 5, 40, home=Vector2(5, 40))
        victim = _make_victim(world, 40, 40)
        # Rock ring at distance 5 blocks sight from the north half
        for cell in world.grid.cells_in_radius(victim.pos, 5):
            if cell.distance_to(victim.pos) >= 4.5 and cell.y < victim.pos.y:
                world.grid.set(cell, Material.ROCK)
        cell = standoff_cell(world, agent, victim, SimulationConfig())
        assert cell is not None
        assert world.grid.has_line_of_sight(cell.x, cell.y, victim.pos.x, victim.pos.y)

    def test_unreachable_annulus(self):
        world = _make_world()
        agent = _make_agent(world, 5, 40, home=Vector2(5, 40))
        victim = _make_victim(world, 40, 40)
        for y in range(80):
            world.grid.set(Vector2(20, y), Material.ROCK)
        # Agent is cut off from everything east of x=20
        cell = standoff_cell(world, agent, victim, SimulationConfig())
        assert cell is None


# ---------------------------------------------------------------------------
# Travel helper
# ---------------------------------------------------------------------------

class TestTravel:
    def test_blocked_path_waits(self):
        world = _make_world()
        agent = _make_agent(world, 5, 40, home=Vector2(5, 40))
        for y in range(80):
            world.grid.set(Vector2(20, y), Material.ROCK)
        proposal = propose_travel(_ctx(agent, world), Vector2(40, 40), "test")
        assert proposal.verb == ActionType.WAIT
        assert proposal.target == 30
        assert "path blocked" in proposal.reason

    def test_arrived(self):
        world = _make_world()
        agent = _make_agent(world, 5, 40, home=Vector2(5, 40))
        proposal = propose_travel(_ctx(agent, world), Vector2(5, 40), "test")
        assert proposal.verb == ActionType.WAIT
        assert proposal.target == 1
