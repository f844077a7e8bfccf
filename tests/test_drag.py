"""Tests for the DRAG carry sequence and the deposit step.

Covers:
- Reach the downed target, then CARRY when on or next to it
- Carry to the drop cell (home, or a standable cell near it), then DEPOSIT
- Target got back up before pickup → back to HUNT
- Target gone or taken by someone else → hunt ends without a pause
- deposit_captive builds, reuses, or skips a containment
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dataclasses import replace

from lairsim.ai.controller import TerritoryController
from lairsim.ai.pathfinding import Pathfinder
from lairsim.ai.states import AIContext, DragHandler
from lairsim.ai.tactics import deposit_captive, drop_cell
from lairsim.captivity.containment import ContainmentStructure
from lairsim.captivity.progression import CaptivityProgressionEngine
from lairsim.config import SimulationConfig
from lairsim.core.content import ContentDefs
from lairsim.core.enums import ActionType, Category, Material, StructureKind, TerritoryMode
from lairsim.core.faction import Faction, FactionRegistry
from lairsim.core.grid import Grid
from lairsim.core.models import Entity, Stats, Vector2
from lairsim.core.structures import Structure
from lairsim.core.territory import TerritoryRecord
from lairsim.core.world_state import WorldState
from lairsim.systems.rng import DeterministicRNG
from lairsim.systems.spatial_hash import SpatialHash


def _make_world(width: int = 60, height: int = 60) -> WorldState:
    return WorldState(seed=42, grid=Grid(width, height), spatial_index=SpatialHash(8))


def _make_dragging(world: WorldState, agent_pos: Vector2, target_pos: Vector2, home: Vector2):
    rec = TerritoryRecord(radius=20)
    rec.set_home(home)
    agent = Entity(
        id=world.allocate_entity_id(), kind="arachnoid", pos=agent_pos,
        category=Category.ARACHNID, faction=Faction.ARACHNOIDS,
        stats=Stats(hp=60, max_hp=60), territory=rec,
    )
    target = Entity(id=world.allocate_entity_id(), kind="colonist", pos=target_pos, downed=True)
    world.add_entity(agent)
    world.add_entity(target)
    rec.begin_hunt(target.id, 0)
    rec.promote_to_drag()
    return agent, target


def _ctx(agent: Entity, world: WorldState, config: SimulationConfig | None = None) -> AIContext:
    cfg = config or SimulationConfig()
    rng = DeterministicRNG(42)
    reg = FactionRegistry.default()
    return AIContext(
        actor=agent, world=world, config=cfg, rng=rng,
        controller=TerritoryController(cfg, rng, reg),
        pathfinder=Pathfinder(world, cfg.path_max_nodes),
        faction_reg=reg,
    )


def _carry(agent: Entity, target: Entity) -> None:
    agent.carrying = target.id
    target.carried_by = agent.id


# ---------------------------------------------------------------------------
# Carry sequence
# ---------------------------------------------------------------------------

class TestDragHandler:
    def test_walks_to_target(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(10, 10), Vector2(30, 10), home=Vector2(10, 10))
        proposal = DragHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.MOVE
        assert proposal.target == Vector2(11, 10)
        assert agent.territory.drop_cell == Vector2(10, 10)

    def test_picks_up_when_adjacent(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(29, 11), Vector2(30, 10), home=Vector2(10, 10))
        proposal = DragHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.CARRY
        assert proposal.target == target.id

    def test_picks_up_on_same_cell(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(30, 10), Vector2(30, 10), home=Vector2(10, 10))
        proposal = DragHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.CARRY

    def test_carries_toward_drop_cell(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(30, 10), Vector2(30, 10), home=Vector2(10, 10))
        _carry(agent, target)
        proposal = DragHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.MOVE
        assert proposal.target == Vector2(29, 10)

    def test_deposits_at_drop_cell(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(10, 10), Vector2(10, 10), home=Vector2(10, 10))
        _carry(agent, target)
        proposal = DragHandler().handle(_ctx(agent, world))
        assert proposal.verb == ActionType.DEPOSIT
        assert proposal.target == target.id

    def test_recovered_target_reverts_to_hunt(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(10, 10), Vector2(30, 10), home=Vector2(10, 10))
        target.downed = False
        DragHandler().handle(_ctx(agent, world))
        assert agent.territory.mode == TerritoryMode.HUNT
        assert agent.territory.target_id == target.id

    def test_vanished_target_ends_hunt_without_pause(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(10, 10), Vector2(30, 10), home=Vector2(10, 10))
        world.remove_entity(target.id)
        DragHandler().handle(_ctx(agent, world))
        assert agent.territory.mode == TerritoryMode.DEFEND
        assert agent.stunned_until == 0

    def test_target_taken_by_another(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(10, 10), Vector2(30, 10), home=Vector2(10, 10))
        target.carried_by = 999
        DragHandler().handle(_ctx(agent, world))
        assert agent.territory.mode == TerritoryMode.DEFEND


# ---------------------------------------------------------------------------
# Drop cell
# ---------------------------------------------------------------------------

class TestDropCell:
    def test_home_when_standable(self):
        world = _make_world()
        cell = drop_cell(world, Vector2(20, 20), SimulationConfig(), DeterministicRNG(1), 1)
        assert cell == Vector2(20, 20)

    def test_near_home_when_blocked(self):
        world = _make_world()
        world.add_structure(Structure(world.allocate_structure_id(), StructureKind.WALL, Vector2(20, 20)))
        cell = drop_cell(world, Vector2(20, 20), SimulationConfig(), DeterministicRNG(1), 1)
        assert cell is not None
        assert cell != Vector2(20, 20)
        assert cell.distance_to(Vector2(20, 20)) <= 4

    def test_none_when_sealed(self):
        world = _make_world()
        for cell in world.grid.cells_in_radius(Vector2(20, 20), 5):
            world.grid.set(cell, Material.ROCK)
        assert drop_cell(world, Vector2(20, 20), SimulationConfig(), DeterministicRNG(1), 1) is None


# ---------------------------------------------------------------------------
# Deposit
# ---------------------------------------------------------------------------

class TestDeposit:
    def _setup(self):
        world = _make_world()
        agent, target = _make_dragging(world, Vector2(10, 10), Vector2(10, 10), home=Vector2(10, 10))
        _carry(agent, target)
        return world, agent, target

    def test_builds_containment_and_seals(self):
        world, agent, target = self._setup()
        cfg = SimulationConfig()
        containment = deposit_captive(world, agent, target, Vector2(10, 10), cfg, CaptivityProgressionEngine(cfg))
        assert isinstance(containment, ContainmentStructure)
        assert containment.pos == Vector2(10, 10)
        assert containment.built_by == agent.id
        assert containment.occupant is target
        assert target.id not in world.entities
        assert agent.carrying is None

    def test_reuses_empty_containment(self):
        world, agent, target = self._setup()
        cfg = SimulationConfig()
        existing = ContainmentStructure.build(world.allocate_structure_id(), Vector2(10, 10))
        world.add_structure(existing)
        result = deposit_captive(world, agent, target, Vector2(10, 10), cfg, CaptivityProgressionEngine(cfg))
        assert result is existing
        assert len(list(world.containments())) == 1

    def test_occupied_cell_builds_alongside(self):
        world, agent, target = self._setup()
        cfg = SimulationConfig()
        progression = CaptivityProgressionEngine(cfg)
        existing = ContainmentStructure.build(world.allocate_structure_id(), Vector2(10, 10))
        world.add_structure(existing)
        other = Entity(id=world.allocate_entity_id(), kind="raider", pos=Vector2(10, 10), downed=True)
        world.add_entity(other)
        assert existing.accept(other, world, progression)

        result = deposit_captive(world, agent, target, Vector2(10, 10), cfg, progression)
        assert result is not None
        assert result is not existing
        assert result.pos != Vector2(10, 10)
        assert result.occupant is target

    def test_no_content_leaves_target_on_ground(self):
        world, agent, target = self._setup()
        cfg = replace(SimulationConfig(), content=ContentDefs(containment_available=False))
        result = deposit_captive(world, agent, target, Vector2(10, 10), cfg, CaptivityProgressionEngine(cfg))
        assert result is None
        assert target.id in world.entities
        assert target.carried_by is None
        assert agent.carrying is None
        assert target.pos == Vector2(10, 10)
