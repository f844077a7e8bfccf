"""Unit tests for A* pathfinding on the live world.

Covers:
- Straight paths, trivial paths, and the node budget
- Rock, deep water, and blocking structures are impassable
- Unreachable goals are rejected before searching
- Terrain costs steer paths off shallow water
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from lairsim.ai.pathfinding import Pathfinder, TERRAIN_MOVE_COST, tile_cost
from lairsim.core.enums import Material, StructureKind
from lairsim.core.grid import Grid
from lairsim.core.models import Vector2
from lairsim.core.structures import Structure
from lairsim.core.world_state import WorldState
from lairsim.systems.spatial_hash import SpatialHash


def _world(w: int = 10, h: int = 10) -> WorldState:
    return WorldState(seed=1, grid=Grid(w, h), spatial_index=SpatialHash(8))


# ---------------------------------------------------------------------------
# Basic A* tests
# ---------------------------------------------------------------------------

class TestAStarBasic:
    def test_straight_line_path(self):
        pf = Pathfinder(_world())
        path = pf.find_path(Vector2(0, 0), Vector2(4, 0))
        assert path is not None
        assert len(path) == 4
        assert path[-1] == Vector2(4, 0)

    def test_same_start_and_goal(self):
        pf = Pathfinder(_world())
        assert pf.find_path(Vector2(3, 3), Vector2(3, 3)) == []

    def test_adjacent_goal(self):
        pf = Pathfinder(_world())
        assert pf.find_path(Vector2(5, 5), Vector2(6, 5)) == [Vector2(6, 5)]

    def test_path_excludes_start(self):
        pf = Pathfinder(_world())
        path = pf.find_path(Vector2(0, 0), Vector2(3, 0))
        assert Vector2(0, 0) not in path

    def test_steps_are_cardinal(self):
        pf = Pathfinder(_world())
        path = pf.find_path(Vector2(0, 0), Vector2(5, 5))
        prev = Vector2(0, 0)
        for step in path:
            assert prev.manhattan(step) == 1
            prev = step

    def test_max_nodes_budget(self):
        pf = Pathfinder(_world(50, 50), max_nodes=5)
        assert pf.find_path(Vector2(0, 0), Vector2(49, 49)) is None

    def test_next_step_returns_first_tile(self):
        pf = Pathfinder(_world())
        assert pf.next_step(Vector2(0, 0), Vector2(3, 0)) == Vector2(1, 0)


# ---------------------------------------------------------------------------
# Obstacles
# ---------------------------------------------------------------------------

class TestObstacles:
    def test_path_around_rock(self):
        world = _world()
        for y in range(5):
            world.grid.set(Vector2(3, y), Material.ROCK)
        path = Pathfinder(world).find_path(Vector2(2, 2), Vector2(4, 2))
        assert path is not None
        assert len(path) > 2
        for step in path:
            assert world.is_standable(step), f"Step {step} is on rock"

    def test_deep_water_impassable(self):
        world = _world()
        for y in range(10):
            world.grid.set(Vector2(5, y), Material.DEEP_WATER)
        assert Pathfinder(world).find_path(Vector2(0, 0), Vector2(9, 0)) is None

    def test_walls_block(self):
        world = _world()
        for y in range(10):
            world.add_structure(Structure(world.allocate_structure_id(), StructureKind.WALL, Vector2(5, y)))
        assert Pathfinder(world).find_path(Vector2(0, 0), Vector2(9, 0)) is None

    def test_doors_do_not_block(self):
        world = _world()
        for y in range(10):
            kind = StructureKind.DOOR if y == 9 else StructureKind.WALL
            world.add_structure(Structure(world.allocate_structure_id(), kind, Vector2(5, y)))
        path = Pathfinder(world).find_path(Vector2(0, 0), Vector2(9, 0))
        assert path is not None
        assert Vector2(5, 9) in path

    def test_unwalkable_goal(self):
        world = _world()
        world.grid.set(Vector2(5, 5), Material.ROCK)
        pf = Pathfinder(world)
        assert pf.find_path(Vector2(0, 0), Vector2(5, 5)) is None
        assert pf.next_step(Vector2(0, 0), Vector2(5, 5)) is None

    def test_sealed_goal(self):
        world = _world()
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx or dy:
                    world.grid.set(Vector2(5 + dx, 5 + dy), Material.ROCK)
        assert Pathfinder(world).find_path(Vector2(0, 0), Vector2(5, 5)) is None


# ---------------------------------------------------------------------------
# Terrain costs
# ---------------------------------------------------------------------------

class TestTerrainCosts:
    def test_cost_table(self):
        assert TERRAIN_MOVE_COST[Material.FLOOR] == 0.8
        assert TERRAIN_MOVE_COST[Material.SHALLOW_WATER] == 2.0

    def test_tile_cost_lookup(self):
        world = _world()
        world.grid.set(Vector2(3, 3), Material.SHALLOW_WATER)
        assert tile_cost(world, Vector2(3, 3)) == 2.0
        assert tile_cost(world, Vector2(0, 0)) == 1.0

    def test_detours_around_shallow_water(self):
        world = _world(10, 3)
        for x in range(1, 9):
            world.grid.set(Vector2(x, 1), Material.SHALLOW_WATER)
        # Through the water: 8 * 2.0 + 1.0 = 17; around it: 11
        path = Pathfinder(world).find_path(Vector2(0, 1), Vector2(9, 1))
        assert path is not None
        assert all(world.grid.get(s) != Material.SHALLOW_WATER for s in path)
