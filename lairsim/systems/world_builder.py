"""World builder — deterministic terrain, colony layout, and starting population.

Layout:
  - Soil everywhere, with rock outcrops (thick roof over the rock, thin
    overhang roof on the open cells around it), ponds, and scattered trees.
  - A walled colony compound at the map center: doors on each side,
    turrets at the corners, beds inside.
  - Colonists inside the compound, a raider band near a map edge, wildlife
    scattered, then the territorial agents (each selects its own lair) and
    any hatchlings, born next to a lair they adopt.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from lairsim.core.enums import Category, Domain, Material, RoofType, StructureKind
from lairsim.core.faction import Faction
from lairsim.core.grid import Grid
from lairsim.core.models import Vector2
from lairsim.core.structures import Structure
from lairsim.core.world_state import WorldState
from lairsim.systems.generator import AgentGenerator
from lairsim.systems.spatial_hash import SpatialHash

if TYPE_CHECKING:
    from lairsim.config import SimulationConfig
    from lairsim.systems.rng import DeterministicRNG
    from lairsim.utils.event_log import SimEvent

logger = logging.getLogger(__name__)

COLONY_HALF_SIZE = 6
OUTCROP_COUNT = 7
POND_COUNT = 4
TREE_DENSITY = 0.07


def build_world(
    config: SimulationConfig,
    rng: DeterministicRNG,
    notify: Callable[[SimEvent], None] | None = None,
) -> WorldState:
    """Create a fully populated world from *config*; arrivals go to *notify*."""
    grid = Grid(config.grid_width, config.grid_height)
    world = WorldState(seed=config.world_seed, grid=grid, spatial_index=SpatialHash(config.spatial_cell_size))
    center = grid.center

    _place_outcrops(grid, rng, center)
    _place_ponds(grid, rng, center)
    _place_trees(grid, rng, center)
    _build_colony(world, center)

    generator = AgentGenerator(config, rng, notify)
    populate(world, config, rng, generator)
    logger.info(
        "World built: %dx%d, %d entities, %d structures",
        grid.width, grid.height, len(world.entities), len(world.structures),
    )
    return world


def populate(world: WorldState, config: SimulationConfig, rng: DeterministicRNG, generator: AgentGenerator) -> None:
    grid = world.grid
    center = grid.center
    for _ in range(config.num_colonists):
        generator.spawn_bystander(world, "colonist", Faction.COLONY, center, spread=COLONY_HALF_SIZE - 2)

    edge_x = rng.next_int(Domain.MAP_GEN, 7000, 0, 15, grid.width - 16)
    band = Vector2(edge_x, 14)
    for _ in range(config.num_raiders):
        generator.spawn_bystander(world, "raider", Faction.RAIDERS, band, spread=5)

    for i in range(config.num_wildlife):
        x = rng.next_int(Domain.MAP_GEN, 7100 + i, 0, 5, grid.width - 6)
        y = rng.next_int(Domain.MAP_GEN, 7100 + i, 1, 5, grid.height - 6)
        generator.spawn_bystander(world, "deer", Faction.WILDLIFE, Vector2(x, y), spread=3, category=Category.ANIMAL)

    agents = [generator.spawn_agent(world) for _ in range(config.num_agents)]
    for i in range(config.num_hatchlings):
        near = agents[i % len(agents)].territory.home if agents else center
        generator.spawn_hatchling(world, near)


# ---------------------------------------------------------------------------
# Terrain
# ---------------------------------------------------------------------------

def _place_outcrops(grid: Grid, rng: DeterministicRNG, center: Vector2) -> None:
    for i in range(OUTCROP_COUNT):
        for attempt in range(40):
            cx = rng.next_int(Domain.MAP_GEN, 100 + i, attempt, 8, grid.width - 9)
            cy = rng.next_int(Domain.MAP_GEN, 100 + i, attempt, 8, grid.height - 9, seq=1)
            origin = Vector2(cx, cy)
            if origin.distance_to(center) < 35:
                continue
            radius = rng.next_int(Domain.MAP_GEN, 100 + i, attempt, 4, 9, seq=2)
            for cell in grid.cells_in_radius(origin, radius):
                grid.set(cell, Material.ROCK)
                grid.set_roof(cell, RoofType.THICK)
            # Overhang: thin roof over open ground at the rim
            for cell in grid.cells_in_radius(origin, radius + 2):
                if grid.get(cell) != Material.ROCK:
                    grid.set_roof(cell, RoofType.THIN)
            break

    # Deep rock interiors stay unexplored
    for y in range(grid.height):
        for x in range(grid.width):
            if grid.get_xy(x, y) != Material.ROCK:
                continue
            if all(grid.get_xy(x + dx, y + dy) == Material.ROCK for dx, dy in ((1, 0), (-1, 0), (0, 1), (0, -1))):
                grid.set_fogged(Vector2(x, y))


def _place_ponds(grid: Grid, rng: DeterministicRNG, center: Vector2) -> None:
    for i in range(POND_COUNT):
        cx = rng.next_int(Domain.MAP_GEN, 200 + i, 0, 10, grid.width - 11)
        cy = rng.next_int(Domain.MAP_GEN, 200 + i, 1, 10, grid.height - 11)
        origin = Vector2(cx, cy)
        if origin.distance_to(center) < 20:
            continue
        radius = rng.next_int(Domain.MAP_GEN, 200 + i, 2, 3, 6)
        for cell in grid.cells_in_radius(origin, radius):
            if grid.get(cell) == Material.ROCK:
                continue
            deep = cell.distance_to(origin) <= radius - 2
            grid.set(cell, Material.DEEP_WATER if deep else Material.SHALLOW_WATER)


def _place_trees(grid: Grid, rng: DeterministicRNG, center: Vector2) -> None:
    for y in range(grid.height):
        for x in range(grid.width):
            if grid.get_xy(x, y) != Material.SOIL:
                continue
            if abs(x - center.x) <= COLONY_HALF_SIZE + 3 and abs(y - center.y) <= COLONY_HALF_SIZE + 3:
                continue
            if rng.next_bool(Domain.MAP_GEN, x, y, TREE_DENSITY, seq=3):
                grid.set_tree(Vector2(x, y))


# ---------------------------------------------------------------------------
# Colony
# ---------------------------------------------------------------------------

def _build_colony(world: WorldState, center: Vector2) -> None:
    grid = world.grid
    h = COLONY_HALF_SIZE

    def place(kind: StructureKind, pos: Vector2) -> None:
        if grid.in_bounds(pos):
            world.add_structure(Structure(world.allocate_structure_id(), kind, pos, player_owned=True))

    doors = {
        Vector2(center.x, center.y - h), Vector2(center.x, center.y + h),
        Vector2(center.x - h, center.y), Vector2(center.x + h, center.y),
    }
    for dy in range(-h, h + 1):
        for dx in range(-h, h + 1):
            pos = Vector2(center.x + dx, center.y + dy)
            grid.set(pos, Material.FLOOR)
            grid.set_tree(pos, False)
            if abs(dx) == h or abs(dy) == h:
                place(StructureKind.DOOR if pos in doors else StructureKind.WALL, pos)

    for sx in (-1, 1):
        for sy in (-1, 1):
            place(StructureKind.TURRET, Vector2(center.x + sx * (h + 2), center.y + sy * (h + 2)))

    for i in range(4):
        place(StructureKind.BED, Vector2(center.x - h + 2 + 2 * i, center.y - h + 2))
