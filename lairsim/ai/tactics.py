"""Movement tactics: where to stand, where to drop a captive, and the deposit step."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lairsim.captivity.containment import ContainmentStructure
from lairsim.core.enums import Domain

if TYPE_CHECKING:
    from lairsim.captivity.progression import CaptivityProgressionEngine
    from lairsim.config import SimulationConfig
    from lairsim.core.models import Entity, Vector2
    from lairsim.core.world_state import WorldState
    from lairsim.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)


def random_close_walk_cell(
    world: WorldState,
    origin: Vector2,
    radius: float,
    rng: DeterministicRNG,
    key: int,
    seq: int = 0,
    reach_from: Vector2 | None = None,
) -> Vector2 | None:
    """A random standable cell within *radius* of *origin*.

    The cell must be reachable from *reach_from*, or from *origin* when no
    *reach_from* is given and *origin* itself is standable.
    """
    anchor = reach_from
    if anchor is None and world.is_standable(origin):
        anchor = origin
    candidates = [
        c for c in world.grid.cells_in_radius(origin, radius)
        if world.is_standable(c) and (anchor is None or world.can_reach(c, anchor))
    ]
    if not candidates:
        return None
    idx = rng.next_int(Domain.CLOSE_WALK, key, world.tick, 0, len(candidates) - 1, seq)
    return candidates[idx]


def standoff_cell(
    world: WorldState,
    agent: Entity,
    target: Entity,
    config: SimulationConfig,
) -> Vector2 | None:
    """Pick a cell in the [min, max] range annulus around *target*.

    Cells are scanned nearest-to-target first. Cells touching the target
    are never used. The first cell with a clear line of sight to the target
    wins; failing that, the first reachable cell.
    """
    first_reachable: Vector2 | None = None
    tp = target.pos
    for cell in world.grid.cells_in_radius(tp, config.approach_max_range):
        d = cell.distance_to(tp)
        if d < config.approach_min_range:
            continue
        if cell == tp or cell.is_adjacent(tp):
            continue
        if not world.is_standable(cell) or not world.can_reach(agent.pos, cell):
            continue
        if world.grid.has_line_of_sight(cell.x, cell.y, tp.x, tp.y):
            return cell
        if first_reachable is None:
            first_reachable = cell
    return first_reachable


def drop_cell(
    world: WorldState,
    home: Vector2,
    config: SimulationConfig,
    rng: DeterministicRNG,
    key: int,
) -> Vector2 | None:
    """Where a dragged captive is set down: home, else near home."""
    if world.is_standable(home):
        return home
    for cell in world.grid.cells_in_radius(home, config.drop_search_radius):
        if cell != home and world.is_standable(cell):
            return cell
    return random_close_walk_cell(world, home, config.drop_search_radius, rng, key)


def deposit_captive(
    world: WorldState,
    agent: Entity,
    target: Entity,
    cell: Vector2,
    config: SimulationConfig,
    progression: CaptivityProgressionEngine,
) -> ContainmentStructure | None:
    """Drop *target* at *cell* and seal it into a containment.

    Reuses an empty containment already on the cell; otherwise builds one
    on the cell, or on the nearest free standable cell when something else
    stands there. Returns the structure on success, None if the target was
    left on the ground.
    """
    # Set the target down first; whatever happens next it is no longer carried.
    if agent.carrying == target.id:
        agent.carrying = None
    target.carried_by = None
    world.move_entity(target.id, cell)

    if not config.content.containment_available:
        logger.debug("No containment content loaded; entity %d left on the ground", target.id)
        return None

    containment: ContainmentStructure | None = None
    for s in world.structures_at(cell):
        if isinstance(s, ContainmentStructure) and not s.occupied:
            containment = s
            break

    if containment is None:
        site = cell if world.is_standable(cell) else agent.pos
        if world.structures_at(site):
            site = _free_cell_near(world, site, config.drop_search_radius)
        if site is None:
            logger.debug("No free cell for a containment near %s", cell)
            return None
        containment = ContainmentStructure.build(world.allocate_structure_id(), site, built_by=agent.id)
        world.add_structure(containment)

    if not containment.accept(target, world, progression):
        return None
    return containment


def _free_cell_near(world: WorldState, origin: Vector2, radius: float) -> Vector2 | None:
    for c in world.grid.cells_in_radius(origin, radius):
        if world.is_standable(c) and not world.structures_at(c):
            return c
    return None
