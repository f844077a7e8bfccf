"""Lair site selection — where a newly arrived agent makes its home.

Samples random revealed cells, throws out anything near the map edge, cut
off from the colony, or close to player structures, scores the rest (roof
cover, nearby rock and trees, distance from other lairs), and makes a
rank-weighted random pick among the best few.

Usage:
    selector = SiteSelector(config, rng)
    home = selector.select(world, salt=agent.id)    # Vector2 or None
    spawn = find_spawn_cell(world, home, config, rng, salt=agent.id)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence, TypeVar

from lairsim.core.enums import Domain, RoofType
from lairsim.core.faction import Faction
from lairsim.core.models import Vector2
from lairsim.core.structures import DEFENSE_KINDS

if TYPE_CHECKING:
    from lairsim.config import SimulationConfig
    from lairsim.core.world_state import WorldState
    from lairsim.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

T = TypeVar("T")


def weighted_rank_pick(ranked: Sequence[T], roll: int) -> T:
    """Pick from a best-first list with linearly decreasing rank weights.

    Rank r (1-based) of N weighs N - r + 1, so the total is N(N+1)/2.
    *roll* must lie in [1, total]; the first rank whose cumulative weight
    reaches the roll is chosen.
    """
    n = len(ranked)
    if n == 0:
        raise ValueError("weighted_rank_pick needs at least one candidate")
    running = 0
    for r in range(n):
        running += n - r
        if roll <= running:
            return ranked[r]
    return ranked[0]


class SiteSelector:
    """Scores and picks a home cell for a territorial agent."""

    __slots__ = ("_config", "_rng")

    def __init__(self, config: SimulationConfig, rng: DeterministicRNG) -> None:
        self._config = config
        self._rng = rng

    # -- public --

    def select(self, world: WorldState, salt: int = 0) -> Vector2 | None:
        """Return a home cell, or None when no sampled cell survives the filters."""
        ranked = self.rank_candidates(world, salt)
        if not ranked:
            logger.info("Site selection: no candidate survived %d samples", self._config.site_samples)
            return None
        pick_n = min(self._config.site_top_n, len(ranked))
        total = pick_n * (pick_n + 1) // 2
        roll = self._rng.next_int(Domain.SITE_SELECTION, salt, world.tick, 1, total, seq=1_000_000)
        cell, score = weighted_rank_pick(ranked[:pick_n], roll)
        logger.info(
            "Site selection: %d candidates, picked %s (score=%d, roll=%d/%d)",
            len(ranked), cell, score, roll, total,
        )
        return cell

    def rank_candidates(self, world: WorldState, salt: int = 0) -> list[tuple[Vector2, int]]:
        """All surviving (cell, score) pairs, best first."""
        cfg = self._config
        grid = world.grid
        anchor = self.colony_anchor(world)
        player = world.player_structures()
        defenses = [s for s in player if s.kind in DEFENSE_KINDS]
        existing_homes = [
            e.territory.home for e in world.agents()
            if e.alive and e.territory is not None and e.territory.home is not None
        ]

        candidates: list[tuple[Vector2, int]] = []
        for i in range(cfg.site_samples):
            x = self._rng.next_int(Domain.SITE_SELECTION, salt, world.tick, 0, grid.width - 1, seq=2 * i)
            y = self._rng.next_int(Domain.SITE_SELECTION, salt, world.tick, 0, grid.height - 1, seq=2 * i + 1)
            cell = Vector2(x, y)

            if grid.is_fogged(cell) or not world.is_standable(cell) or grid.is_liquid(cell):
                continue
            edge = grid.distance_to_edge(cell)
            if edge < cfg.site_edge_min or edge > cfg.site_edge_max:
                continue
            if not world.can_reach(anchor, cell):
                continue
            if any(cell.distance_to(s.pos) <= cfg.site_min_structure_distance for s in player):
                continue
            if any(cell.distance_to(s.pos) <= cfg.site_min_defense_distance for s in defenses):
                continue

            candidates.append((cell, self.score(world, cell, existing_homes)))

        candidates.sort(key=lambda c: c[1], reverse=True)
        return candidates

    def score(self, world: WorldState, cell: Vector2, existing_homes: Sequence[Vector2] = ()) -> int:
        cfg = self._config
        grid = world.grid
        score = 0

        roof = grid.roof(cell)
        if roof == RoofType.THIN:
            score += cfg.site_thin_roof_bonus
        elif roof == RoofType.THICK:
            score += cfg.site_thick_roof_bonus

        for c in grid.cells_in_radius(cell, cfg.site_density_radius):
            if grid.is_mineable(c):
                score += 1
            if grid.has_tree(c):
                score += 1

        # Applied once no matter how many lairs are close
        if any(h.distance_to(cell) <= cfg.site_cluster_distance for h in existing_homes):
            score -= cfg.site_cluster_penalty
        return score

    @staticmethod
    def colony_anchor(world: WorldState) -> Vector2:
        """First free colonist's position, else the map center."""
        for _, e in sorted(world.entities.items()):
            if e.faction == Faction.COLONY and e.alive and e.spawned and not e.prisoner and e.territory is None:
                return e.pos
        return world.grid.center


def find_spawn_cell(
    world: WorldState,
    home: Vector2,
    config: SimulationConfig,
    rng: DeterministicRNG,
    salt: int = 0,
) -> Vector2 | None:
    """A cell near *home* (but not on it) where the agent appears."""
    grid = world.grid

    def usable(c: Vector2) -> bool:
        return (
            c != home
            and grid.in_bounds(c)
            and not grid.is_fogged(c)
            and world.is_standable(c)
            and not grid.is_liquid(c)
            and world.can_reach(c, home)
        )

    nearby = [c for c in grid.cells_in_radius(home, config.spawn_cell_radius) if world.is_standable(c)]
    if nearby:
        for attempt in range(config.spawn_cell_tries):
            idx = rng.next_int(Domain.SPAWN_CELL, salt, world.tick, 0, len(nearby) - 1, seq=attempt)
            if usable(nearby[idx]):
                return nearby[idx]

    # Deterministic ring scan, nearest first
    for c in grid.cells_in_radius(home, config.spawn_cell_radius):
        if c.distance_to(home) >= 1 and usable(c):
            return c
    return None

