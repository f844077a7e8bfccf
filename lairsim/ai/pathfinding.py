"""A* pathfinding with terrain cost awareness.

Provides a `Pathfinder` class that computes paths through the world,
respecting terrain walkability, blocking structures, and terrain costs.

Usage:
    pf = Pathfinder(world)
    path = pf.find_path(start, goal)          # list[Vector2] or None
    step = pf.next_step(start, goal)          # Vector2 or None
"""

from __future__ import annotations

import heapq
from typing import TYPE_CHECKING

from lairsim.core.enums import Material
from lairsim.core.models import CARDINAL_OFFSETS, Vector2

if TYPE_CHECKING:
    from lairsim.core.world_state import WorldState

# Cost 1.0 = baseline.  Impassable tiles are handled by WorldState.is_standable().
TERRAIN_MOVE_COST: dict[Material, float] = {
    Material.FLOOR:          0.8,
    Material.SOIL:           1.0,
    Material.SHALLOW_WATER:  2.0,
}


def tile_cost(world: WorldState, pos: Vector2) -> float:
    """Return the movement cost for stepping onto *pos*."""
    return TERRAIN_MOVE_COST.get(world.grid.get(pos), 1.0)


class Pathfinder:
    """A* pathfinder operating on the live world.

    Performance-bounded: explores at most `max_nodes` before giving up.
    """

    __slots__ = ("_world", "_max_nodes")

    def __init__(self, world: WorldState, max_nodes: int = 6000) -> None:
        self._world = world
        self._max_nodes = max_nodes

    def find_path(self, start: Vector2, goal: Vector2) -> list[Vector2] | None:
        """Compute an A* path from *start* to *goal*.

        Returns a list of Vector2 positions (excluding *start*, including *goal*),
        or None if no path exists within the node budget.
        """
        if start == goal:
            return []

        world = self._world
        if not world.is_standable(goal):
            return None
        if not world.can_reach(start, goal):
            return None

        # A* open set: (f_score, counter, x, y)
        counter = 0
        open_heap: list[tuple[float, int, int, int]] = []
        heapq.heappush(open_heap, (0.0, counter, start.x, start.y))

        g_score: dict[tuple[int, int], float] = {(start.x, start.y): 0.0}
        came_from: dict[tuple[int, int], tuple[int, int]] = {}
        closed: set[tuple[int, int]] = set()
        nodes_explored = 0

        gx, gy = goal.x, goal.y

        while open_heap and nodes_explored < self._max_nodes:
            _, _, cx, cy = heapq.heappop(open_heap)
            ckey = (cx, cy)

            if cx == gx and cy == gy:
                return self._reconstruct(came_from, ckey)

            if ckey in closed:
                continue
            closed.add(ckey)
            nodes_explored += 1

            current_g = g_score[ckey]

            for d in CARDINAL_OFFSETS:
                nx, ny = cx + d.x, cy + d.y
                nkey = (nx, ny)
                if nkey in closed:
                    continue

                npos = Vector2(nx, ny)
                if not world.is_standable(npos):
                    continue

                tentative_g = current_g + tile_cost(world, npos)
                if tentative_g < g_score.get(nkey, float("inf")):
                    g_score[nkey] = tentative_g
                    came_from[nkey] = ckey
                    # Manhattan heuristic scaled by the cheapest terrain
                    h = (abs(nx - gx) + abs(ny - gy)) * 0.8
                    counter += 1
                    heapq.heappush(open_heap, (tentative_g + h, counter, nx, ny))

        return None  # No path found within budget

    def next_step(self, start: Vector2, goal: Vector2) -> Vector2 | None:
        """Return the first step of the A* path, or None if no path exists."""
        path = self.find_path(start, goal)
        if path:
            return path[0]
        return None

    @staticmethod
    def _reconstruct(
        came_from: dict[tuple[int, int], tuple[int, int]],
        current: tuple[int, int],
    ) -> list[Vector2]:
        """Walk back through came_from to build the path."""
        path: list[Vector2] = []
        while current in came_from:
            path.append(Vector2(current[0], current[1]))
            current = came_from[current]
        path.reverse()
        return path
