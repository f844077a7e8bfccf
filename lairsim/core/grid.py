"""Grid / map system: terrain, roofs, fog, and trees."""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Iterator

from lairsim.core.enums import Material, RoofType
from lairsim.core.models import Vector2

_IMPASSABLE = frozenset({Material.ROCK, Material.DEEP_WATER})
_LIQUID = frozenset({Material.SHALLOW_WATER, Material.DEEP_WATER})


@lru_cache(maxsize=64)
def radial_offsets(radius: float) -> tuple[Vector2, ...]:
    """Offsets within *radius*, ordered by distance from the origin.

    Ties are broken by (y, x) so the order is stable. The origin itself
    comes first.
    """
    r = int(math.ceil(radius))
    offsets = [
        Vector2(dx, dy)
        for dy in range(-r, r + 1)
        for dx in range(-r, r + 1)
        if dx * dx + dy * dy <= radius * radius
    ]
    offsets.sort(key=lambda o: (o.x * o.x + o.y * o.y, o.y, o.x))
    return tuple(offsets)


class Grid:
    """2D tile grid backed by flat lists for cache-friendly access.

    ``version`` increments on every terrain change so derived caches
    (reachability) know when to rebuild.
    """

    __slots__ = ("width", "height", "_tiles", "_roofs", "_fog", "_trees", "version")

    def __init__(self, width: int, height: int, default: Material = Material.SOIL) -> None:
        self.width = width
        self.height = height
        self._tiles: list[Material] = [default] * (width * height)
        self._roofs: list[RoofType] = [RoofType.NONE] * (width * height)
        self._fog: list[bool] = [False] * (width * height)
        self._trees: set[tuple[int, int]] = set()
        self.version = 0

    # -- access --

    def _idx(self, x: int, y: int) -> int:
        return y * self.width + x

    def in_bounds(self, pos: Vector2) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def get(self, pos: Vector2) -> Material:
        if not self.in_bounds(pos):
            return Material.ROCK
        return self._tiles[self._idx(pos.x, pos.y)]

    def set(self, pos: Vector2, material: Material) -> None:
        if self.in_bounds(pos):
            self._tiles[self._idx(pos.x, pos.y)] = material
            self.version += 1

    def is_walkable(self, pos: Vector2) -> bool:
        return self.in_bounds(pos) and self.get(pos) not in _IMPASSABLE

    def is_liquid(self, pos: Vector2) -> bool:
        return self.get(pos) in _LIQUID

    def is_mineable(self, pos: Vector2) -> bool:
        return self.in_bounds(pos) and self.get(pos) == Material.ROCK

    # -- overlays --

    def roof(self, pos: Vector2) -> RoofType:
        if not self.in_bounds(pos):
            return RoofType.NONE
        return self._roofs[self._idx(pos.x, pos.y)]

    def set_roof(self, pos: Vector2, roof: RoofType) -> None:
        if self.in_bounds(pos):
            self._roofs[self._idx(pos.x, pos.y)] = roof

    def is_fogged(self, pos: Vector2) -> bool:
        if not self.in_bounds(pos):
            return True
        return self._fog[self._idx(pos.x, pos.y)]

    def set_fogged(self, pos: Vector2, fogged: bool = True) -> None:
        if self.in_bounds(pos):
            self._fog[self._idx(pos.x, pos.y)] = fogged

    def has_tree(self, pos: Vector2) -> bool:
        return (pos.x, pos.y) in self._trees

    def set_tree(self, pos: Vector2, present: bool = True) -> None:
        if not self.in_bounds(pos):
            return
        if present:
            self._trees.add((pos.x, pos.y))
        else:
            self._trees.discard((pos.x, pos.y))

    # -- geometry --

    @property
    def center(self) -> Vector2:
        return Vector2(self.width // 2, self.height // 2)

    def distance_to_edge(self, pos: Vector2) -> int:
        return min(pos.x, pos.y, self.width - 1 - pos.x, self.height - 1 - pos.y)

    def cells_in_radius(self, center: Vector2, radius: float) -> Iterator[Vector2]:
        """Yield in-bounds cells within *radius* of *center*, nearest first."""
        for off in radial_offsets(radius):
            cell = center + off
            if self.in_bounds(cell):
                yield cell

    # -- line-of-sight (Bresenham) --

    def has_line_of_sight(self, x0: int, y0: int, x1: int, y1: int) -> bool:
        """Check if there is a clear line of sight between two positions.

        Uses Bresenham's line algorithm. Returns False if any ROCK tile
        lies on the line between (x0,y0) and (x1,y1), exclusive of endpoints.
        """
        dx = abs(x1 - x0)
        dy = abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx - dy
        cx, cy = x0, y0
        while True:
            if cx == x1 and cy == y1:
                return True
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                cx += sx
            if e2 < dx:
                err += dx
                cy += sy
            if (cx != x1 or cy != y1) and self.get_xy(cx, cy) == Material.ROCK:
                return False

    # -- fast raw-coordinate access (no Vector2 alloc, for hot loops) --

    def in_bounds_xy(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_xy(self, x: int, y: int) -> Material:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self._tiles[y * self.width + x]
        return Material.ROCK

    def walkable_xy(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height and self._tiles[y * self.width + x] not in _IMPASSABLE

    # -- copy --

    def copy(self) -> Grid:
        new = Grid.__new__(Grid)
        new.width = self.width
        new.height = self.height
        new._tiles = list(self._tiles)
        new._roofs = list(self._roofs)
        new._fog = list(self._fog)
        new._trees = set(self._trees)
        new.version = self.version
        return new
