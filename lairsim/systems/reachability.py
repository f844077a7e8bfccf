"""Connected-region labelling for cheap "can A reach B" queries.

Labels every passable cell with a region id using a 4-way flood fill.
Two cells are mutually reachable when they share a label. The labels are
rebuilt lazily whenever the terrain or the set of blocking cells changes.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lairsim.core.grid import Grid
    from lairsim.core.models import Vector2

_DIRS = ((1, 0), (-1, 0), (0, 1), (0, -1))


class ReachabilityMap:
    """Region labels over a grid, keyed by a caller-supplied version."""

    __slots__ = ("_labels", "_key", "_width")

    def __init__(self) -> None:
        self._labels: list[int] = []
        self._key: tuple[int, int] | None = None
        self._width = 0

    def is_current(self, key: tuple[int, int]) -> bool:
        return key == self._key and bool(self._labels)

    def refresh(self, grid: Grid, blocked: set[tuple[int, int]], key: tuple[int, int]) -> None:
        w, h = grid.width, grid.height
        labels = [-1] * (w * h)
        region = 0
        for start in range(w * h):
            if labels[start] != -1:
                continue
            sx, sy = start % w, start // w
            if not grid.walkable_xy(sx, sy) or (sx, sy) in blocked:
                continue
            labels[start] = region
            queue = deque([(sx, sy)])
            while queue:
                cx, cy = queue.popleft()
                for dx, dy in _DIRS:
                    nx, ny = cx + dx, cy + dy
                    if not grid.walkable_xy(nx, ny):
                        continue
                    idx = ny * w + nx
                    if labels[idx] != -1 or (nx, ny) in blocked:
                        continue
                    labels[idx] = region
                    queue.append((nx, ny))
            region += 1
        self._labels = labels
        self._key = key
        self._width = w

    def region_of(self, pos: Vector2) -> int:
        idx = pos.y * self._width + pos.x
        if pos.x < 0 or pos.y < 0 or pos.x >= self._width or idx >= len(self._labels):
            return -1
        return self._labels[idx]

    def connected(self, a: Vector2, b: Vector2) -> bool:
        ra = self.region_of(a)
        return ra != -1 and ra == self.region_of(b)
