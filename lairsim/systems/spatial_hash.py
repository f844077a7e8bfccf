"""Spatial hashing for fast neighbor lookups."""

from __future__ import annotations

from collections import defaultdict

from lairsim.core.models import Vector2


class SpatialHash:
    """Grid-based spatial index mapping cell keys to sets of entity IDs.

    Positions are remembered per entity so radius queries can filter by
    exact straight-line distance rather than by bucket.
    """

    __slots__ = ("_cell_size", "_cells", "_positions")

    def __init__(self, cell_size: int = 8) -> None:
        self._cell_size = cell_size
        self._cells: dict[tuple[int, int], set[int]] = defaultdict(set)
        self._positions: dict[int, Vector2] = {}

    def _key(self, pos: Vector2) -> tuple[int, int]:
        return pos.x // self._cell_size, pos.y // self._cell_size

    def insert(self, entity_id: int, pos: Vector2) -> None:
        self._cells[self._key(pos)].add(entity_id)
        self._positions[entity_id] = pos

    def remove(self, entity_id: int, pos: Vector2) -> None:
        key = self._key(self._positions.pop(entity_id, pos))
        bucket = self._cells.get(key)
        if bucket is not None:
            bucket.discard(entity_id)
            if not bucket:
                del self._cells[key]

    def move(self, entity_id: int, old_pos: Vector2, new_pos: Vector2) -> None:
        if self._key(old_pos) != self._key(new_pos):
            self.remove(entity_id, old_pos)
            self.insert(entity_id, new_pos)
        else:
            self._positions[entity_id] = new_pos

    def query_radius(self, pos: Vector2, radius: float) -> set[int]:
        """Return entity IDs within straight-line *radius* of *pos*."""
        cx, cy = self._key(pos)
        r = int(radius // self._cell_size) + 1
        limit = radius * radius
        result: set[int] = set()
        for dx in range(-r, r + 1):
            for dy in range(-r, r + 1):
                bucket = self._cells.get((cx + dx, cy + dy))
                if not bucket:
                    continue
                for eid in bucket:
                    p = self._positions[eid]
                    if (p.x - pos.x) ** 2 + (p.y - pos.y) ** 2 <= limit:
                        result.add(eid)
        return result

    def clear(self) -> None:
        self._cells.clear()
        self._positions.clear()
