"""Mutable authoritative world state — only mutated by the WorldLoop."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator

from lairsim.core.grid import Grid
from lairsim.core.models import Entity, Vector2
from lairsim.core.structures import Structure
from lairsim.systems.reachability import ReachabilityMap

if TYPE_CHECKING:
    from lairsim.captivity.containment import ContainmentStructure
    from lairsim.core.enums import StructureKind
    from lairsim.systems.spatial_hash import SpatialHash


class WorldState:
    """The single source of truth for the simulation.

    Entities held inside a containment are not in ``entities``; the
    containment owns them until release.
    """

    __slots__ = (
        "tick", "seed", "entities", "grid", "spatial_index", "structures",
        "_by_cell", "_next_entity_id", "_next_structure_id", "_structure_version", "_reachability",
    )

    def __init__(
        self,
        seed: int,
        grid: Grid,
        spatial_index: SpatialHash,
    ) -> None:
        self.tick: int = 0
        self.seed: int = seed
        self.entities: dict[int, Entity] = {}
        self.grid: Grid = grid
        self.spatial_index: SpatialHash = spatial_index
        self.structures: dict[int, Structure] = {}
        self._by_cell: dict[tuple[int, int], list[Structure]] = {}
        self._next_entity_id: int = 1
        self._next_structure_id: int = 1
        self._structure_version: int = 0
        self._reachability = ReachabilityMap()

    # -- entities --

    def allocate_entity_id(self) -> int:
        eid = self._next_entity_id
        self._next_entity_id += 1
        return eid

    def add_entity(self, entity: Entity) -> None:
        if entity.id >= self._next_entity_id:
            self._next_entity_id = entity.id + 1
        self.entities[entity.id] = entity
        self.spatial_index.insert(entity.id, entity.pos)

    def remove_entity(self, entity_id: int) -> Entity | None:
        entity = self.entities.pop(entity_id, None)
        if entity is not None:
            self.spatial_index.remove(entity_id, entity.pos)
        return entity

    def move_entity(self, entity_id: int, new_pos: Vector2) -> None:
        entity = self.entities.get(entity_id)
        if entity is None:
            return
        old_pos = entity.pos
        entity.pos = new_pos
        self.spatial_index.move(entity_id, old_pos, new_pos)

    def entities_near(self, pos: Vector2, radius: float) -> list[Entity]:
        """Entities within *radius* of *pos*, in id order."""
        ids = self.spatial_index.query_radius(pos, radius)
        return [self.entities[eid] for eid in sorted(ids) if eid in self.entities]

    def agents(self) -> list[Entity]:
        """Entities carrying a territory record, in id order."""
        return [e for _, e in sorted(self.entities.items()) if e.territory is not None]

    # -- structures --

    def allocate_structure_id(self) -> int:
        sid = self._next_structure_id
        self._next_structure_id += 1
        return sid

    def add_structure(self, structure: Structure) -> None:
        if structure.structure_id >= self._next_structure_id:
            self._next_structure_id = structure.structure_id + 1
        self.structures[structure.structure_id] = structure
        self._by_cell.setdefault((structure.pos.x, structure.pos.y), []).append(structure)
        self._structure_version += 1

    def remove_structure(self, structure_id: int) -> Structure | None:
        structure = self.structures.pop(structure_id, None)
        if structure is not None:
            key = (structure.pos.x, structure.pos.y)
            self._by_cell[key] = [s for s in self._by_cell.get(key, ()) if s is not structure]
            self._structure_version += 1
        return structure

    def structures_at(self, pos: Vector2) -> list[Structure]:
        return list(self._by_cell.get((pos.x, pos.y), ()))

    def containments(self) -> Iterator[ContainmentStructure]:
        from lairsim.captivity.containment import ContainmentStructure

        for sid in sorted(self.structures):
            s = self.structures[sid]
            if isinstance(s, ContainmentStructure):
                yield s

    def player_structures(self, kinds: Iterable[StructureKind] | None = None) -> list[Structure]:
        wanted = frozenset(kinds) if kinds is not None else None
        return [
            s for s in self.structures.values()
            if s.player_owned and (wanted is None or s.kind in wanted)
        ]

    def blocked_cells(self) -> set[tuple[int, int]]:
        return {(s.pos.x, s.pos.y) for s in self.structures.values() if s.blocks_movement}

    # -- movement queries --

    def is_standable(self, pos: Vector2) -> bool:
        """Walkable terrain with nothing solid built on it."""
        if not self.grid.is_walkable(pos):
            return False
        return not any(s.blocks_movement for s in self.structures_at(pos))

    def can_reach(self, a: Vector2, b: Vector2) -> bool:
        """True when *a* and *b* lie in the same connected walkable region."""
        key = (self.grid.version, self._structure_version)
        if not self._reachability.is_current(key):
            self._reachability.refresh(self.grid, self.blocked_cells(), key)
        return self._reachability.connected(a, b)
