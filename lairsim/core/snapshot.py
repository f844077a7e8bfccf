"""Immutable snapshot of the world state for API readers."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from lairsim.core.grid import Grid
from lairsim.core.models import Entity
from lairsim.core.structures import Structure
from lairsim.core.world_state import WorldState


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Read-only view of the world, safe to share across threads.

    Uses deep-copied entities and structures and a MappingProxyType for the
    entity dict to enforce immutability at runtime.
    """

    tick: int
    seed: int
    entities: Mapping[int, Entity]
    structures: tuple[Structure, ...]
    grid: Grid

    @classmethod
    def from_world(cls, world: WorldState) -> Snapshot:
        copied_entities = {eid: e.copy() for eid, e in world.entities.items()}
        return cls(
            tick=world.tick,
            seed=world.seed,
            entities=MappingProxyType(copied_entities),
            structures=tuple(s.copy() for _, s in sorted(world.structures.items())),
            grid=world.grid,  # terrain does not change during a run
        )

    def agents(self) -> list[Entity]:
        return [e for _, e in sorted(self.entities.items()) if e.territory is not None]
