"""Placed structures: walls, doors, turrets, beds, containments."""

from __future__ import annotations

from dataclasses import dataclass

from lairsim.core.enums import StructureKind
from lairsim.core.models import Vector2

# Kinds that occupy their cell completely
BLOCKING_KINDS = frozenset({StructureKind.WALL, StructureKind.TURRET})

# Kinds that count as colony defenses for avoidance checks
DEFENSE_KINDS = frozenset({StructureKind.DOOR, StructureKind.TURRET})


@dataclass(slots=True)
class Structure:
    """A single-cell structure."""

    structure_id: int
    kind: StructureKind
    pos: Vector2
    player_owned: bool = False

    @property
    def blocks_movement(self) -> bool:
        return self.kind in BLOCKING_KINDS

    def copy(self) -> Structure:
        return Structure(
            structure_id=self.structure_id,
            kind=self.kind,
            pos=self.pos,
            player_owned=self.player_owned,
        )
