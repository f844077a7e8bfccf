"""Containment structure — a single-slot cocoon holding one captive.

While occupied, the captive is out of the open world: it is removed from
the entity registry and owned by the structure until release. Upkeep
(food, wound tending, progression) runs on the coarse cadence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lairsim.core.enums import StructureKind
from lairsim.core.models import Entity, Vector2
from lairsim.core.structures import Structure

if TYPE_CHECKING:
    from lairsim.captivity.progression import CaptivityProgressionEngine
    from lairsim.config import SimulationConfig
    from lairsim.core.world_state import WorldState

logger = logging.getLogger(__name__)

# Released captives are set down one cell south of the structure
INTERACTION_OFFSET = Vector2(0, 1)


@dataclass(slots=True)
class ContainmentStructure(Structure):
    """Cocoon: accepts, sustains, and releases a single captive."""

    occupant: Entity | None = None
    built_by: int | None = None

    @classmethod
    def build(cls, structure_id: int, pos: Vector2, built_by: int | None = None) -> ContainmentStructure:
        return cls(structure_id=structure_id, kind=StructureKind.CONTAINMENT, pos=pos, built_by=built_by)

    @property
    def occupied(self) -> bool:
        return self.occupant is not None

    @property
    def interaction_cell(self) -> Vector2:
        return self.pos + INTERACTION_OFFSET

    # -- accept / release --

    def accept(
        self,
        target: Entity | None,
        world: WorldState,
        progression: CaptivityProgressionEngine,
    ) -> bool:
        """Seal *target* inside. False if there is no target, it is dead, or the slot is taken."""
        if target is None or not target.alive or self.occupant is not None:
            return False

        carrier = world.entities.get(target.carried_by) if target.carried_by is not None else None
        if carrier is not None and carrier.carrying == target.id:
            carrier.carrying = None
        target.carried_by = None
        target.in_bed = False
        target.clear_path()

        world.remove_entity(target.id)
        target.spawned = False
        target.pos = self.pos
        self.occupant = target

        progression.ensure_state(target)
        self._sustain(target)
        logger.info("Tick %d: containment %d sealed entity %d", world.tick, self.structure_id, target.id)
        return True

    def release(self, world: WorldState, config: SimulationConfig) -> Entity | None:
        """Let the captive out. Returns it, or None if the slot was empty."""
        captive = self.occupant
        if captive is None:
            return None
        self.occupant = None

        effect_type = config.content.captive_effect
        if effect_type is not None:
            captive.remove_effects_by_type(effect_type)

        captive.pos = self._release_cell(world)
        captive.spawned = True
        captive.clear_path()
        world.add_entity(captive)
        if not captive.downed:
            captive.stunned_until = world.tick + config.release_stagger_ticks

        logger.info(
            "Tick %d: containment %d released entity %d at %s",
            world.tick, self.structure_id, captive.id, captive.pos,
        )
        return captive

    def destroy(self, world: WorldState, config: SimulationConfig) -> Entity | None:
        """Remove the structure, releasing any captive first."""
        captive = self.release(world, config)
        world.remove_structure(self.structure_id)
        logger.info("Tick %d: containment %d destroyed", world.tick, self.structure_id)
        return captive

    # -- upkeep --

    def maintain(self, world: WorldState, progression: CaptivityProgressionEngine, elapsed: int) -> None:
        """Coarse-cadence upkeep: keep the captive fed, tended, and progressing."""
        captive = self.occupant
        if captive is None or not captive.alive:
            return
        progression.ensure_state(captive)
        self._sustain(captive)
        progression.advance(captive, elapsed, world, look_target=self.pos)

    @staticmethod
    def _sustain(captive: Entity) -> None:
        captive.food = captive.max_food
        for injury in captive.injuries:
            if injury.bleeding and not injury.tended:
                injury.tended = True

    def _release_cell(self, world: WorldState) -> Vector2:
        cell = self.interaction_cell
        if world.grid.in_bounds(cell) and world.is_standable(cell):
            return cell
        if world.is_standable(self.pos):
            return self.pos
        for candidate in world.grid.cells_in_radius(self.pos, 3):
            if world.is_standable(candidate):
                return candidate
        return self.pos

    def copy(self) -> ContainmentStructure:
        return ContainmentStructure(
            structure_id=self.structure_id,
            pos=self.pos,
            player_owned=self.player_owned,
            kind=self.kind,
            occupant=self.occupant.copy() if self.occupant else None,
            built_by=self.built_by,
        )
