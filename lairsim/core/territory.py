"""Territory record — the per-agent home, mode, cooldown, and target slot.

Invariant: the record is in DEFEND exactly when it has no target and no
hunt start time. Every mutator below preserves that.

The target is held as an entity id, never as an object reference, and is
resolved through the world registry on every use. A target that has left
the registry simply resolves to ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lairsim.core.enums import TerritoryMode

if TYPE_CHECKING:
    from lairsim.core.models import Entity, Vector2
    from lairsim.core.world_state import WorldState


@dataclass(slots=True)
class TerritoryRecord:
    """Per-agent territorial state."""

    radius: int = 20
    home: Vector2 | None = None
    mode: TerritoryMode = TerritoryMode.DEFEND
    cooldown_until: int = 0
    hunt_started_at: int | None = None
    target_id: int | None = None
    next_scan_at: int = 0
    drop_cell: Vector2 | None = None

    @property
    def has_home(self) -> bool:
        return self.home is not None

    def set_home(self, cell: Vector2, radius: int | None = None) -> None:
        self.home = cell
        if radius is not None and radius > 0:
            self.radius = radius

    def can_hunt(self, now: int) -> bool:
        return now >= self.cooldown_until

    # -- transitions --

    def begin_hunt(self, target_id: int, now: int) -> None:
        self.mode = TerritoryMode.HUNT
        self.target_id = target_id
        self.hunt_started_at = now
        self.drop_cell = None

    def begin_drag_capture(self, target_id: int, now: int) -> None:
        self.mode = TerritoryMode.DRAG
        self.target_id = target_id
        self.hunt_started_at = now
        self.drop_cell = None

    def promote_to_drag(self) -> None:
        """HUNT → DRAG once the target is down; keeps target and start time."""
        if self.mode == TerritoryMode.HUNT:
            self.mode = TerritoryMode.DRAG

    def revert_to_hunt(self) -> None:
        """DRAG → HUNT when the target got back up before being carried off."""
        if self.mode == TerritoryMode.DRAG:
            self.mode = TerritoryMode.HUNT
            self.drop_cell = None

    def end_hunt(self, success: bool, now: int, cooldown_ticks: int, failure_divisor: int) -> int:
        """Return to DEFEND and start a cooldown.

        A success applies the full cooldown, a failure the full cooldown
        divided by *failure_divisor*. Returns the cooldown length applied.
        """
        length = cooldown_ticks if success else cooldown_ticks // failure_divisor
        self.cooldown_until = now + length
        self.reset_to_defend()
        return length

    def reset_to_defend(self) -> None:
        """Drop the target without touching the cooldown."""
        self.mode = TerritoryMode.DEFEND
        self.target_id = None
        self.hunt_started_at = None
        self.drop_cell = None

    # -- queries --

    def resolve_target(self, world: WorldState) -> Entity | None:
        if self.target_id is None:
            return None
        return world.entities.get(self.target_id)

    def copy(self) -> TerritoryRecord:
        return TerritoryRecord(
            radius=self.radius,
            home=self.home,
            mode=self.mode,
            cooldown_until=self.cooldown_until,
            hunt_started_at=self.hunt_started_at,
            target_id=self.target_id,
            next_scan_at=self.next_scan_at,
            drop_cell=self.drop_cell,
        )
