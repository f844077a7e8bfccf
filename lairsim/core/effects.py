"""Status effect system — conditions attached to entities.

Design:
  - Effects are lightweight dataclasses attached to an entity.
  - Unlike timed buffs, these conditions persist until something removes
    them explicitly (release from containment, rescue, etc.).
  - The CAPTIVE effect carries the captivity progression state; the state
    lives and dies with the effect.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, unique
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lairsim.captivity.progression import CaptivityProgress


@unique
class EffectType(IntEnum):
    """Categories of status effects."""

    RESTRAINED = 0      # Bound in webbing, cannot resist capture
    CAPTIVE = 1         # Sealed inside a containment structure
    BROOD_MARKER = 2    # Implanted brood, one per sub-interval event


@dataclass(slots=True)
class StatusEffect:
    """A condition applied to an entity.

    ``severity`` is a 0..1 fraction; ``location`` is a body part name or
    ``None`` for whole-body effects.
    """

    effect_type: EffectType
    severity: float = 0.0
    location: str | None = None
    source: str = ""                        # Human-readable origin
    originator_id: int | None = None        # Brood markers: the implanting agent
    fertilized: bool = False
    progress: CaptivityProgress | None = None

    def copy(self) -> StatusEffect:
        return StatusEffect(
            effect_type=self.effect_type,
            severity=self.severity,
            location=self.location,
            source=self.source,
            originator_id=self.originator_id,
            fertilized=self.fertilized,
            progress=self.progress.copy() if self.progress else None,
        )


# ---------------------------------------------------------------------------
# Factory helpers for common effects
# ---------------------------------------------------------------------------

def restrained(source: str = "webbing") -> StatusEffect:
    return StatusEffect(effect_type=EffectType.RESTRAINED, severity=1.0, source=source)


def brood_marker(
    location: str | None,
    originator_id: int | None,
    effect_type: EffectType = EffectType.BROOD_MARKER,
) -> StatusEffect:
    return StatusEffect(
        effect_type=effect_type,
        severity=0.0,
        location=location,
        source="brood",
        originator_id=originator_id,
    )
