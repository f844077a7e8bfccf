"""Optional content definitions.

Each entry names a piece of game content the behavior core depends on.
An entry set to ``None`` (or ``False``) means the content is not loaded;
every dependent behavior checks for that and quietly skips itself.
"""

from __future__ import annotations

from dataclasses import dataclass

from lairsim.core.effects import EffectType
from lairsim.core.enums import TraitType


@dataclass(frozen=True, slots=True)
class ContentDefs:
    """Content switches consulted at runtime."""

    restrained_effect: EffectType | None = EffectType.RESTRAINED
    captive_effect: EffectType | None = EffectType.CAPTIVE
    brood_marker_effect: EffectType | None = EffectType.BROOD_MARKER
    phobia_trait: TraitType | None = TraitType.ARACHNOPHOBE
    brood_body_part: str | None = "stomach"
    containment_available: bool = True
    agent_kind: str = "arachnoid"
