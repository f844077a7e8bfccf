"""Captivity: containment structures and time-driven progression."""

from lairsim.captivity.containment import ContainmentStructure
from lairsim.captivity.progression import (
    BroodCollaborator,
    CaptivityProgress,
    CaptivityProgressionEngine,
    DefaultBroodCollaborator,
)

__all__ = [
    "BroodCollaborator",
    "CaptivityProgress",
    "CaptivityProgressionEngine",
    "ContainmentStructure",
    "DefaultBroodCollaborator",
]
