"""Core data models and world representation."""

from lairsim.core.enums import ActionType, Category, Domain, Material, TerritoryMode
from lairsim.core.models import Entity, Stats, Vector2
from lairsim.core.grid import Grid
from lairsim.core.territory import TerritoryRecord

__all__ = [
    "ActionType",
    "Category",
    "Domain",
    "Entity",
    "Grid",
    "Material",
    "Stats",
    "TerritoryMode",
    "TerritoryRecord",
    "Vector2",
]
