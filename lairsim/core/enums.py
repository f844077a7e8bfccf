"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import IntEnum, unique


@unique
class ActionType(IntEnum):
    """Types of actions an entity can propose."""

    WAIT = 0
    MOVE = 1
    CARRY = 2        # Pick up a downed entity
    DEPOSIT = 3      # Drop the carried entity into a containment


@unique
class TerritoryMode(IntEnum):
    """Behavior mode of a territorial agent."""

    DEFEND = 0
    HUNT = 1
    DRAG = 2


@unique
class Category(IntEnum):
    """Broad creature category."""

    HUMANLIKE = 0
    ANIMAL = 1
    ARACHNID = 2


@unique
class Activity(IntEnum):
    """What an entity is currently busy with (read by combat awareness)."""

    IDLE = 0
    WANDER = 1
    WORK = 2
    MELEE = 3
    COMBAT = 4


@unique
class StructureKind(IntEnum):
    """Kinds of placed structures."""

    WALL = 0
    DOOR = 1          # Entry point
    TURRET = 2        # Area-denial structure
    BED = 3           # Recovery structure
    FURNITURE = 4
    CONTAINMENT = 5


@unique
class TraitType(IntEnum):
    """Permanent psychological traits."""

    ARACHNOPHOBE = 0


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    MAP_GEN = 0
    SPAWN = 1
    SITE_SELECTION = 2
    SPAWN_CELL = 3
    CLOSE_WALK = 4
    ABORT_PAUSE = 5
    WANDER = 6


@unique
class Material(IntEnum):
    """Tile materials on the grid."""

    FLOOR = 0
    SOIL = 1
    ROCK = 2           # Impassable, mineable
    SHALLOW_WATER = 3  # Passable liquid
    DEEP_WATER = 4     # Impassable liquid


@unique
class RoofType(IntEnum):
    """Overhead cover on a tile."""

    NONE = 0
    THIN = 1
    THICK = 2
