"""Core data models: Vector2, Stats, Injury, Entity."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lairsim.core.enums import Activity, Category
from lairsim.core.faction import Faction

if TYPE_CHECKING:
    from lairsim.core.effects import EffectType, StatusEffect
    from lairsim.core.territory import TerritoryRecord


@dataclass(frozen=True, slots=True)
class Vector2:
    """Immutable 2D integer coordinate."""

    x: int = 0
    y: int = 0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def manhattan(self, other: Vector2) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def distance_to(self, other: Vector2) -> float:
        """Straight-line distance; all range checks use this."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_adjacent(self, other: Vector2) -> bool:
        """True for the eight surrounding cells (not the cell itself)."""
        return self != other and abs(self.x - other.x) <= 1 and abs(self.y - other.y) <= 1

    def __repr__(self) -> str:
        return f"({self.x}, {self.y})"


# Cardinal offsets, clockwise from north
CARDINAL_OFFSETS: tuple[Vector2, ...] = (
    Vector2(0, -1),
    Vector2(1, 0),
    Vector2(0, 1),
    Vector2(-1, 0),
)

HUMANLIKE_BODY_PARTS: tuple[str, ...] = ("head", "torso", "stomach", "left_arm", "right_arm", "left_leg", "right_leg")
ANIMAL_BODY_PARTS: tuple[str, ...] = ("head", "body", "stomach", "legs")


@dataclass(slots=True)
class Stats:
    """Mutable vital statistics for an entity."""

    hp: int = 20
    max_hp: int = 20

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def hp_ratio(self) -> float:
        return self.hp / self.max_hp if self.max_hp > 0 else 0.0

    def copy(self) -> Stats:
        return Stats(hp=self.hp, max_hp=self.max_hp)


@dataclass(slots=True)
class Injury:
    """A wound on a body part; bleeding wounds need tending."""

    part: str
    bleeding: bool = False
    tended: bool = False

    def copy(self) -> Injury:
        return Injury(part=self.part, bleeding=self.bleeding, tended=self.tended)


@dataclass(slots=True)
class Entity:
    """A simulation entity: colonist, raider, wildlife, or territorial agent."""

    id: int
    kind: str
    pos: Vector2
    category: Category = Category.HUMANLIKE
    faction: Faction = Faction.COLONY
    stats: Stats = field(default_factory=Stats)
    downed: bool = False                    # Incapacitated
    spawned: bool = True                    # Present in the open world
    prisoner: bool = False
    last_harmed_tick: int | None = None
    activity: Activity = Activity.IDLE
    enemy_target_id: int | None = None
    effects: list[StatusEffect] = field(default_factory=list)
    injuries: list[Injury] = field(default_factory=list)
    food: float = 1.0
    max_food: float = 1.0
    body_parts: tuple[str, ...] = HUMANLIKE_BODY_PARTS
    traits: list[int] = field(default_factory=list)  # list of TraitType values
    carried_by: int | None = None
    carrying: int | None = None
    in_bed: bool = False
    stunned_until: int = 0
    next_act_at: int = 0
    move_ticks: int = 1
    anchor: Vector2 | None = None           # Wander center for bystanders
    path: list[Vector2] = field(default_factory=list)
    path_goal: Vector2 | None = None
    territory: TerritoryRecord | None = None

    @property
    def alive(self) -> bool:
        return self.stats.alive

    @property
    def health_fraction(self) -> float:
        return self.stats.hp_ratio

    def is_stunned(self, tick: int) -> bool:
        return tick < self.stunned_until

    # -- effect helpers --

    def has_effect(self, effect_type: EffectType) -> bool:
        return any(e.effect_type == effect_type for e in self.effects)

    def get_effect(self, effect_type: EffectType) -> StatusEffect | None:
        for eff in self.effects:
            if eff.effect_type == effect_type:
                return eff
        return None

    def count_effects(self, effect_type: EffectType) -> int:
        return sum(1 for e in self.effects if e.effect_type == effect_type)

    def remove_effects_by_type(self, effect_type: EffectType) -> None:
        self.effects = [e for e in self.effects if e.effect_type != effect_type]

    def has_trait(self, trait: int) -> bool:
        return trait in self.traits

    def has_body_part(self, part: str) -> bool:
        return part in self.body_parts

    def clear_path(self) -> None:
        self.path = []
        self.path_goal = None

    def copy(self) -> Entity:
        """Deep copy for snapshot generation."""
        return Entity(
            id=self.id,
            kind=self.kind,
            pos=self.pos,
            category=self.category,
            faction=self.faction,
            stats=self.stats.copy(),
            downed=self.downed,
            spawned=self.spawned,
            prisoner=self.prisoner,
            last_harmed_tick=self.last_harmed_tick,
            activity=self.activity,
            enemy_target_id=self.enemy_target_id,
            effects=[e.copy() for e in self.effects],
            injuries=[i.copy() for i in self.injuries],
            food=self.food,
            max_food=self.max_food,
            body_parts=self.body_parts,
            traits=list(self.traits),
            carried_by=self.carried_by,
            carrying=self.carrying,
            in_bed=self.in_bed,
            stunned_until=self.stunned_until,
            next_act_at=self.next_act_at,
            move_ticks=self.move_ticks,
            anchor=self.anchor,
            path=list(self.path),
            path_goal=self.path_goal,
            territory=self.territory.copy() if self.territory else None,
        )
