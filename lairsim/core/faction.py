"""Faction system — data-driven relationships between entity groups.

Design:
  - Every entity belongs to exactly one Faction.
  - Relationships between factions are stored in a registry and looked up at
    runtime, so new factions can be added without touching AI code.
"""

from __future__ import annotations

from enum import IntEnum, unique


@unique
class Faction(IntEnum):
    """Named factions.  Extend this enum to add new groups."""

    COLONY = 0       # The player's settlement
    RAIDERS = 1
    WILDLIFE = 2
    ARACHNOIDS = 3


@unique
class FactionRelation(IntEnum):
    """How two factions regard each other."""

    ALLIED = 0
    NEUTRAL = 1
    HOSTILE = 2


class FactionRegistry:
    """Registry mapping faction pairs to relations and entity kinds to factions.

    Usage:
        reg = FactionRegistry.default()
        reg.relation(Faction.COLONY, Faction.ARACHNOIDS)   # → HOSTILE
        reg.is_hostile(agent.faction, other.faction)       # → bool
        reg.faction_for_kind("arachnoid")                  # → Faction.ARACHNOIDS
    """

    __slots__ = ("_relations", "_kind_map")

    def __init__(self) -> None:
        # (faction_a, faction_b) → FactionRelation  (order-independent)
        self._relations: dict[tuple[Faction, Faction], FactionRelation] = {}
        self._kind_map: dict[str, Faction] = {}

    # -- builders --

    def set_relation(self, a: Faction, b: Faction, rel: FactionRelation) -> None:
        self._relations[(a, b)] = rel
        self._relations[(b, a)] = rel

    def register_kind(self, kind: str, faction: Faction) -> None:
        self._kind_map[kind] = faction

    # -- queries --

    def relation(self, a: Faction, b: Faction) -> FactionRelation:
        if a == b:
            return FactionRelation.ALLIED
        return self._relations.get((a, b), FactionRelation.NEUTRAL)

    def is_hostile(self, a: Faction, b: Faction) -> bool:
        return self.relation(a, b) == FactionRelation.HOSTILE

    def faction_for_kind(self, kind: str) -> Faction | None:
        return self._kind_map.get(kind)

    # -- factory --

    @classmethod
    def default(cls) -> FactionRegistry:
        """Colony and raiders at war; arachnoids hostile to every humanlike group."""
        reg = cls()
        reg.set_relation(Faction.COLONY, Faction.RAIDERS, FactionRelation.HOSTILE)
        reg.set_relation(Faction.COLONY, Faction.ARACHNOIDS, FactionRelation.HOSTILE)
        reg.set_relation(Faction.RAIDERS, Faction.ARACHNOIDS, FactionRelation.HOSTILE)

        reg.register_kind("colonist", Faction.COLONY)
        reg.register_kind("raider", Faction.RAIDERS)
        reg.register_kind("deer", Faction.WILDLIFE)
        reg.register_kind("arachnoid", Faction.ARACHNOIDS)
        return reg
