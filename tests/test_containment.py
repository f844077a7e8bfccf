"""Tests for the containment structure.

Covers:
- accept() takes the captive out of the world and attaches captivity state
- accept() refuses a dead target, a missing target, or an occupied slot
- release() puts the captive back with a short stagger
- destroy() releases first and removes the structure
- maintain() keeps the captive sustained and advances progression
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dataclasses import replace

from lairsim.captivity.containment import ContainmentStructure
from lairsim.captivity.progression import CaptivityProgressionEngine
from lairsim.config import SimulationConfig
from lairsim.core.content import ContentDefs
from lairsim.core.effects import EffectType
from lairsim.core.enums import Material, StructureKind
from lairsim.core.grid import Grid
from lairsim.core.models import Entity, Injury, Stats, Vector2
from lairsim.core.world_state import WorldState
from lairsim.systems.spatial_hash import SpatialHash


def _make_world() -> WorldState:
    return WorldState(seed=42, grid=Grid(40, 40), spatial_index=SpatialHash(8))


def _make_captive(world: WorldState, pos: Vector2 = Vector2(20, 20), **kwargs) -> Entity:
    e = Entity(id=world.allocate_entity_id(), kind="colonist", pos=pos, downed=True, **kwargs)
    world.add_entity(e)
    return e


def _make_containment(world: WorldState, pos: Vector2 = Vector2(20, 20)) -> ContainmentStructure:
    c = ContainmentStructure.build(world.allocate_structure_id(), pos, built_by=99)
    world.add_structure(c)
    return c


# ---------------------------------------------------------------------------
# Accept
# ---------------------------------------------------------------------------

class TestAccept:
    def test_accept_removes_from_world(self):
        world = _make_world()
        cfg = SimulationConfig()
        captive = _make_captive(world)
        captive.food = 0.2
        c = _make_containment(world)

        assert c.accept(captive, world, CaptivityProgressionEngine(cfg))
        assert captive.id not in world.entities
        assert captive.spawned is False
        assert c.occupant is captive
        assert c.occupied
        assert c.kind == StructureKind.CONTAINMENT
        assert captive.food == captive.max_food

    def test_accept_attaches_captive_effect(self):
        world = _make_world()
        cfg = SimulationConfig()
        captive = _make_captive(world)
        c = _make_containment(world)
        c.accept(captive, world, CaptivityProgressionEngine(cfg))

        effect = captive.get_effect(EffectType.CAPTIVE)
        assert effect is not None
        assert effect.progress is not None
        assert effect.progress.time_captive == 0

    def test_accept_tends_bleeding_wounds(self):
        world = _make_world()
        captive = _make_captive(world)
        captive.injuries.append(Injury(part="left_leg", bleeding=True))
        c = _make_containment(world)
        c.accept(captive, world, CaptivityProgressionEngine(SimulationConfig()))
        assert all(i.tended for i in captive.injuries)

    def test_accept_clears_carrier(self):
        world = _make_world()
        carrier = Entity(id=world.allocate_entity_id(), kind="arachnoid", pos=Vector2(20, 20))
        world.add_entity(carrier)
        captive = _make_captive(world)
        carrier.carrying = captive.id
        captive.carried_by = carrier.id
        c = _make_containment(world)

        assert c.accept(captive, world, CaptivityProgressionEngine(SimulationConfig()))
        assert carrier.carrying is None
        assert captive.carried_by is None

    def test_occupied_refuses_second(self):
        world = _make_world()
        progression = CaptivityProgressionEngine(SimulationConfig())
        first = _make_captive(world)
        second = _make_captive(world)
        c = _make_containment(world)

        assert c.accept(first, world, progression)
        assert not c.accept(second, world, progression)
        assert c.occupant is first
        assert second.id in world.entities
        assert second.spawned

    def test_dead_or_missing_refused(self):
        world = _make_world()
        progression = CaptivityProgressionEngine(SimulationConfig())
        c = _make_containment(world)
        dead = _make_captive(world, stats=Stats(hp=0, max_hp=100))

        assert not c.accept(None, world, progression)
        assert not c.accept(dead, world, progression)
        assert not c.occupied
        assert dead.id in world.entities

    def test_accept_without_captive_content(self):
        world = _make_world()
        cfg = replace(SimulationConfig(), content=ContentDefs(captive_effect=None))
        captive = _make_captive(world)
        c = _make_containment(world)

        assert c.accept(captive, world, CaptivityProgressionEngine(cfg))
        assert captive.effects == []


# ---------------------------------------------------------------------------
# Release / destroy
# ---------------------------------------------------------------------------

class TestRelease:
    def _sealed(self, downed: bool = False):
        world = _make_world()
        cfg = SimulationConfig()
        captive = _make_captive(world)
        c = _make_containment(world)
        c.accept(captive, world, CaptivityProgressionEngine(cfg))
        captive.downed = downed
        world.tick = 1000
        return world, cfg, captive, c

    def test_release_at_interaction_cell(self):
        world, cfg, captive, c = self._sealed()
        released = c.release(world, cfg)

        assert released is captive
        assert captive.pos == Vector2(20, 21)
        assert captive.spawned
        assert captive.id in world.entities
        assert not c.occupied
        assert not captive.has_effect(EffectType.CAPTIVE)

    def test_release_staggers_conscious_captive(self):
        world, cfg, captive, c = self._sealed()
        c.release(world, cfg)
        assert captive.stunned_until == 1000 + cfg.release_stagger_ticks

    def test_release_leaves_downed_captive_unstaggered(self):
        world, cfg, captive, c = self._sealed(downed=True)
        c.release(world, cfg)
        assert captive.stunned_until == 0

    def test_release_falls_back_when_interaction_cell_blocked(self):
        world, cfg, captive, c = self._sealed()
        world.grid.set(Vector2(20, 21), Material.ROCK)
        c.release(world, cfg)
        assert captive.pos == Vector2(20, 20)

    def test_release_empty_is_noop(self):
        world = _make_world()
        c = _make_containment(world)
        assert c.release(world, SimulationConfig()) is None

    def test_destroy_releases_and_removes(self):
        world, cfg, captive, c = self._sealed()
        released = c.destroy(world, cfg)
        assert released is captive
        assert c.structure_id not in world.structures
        assert captive.id in world.entities

    def test_destroy_empty(self):
        world = _make_world()
        c = _make_containment(world)
        assert c.destroy(world, SimulationConfig()) is None
        assert c.structure_id not in world.structures


# ---------------------------------------------------------------------------
# Upkeep
# ---------------------------------------------------------------------------

class TestMaintain:
    def test_maintain_advances_progression(self):
        world = _make_world()
        cfg = SimulationConfig()
        progression = CaptivityProgressionEngine(cfg)
        captive = _make_captive(world)
        c = _make_containment(world)
        c.accept(captive, world, progression)

        captive.food = 0.1
        c.maintain(world, progression, 250)
        state = progression.state_of(captive)
        assert state.time_captive == 250
        assert captive.food == captive.max_food

    def test_maintain_empty_does_nothing(self):
        world = _make_world()
        c = _make_containment(world)
        c.maintain(world, CaptivityProgressionEngine(SimulationConfig()), 250)
        assert not c.occupied

    def test_copy_is_independent(self):
        world = _make_world()
        progression = CaptivityProgressionEngine(SimulationConfig())
        captive = _make_captive(world)
        c = _make_containment(world)
        c.accept(captive, world, progression)

        snap = c.copy()
        c.maintain(world, progression, 250)
        assert snap.occupant is not captive
        assert snap.occupant.get_effect(EffectType.CAPTIVE).progress.time_captive == 0
        assert snap.built_by == 99
