"""Tests for captivity progression.

Covers:
- Severity tracks the fraction of the threshold held
- Psychological trait and notification fire once, at the threshold
- Brood markers every sub-interval after the threshold, capped
- Markers land on the stomach when the captive has one
- Raiders and animals are not notified; animals get no trait
- The brood sub-interval is a fixed quarter day
- Missing content skips the dependent consequence
- Originator is the nearest free agent; collaborator flags the marker
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dataclasses import replace

from lairsim.captivity.progression import (
    BROOD_INTERVAL_DAYS,
    CaptivityProgress,
    CaptivityProgressionEngine,
    DefaultBroodCollaborator,
)
from lairsim.config import SimulationConfig
from lairsim.core.content import ContentDefs
from lairsim.core.effects import EffectType
from lairsim.core.enums import Category, TraitType
from lairsim.core.faction import Faction
from lairsim.core.grid import Grid
from lairsim.core.models import Entity, Vector2
from lairsim.core.world_state import WorldState
from lairsim.systems.spatial_hash import SpatialHash

STEP = 250


def _make_world() -> WorldState:
    return WorldState(seed=42, grid=Grid(40, 40), spatial_index=SpatialHash(8))


def _make_captive(**kwargs) -> Entity:
    return Entity(id=100, kind="colonist", pos=Vector2(20, 20), spawned=False, **kwargs)


def _engine(config: SimulationConfig | None = None, collaborator=None):
    cfg = config or SimulationConfig()
    events = []
    engine = CaptivityProgressionEngine(cfg, collaborator, notify=events.append)
    return engine, events


def _advance(engine, captive, world, steps: int) -> None:
    for _ in range(steps):
        engine.advance(captive, STEP, world, look_target=Vector2(20, 20))


def _markers(captive: Entity) -> list:
    return [e for e in captive.effects if e.effect_type == EffectType.BROOD_MARKER]


# ---------------------------------------------------------------------------
# Threshold
# ---------------------------------------------------------------------------

class TestThreshold:
    def test_severity_grows(self):
        world = _make_world()
        engine, _ = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 120)
        effect = captive.get_effect(EffectType.CAPTIVE)
        assert effect.progress.time_captive == 30000
        assert effect.severity == 0.5

    def test_nothing_before_threshold(self):
        world = _make_world()
        engine, events = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 239)
        assert not captive.has_trait(TraitType.ARACHNOPHOBE)
        assert events == []
        assert _markers(captive) == []

    def test_onset_at_threshold(self):
        world = _make_world()
        engine, events = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 240)
        state = engine.state_of(captive)
        assert state.psychological_effect_applied
        assert state.first_event_notified
        assert captive.has_trait(TraitType.ARACHNOPHOBE)
        assert len(events) == 1
        assert events[0].category == "notification"
        assert events[0].focus == (20, 20)
        assert _markers(captive) == []

    def test_first_marker_one_interval_after_onset(self):
        world = _make_world()
        engine, events = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 298)
        assert _markers(captive) == []
        _advance(engine, captive, world, 1)
        assert len(_markers(captive)) == 1
        assert len(events) == 1
        assert captive.traits.count(int(TraitType.ARACHNOPHOBE)) == 1

    def test_longer_threshold(self):
        world = _make_world()
        cfg = replace(SimulationConfig(), captivity_threshold_days=2.0)
        engine, events = _engine(cfg)
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 479)
        assert events == []
        _advance(engine, captive, world, 1)
        assert len(events) == 1

    def test_three_day_threshold_after_three_and_a_quarter_days(self):
        world = _make_world()
        cfg = replace(SimulationConfig(), captivity_threshold_days=3.0)
        engine, events = _engine(cfg)
        captive = _make_captive()
        engine.ensure_state(captive)
        # 3.25 days of coarse steps
        _advance(engine, captive, world, 780)
        assert engine.state_of(captive).time_captive == 195000
        assert len(_markers(captive)) == 1
        assert len(events) == 1

    def test_marker_cap(self):
        world = _make_world()
        engine, _ = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 240 + 60 * 10)
        assert len(_markers(captive)) == 6

    def test_sub_interval_is_fixed(self):
        engine, _ = _engine(replace(SimulationConfig(), captivity_threshold_days=2.0))
        assert BROOD_INTERVAL_DAYS == 0.25
        assert engine.brood_interval_ticks == 15000
        assert not hasattr(SimulationConfig(), "brood_interval_days")

    def test_zero_elapsed_is_noop(self):
        world = _make_world()
        engine, _ = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        engine.advance(captive, 0, world)
        assert engine.state_of(captive).time_captive == 0

    def test_no_state_without_captive_effect(self):
        world = _make_world()
        engine, _ = _engine()
        captive = _make_captive()
        engine.advance(captive, STEP, world)
        assert captive.effects == []


# ---------------------------------------------------------------------------
# Who gets what
# ---------------------------------------------------------------------------

class TestRecipients:
    def test_marker_on_stomach(self):
        world = _make_world()
        engine, _ = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 299)
        assert _markers(captive)[0].location == "stomach"

    def test_marker_whole_body_without_part(self):
        world = _make_world()
        engine, _ = _engine()
        captive = _make_captive(body_parts=("head", "torso"))
        engine.ensure_state(captive)
        _advance(engine, captive, world, 299)
        assert _markers(captive)[0].location is None

    def test_raider_not_notified(self):
        world = _make_world()
        engine, events = _engine()
        captive = _make_captive(faction=Faction.RAIDERS)
        engine.ensure_state(captive)
        _advance(engine, captive, world, 240)
        assert events == []
        assert engine.state_of(captive).first_event_notified

    def test_prisoner_notified(self):
        world = _make_world()
        engine, events = _engine()
        captive = _make_captive(faction=Faction.RAIDERS, prisoner=True)
        engine.ensure_state(captive)
        _advance(engine, captive, world, 240)
        assert len(events) == 1

    def test_colony_animal_not_notified(self):
        world = _make_world()
        engine, events = _engine()
        captive = _make_captive(category=Category.ANIMAL, faction=Faction.COLONY)
        engine.ensure_state(captive)
        _advance(engine, captive, world, 240)
        assert events == []
        assert engine.state_of(captive).first_event_notified

    def test_animal_gets_no_trait(self):
        world = _make_world()
        engine, _ = _engine()
        captive = _make_captive(category=Category.ANIMAL, faction=Faction.WILDLIFE)
        engine.ensure_state(captive)
        _advance(engine, captive, world, 299)
        assert captive.traits == []
        assert len(_markers(captive)) == 1


# ---------------------------------------------------------------------------
# Missing content
# ---------------------------------------------------------------------------

class TestMissingContent:
    def test_no_phobia_trait(self):
        world = _make_world()
        cfg = replace(SimulationConfig(), content=ContentDefs(phobia_trait=None))
        engine, events = _engine(cfg)
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 299)
        assert captive.traits == []
        assert len(events) == 1
        assert len(_markers(captive)) == 1

    def test_no_brood_marker(self):
        world = _make_world()
        cfg = replace(SimulationConfig(), content=ContentDefs(brood_marker_effect=None))
        engine, _ = _engine(cfg)
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 400)
        assert _markers(captive) == []

    def test_no_captive_effect(self):
        cfg = replace(SimulationConfig(), content=ContentDefs(captive_effect=None))
        engine, _ = _engine(cfg)
        captive = _make_captive()
        assert engine.ensure_state(captive) is None
        assert engine.state_of(captive) is None


# ---------------------------------------------------------------------------
# Originator and collaborator
# ---------------------------------------------------------------------------

class TestOriginator:
    def _world_with_agents(self) -> WorldState:
        world = _make_world()
        for eid, x in ((1, 35), (2, 24), (3, 21)):
            world.add_entity(Entity(id=eid, kind="arachnoid", pos=Vector2(x, 20), category=Category.ARACHNID))
        # Nearest one is downed and does not count
        world.entities[3].downed = True
        return world

    def test_nearest_free_agent(self):
        world = self._world_with_agents()
        engine, _ = _engine()
        assert engine.find_originator(_make_captive(), world).id == 2

    def test_collaborator_marks_marker(self):
        world = self._world_with_agents()
        engine, _ = _engine(collaborator=DefaultBroodCollaborator())
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 299)
        marker = _markers(captive)[0]
        assert marker.originator_id == 2
        assert marker.fertilized

    def test_without_collaborator_marker_not_fertilized(self):
        world = self._world_with_agents()
        engine, _ = _engine()
        captive = _make_captive()
        engine.ensure_state(captive)
        _advance(engine, captive, world, 299)
        marker = _markers(captive)[0]
        assert marker.originator_id == 2
        assert not marker.fertilized

    def test_no_agents(self):
        engine, _ = _engine(collaborator=DefaultBroodCollaborator())
        assert engine.find_originator(_make_captive(), _make_world()) is None


# ---------------------------------------------------------------------------
# State attachment
# ---------------------------------------------------------------------------

class TestEnsureState:
    def test_reuses_existing_progress(self):
        engine, _ = _engine()
        captive = _make_captive()
        first = engine.ensure_state(captive)
        first.time_captive = 500
        second = engine.ensure_state(captive)
        assert second is first
        assert captive.count_effects(EffectType.CAPTIVE) == 1

    def test_severity_capped(self):
        state = CaptivityProgress(time_captive=500000)
        assert state.severity(60000.0) == 1.0
