"""Captivity progression — time-driven consequences of being held in a containment.

Each captive carries a ``CaptivityProgress`` on its CAPTIVE status effect.
Every advance adds elapsed ticks and recomputes the effect severity. Once
the captive has been held past the threshold:

  1. a permanent psychological trait is applied (humanlikes only, once);
  2. a "brood cycle begins" notification is sent (humanlike colony members
     and prisoners only, once);
  3. every sub-interval one brood marker is injected, up to a cap.

Brood-marker bookkeeping that other systems own (who laid it, whether it is
viable) goes through an optional ``BroodCollaborator``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol

from lairsim.core.effects import StatusEffect, brood_marker
from lairsim.core.enums import Category
from lairsim.core.faction import Faction
from lairsim.utils.event_log import NOTIFICATION, SimEvent

if TYPE_CHECKING:
    from lairsim.config import SimulationConfig
    from lairsim.core.models import Entity, Vector2
    from lairsim.core.world_state import WorldState

logger = logging.getLogger(__name__)

# Days between brood markers once the threshold is reached; not a player setting
BROOD_INTERVAL_DAYS = 0.25


@dataclass(slots=True)
class CaptivityProgress:
    """Accumulated captivity time and one-shot flags for one captive."""

    time_captive: int = 0
    time_since_last_event: int = 0
    psychological_effect_applied: bool = False
    first_event_notified: bool = False

    def severity(self, threshold_ticks: float) -> float:
        return min(1.0, self.time_captive / threshold_ticks)

    def copy(self) -> CaptivityProgress:
        return CaptivityProgress(
            time_captive=self.time_captive,
            time_since_last_event=self.time_since_last_event,
            psychological_effect_applied=self.psychological_effect_applied,
            first_event_notified=self.first_event_notified,
        )


class BroodCollaborator(Protocol):
    """Receives brood markers right after they are injected."""

    def initialize_originator(self, marker: StatusEffect, originator: Entity | None) -> None: ...

    def mark_fertilized(self, marker: StatusEffect) -> None: ...


class DefaultBroodCollaborator:
    """Records the originator on the marker and flags it as viable."""

    __slots__ = ()

    def initialize_originator(self, marker: StatusEffect, originator: Entity | None) -> None:
        marker.originator_id = originator.id if originator is not None else None

    def mark_fertilized(self, marker: StatusEffect) -> None:
        marker.fertilized = True


class CaptivityProgressionEngine:
    """Advances captivity state for captives; stateless apart from its wiring."""

    __slots__ = ("_config", "_collaborator", "_notify")

    def __init__(
        self,
        config: SimulationConfig,
        collaborator: BroodCollaborator | None = None,
        notify: Callable[[SimEvent], None] | None = None,
    ) -> None:
        self._config = config
        self._collaborator = collaborator
        self._notify = notify

    def bind_notifier(self, notify: Callable[[SimEvent], None] | None) -> None:
        self._notify = notify

    @property
    def brood_interval_ticks(self) -> int:
        return int(BROOD_INTERVAL_DAYS * self._config.ticks_per_day)

    # -- state attachment --

    def ensure_state(self, captive: Entity) -> CaptivityProgress | None:
        """Make sure the captive carries the CAPTIVE effect and its progress.

        Reuses an existing effect and its progress when present. Returns
        None when the captive effect is not part of the loaded content.
        """
        effect_type = self._config.content.captive_effect
        if effect_type is None:
            return None
        effect = captive.get_effect(effect_type)
        if effect is None:
            effect = StatusEffect(effect_type=effect_type, source="containment")
            captive.effects.append(effect)
        if effect.progress is None:
            effect.progress = CaptivityProgress()
        return effect.progress

    def state_of(self, captive: Entity) -> CaptivityProgress | None:
        effect_type = self._config.content.captive_effect
        if effect_type is None:
            return None
        effect = captive.get_effect(effect_type)
        return effect.progress if effect is not None else None

    # -- advancement --

    def advance(
        self,
        captive: Entity,
        elapsed: int,
        world: WorldState,
        look_target: Vector2 | None = None,
    ) -> None:
        """Add *elapsed* ticks of captivity and fire any due consequences."""
        if not captive.alive or elapsed <= 0:
            return
        cfg = self._config
        effect_type = cfg.content.captive_effect
        if effect_type is None:
            return
        effect = captive.get_effect(effect_type)
        if effect is None:
            return
        if effect.progress is None:
            effect.progress = CaptivityProgress()
        state = effect.progress

        threshold = cfg.captivity_threshold_ticks
        state.time_captive += elapsed
        effect.severity = state.severity(threshold)

        if state.time_captive < threshold:
            return

        if not state.psychological_effect_applied:
            self._apply_psychological_effect(captive)
            state.psychological_effect_applied = True

        if not state.first_event_notified:
            self._notify_brood_cycle(captive, world, look_target)
            state.first_event_notified = True

        state.time_since_last_event += elapsed
        if state.time_since_last_event >= self.brood_interval_ticks:
            state.time_since_last_event = 0
            self._inject_marker(captive, world)

    # -- consequences --

    def _apply_psychological_effect(self, captive: Entity) -> None:
        trait = self._config.content.phobia_trait
        if trait is None:
            logger.debug("No phobia trait loaded; skipping for entity %d", captive.id)
            return
        if captive.category != Category.HUMANLIKE or captive.has_trait(trait):
            return
        captive.traits.append(int(trait))
        logger.info("Entity %d gained trait %s after captivity", captive.id, trait.name)

    def _notify_brood_cycle(self, captive: Entity, world: WorldState, look_target: Vector2 | None) -> None:
        if captive.category != Category.HUMANLIKE:
            return
        if captive.faction != Faction.COLONY and not captive.prisoner:
            return
        if look_target is not None:
            focus: tuple[int, int] | None = (look_target.x, look_target.y)
        elif captive.spawned:
            focus = (captive.pos.x, captive.pos.y)
        else:
            focus = None
        event = SimEvent(
            tick=world.tick,
            category=NOTIFICATION,
            message=f"{captive.kind} #{captive.id}: brood cycle begins",
            entity_ids=(captive.id,),
            focus=focus,
        )
        logger.info("Tick %d: brood cycle begins for entity %d", world.tick, captive.id)
        if self._notify is not None:
            self._notify(event)

    def _inject_marker(self, captive: Entity, world: WorldState) -> StatusEffect | None:
        cfg = self._config
        marker_type = cfg.content.brood_marker_effect
        if marker_type is None:
            return None
        if captive.count_effects(marker_type) >= cfg.max_brood_markers:
            logger.debug("Entity %d already carries %d brood markers", captive.id, cfg.max_brood_markers)
            return None

        part = cfg.content.brood_body_part
        location = part if part is not None and captive.has_body_part(part) else None
        originator = self.find_originator(captive, world)

        marker = brood_marker(location, originator.id if originator else None, marker_type)
        captive.effects.append(marker)

        if self._collaborator is not None:
            self._collaborator.initialize_originator(marker, originator)
            self._collaborator.mark_fertilized(marker)

        logger.info(
            "Tick %d: brood marker %d/%d on entity %d (part=%s, originator=%s)",
            world.tick, captive.count_effects(marker_type), cfg.max_brood_markers,
            captive.id, location or "whole body", originator.id if originator else None,
        )
        return marker

    def find_originator(self, captive: Entity, world: WorldState) -> Entity | None:
        """Nearest free agent of the configured kind, measured from the captive's last position."""
        kind = self._config.content.agent_kind
        best: Entity | None = None
        best_dist = float("inf")
        for _, e in sorted(world.entities.items()):
            if e.kind != kind or not e.alive or not e.spawned or e.downed:
                continue
            d = captive.pos.distance_to(e.pos)
            if d < best_dist:
                best_dist = d
                best = e
        return best
