"""GET /api/v1/state — dynamic entity, structure & event data (polled by UI)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Query

from lairsim.api.dependencies import get_engine_manager
from lairsim.api.engine_manager import EngineManager
from lairsim.api.schemas import (
    EffectSchema,
    EntitySchema,
    EventSchema,
    StructureSchema,
    WorldStateResponse,
)
from lairsim.core.enums import TraitType

if TYPE_CHECKING:
    from lairsim.core.models import Entity
    from lairsim.utils.event_log import SimEvent

router = APIRouter()


def _trait_name(value: int) -> str:
    try:
        return TraitType(value).name.lower()
    except ValueError:
        return str(value)


def serialize_entity(e: Entity, tick: int) -> EntitySchema:
    return EntitySchema(
        id=e.id,
        kind=e.kind,
        x=e.pos.x,
        y=e.pos.y,
        hp=e.stats.hp,
        max_hp=e.stats.max_hp,
        faction=e.faction.name.lower(),
        category=e.category.name.lower(),
        downed=e.downed,
        carried_by=e.carried_by,
        stunned=e.is_stunned(tick),
        traits=[_trait_name(t) for t in e.traits],
        active_effects=[
            EffectSchema(
                effect_type=eff.effect_type.name,
                severity=eff.severity,
                location=eff.location,
                source=eff.source,
                originator_id=eff.originator_id,
                fertilized=eff.fertilized,
            )
            for eff in e.effects
        ],
    )


def serialize_event(ev: SimEvent) -> EventSchema:
    return EventSchema(
        tick=ev.tick,
        category=ev.category,
        message=ev.message,
        entity_ids=list(ev.entity_ids),
        focus_x=ev.focus[0] if ev.focus else None,
        focus_y=ev.focus[1] if ev.focus else None,
    )


@router.get("/state", response_model=WorldStateResponse)
def get_state(
    since_tick: int = Query(0, ge=0, description="Only return events since this tick"),
    manager: EngineManager = Depends(get_engine_manager),
) -> WorldStateResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")

    entities = [serialize_entity(e, snapshot.tick) for _, e in sorted(snapshot.entities.items())]
    structures = [
        StructureSchema(
            structure_id=s.structure_id,
            kind=s.kind.name.lower(),
            x=s.pos.x,
            y=s.pos.y,
            player_owned=s.player_owned,
        )
        for s in snapshot.structures
    ]
    events = [serialize_event(ev) for ev in manager.event_log.since_tick(since_tick)]
    return WorldStateResponse(
        tick=snapshot.tick,
        day=snapshot.tick / manager.config.ticks_per_day,
        entities=entities,
        structures=structures,
        events=events,
        running=manager.running,
        paused=manager.paused,
    )
