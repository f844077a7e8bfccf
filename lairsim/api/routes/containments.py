"""GET /api/v1/containments — cocoons and their captives; POST release."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from lairsim.api.dependencies import get_engine_manager
from lairsim.api.engine_manager import EngineManager
from lairsim.api.routes.state import serialize_entity
from lairsim.api.schemas import CaptivitySchema, ContainmentSchema, ReleaseResponse
from lairsim.captivity.containment import ContainmentStructure

router = APIRouter()


@router.get("/containments", response_model=list[ContainmentSchema])
def list_containments(manager: EngineManager = Depends(get_engine_manager)) -> list[ContainmentSchema]:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")

    captive_effect = manager.config.content.captive_effect
    result: list[ContainmentSchema] = []
    for s in snapshot.structures:
        if not isinstance(s, ContainmentStructure):
            continue
        occupant = s.occupant
        captivity = None
        if occupant is not None and captive_effect is not None:
            effect = occupant.get_effect(captive_effect)
            if effect is not None and effect.progress is not None:
                p = effect.progress
                captivity = CaptivitySchema(
                    time_captive=p.time_captive,
                    time_since_last_event=p.time_since_last_event,
                    psychological_effect_applied=p.psychological_effect_applied,
                    first_event_notified=p.first_event_notified,
                )
        result.append(ContainmentSchema(
            structure_id=s.structure_id,
            x=s.pos.x,
            y=s.pos.y,
            built_by=s.built_by,
            occupant=serialize_entity(occupant, snapshot.tick) if occupant else None,
            captivity=captivity,
        ))
    return result


@router.post("/containments/{structure_id}/release", response_model=ReleaseResponse)
def release_containment(
    structure_id: int,
    manager: EngineManager = Depends(get_engine_manager),
) -> ReleaseResponse:
    try:
        captive = manager.release_containment(structure_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No containment with id {structure_id}.")
    snapshot = manager.get_snapshot()
    tick = snapshot.tick if snapshot else 0
    if captive is None:
        return ReleaseResponse(status="noop", message="Containment is empty.", tick=tick)
    return ReleaseResponse(
        status="ok",
        message=f"{captive.kind} #{captive.id} released.",
        captive_id=captive.id,
        tick=tick,
    )
