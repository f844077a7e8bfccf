"""GET /api/v1/agents — territorial agents and their event history; POST debug hooks."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Query

from lairsim.api.dependencies import get_engine_manager
from lairsim.api.engine_manager import EngineManager
from lairsim.api.routes.state import serialize_entity, serialize_event
from lairsim.api.schemas import AgentSchema, ControlResponse, EventSchema, TerritorySchema

if TYPE_CHECKING:
    from lairsim.core.models import Entity

router = APIRouter()


class DebugAction(str, Enum):
    reset_cooldown = "reset-cooldown"
    force_defend = "force-defend"


def serialize_agent(agent: Entity, tick: int) -> AgentSchema:
    rec = agent.territory
    base = serialize_entity(agent, tick)
    return AgentSchema(
        **base.model_dump(),
        carrying=agent.carrying,
        territory=TerritorySchema(
            mode=rec.mode.name,
            home_x=rec.home.x if rec.home else None,
            home_y=rec.home.y if rec.home else None,
            radius=rec.radius,
            cooldown_until=rec.cooldown_until,
            cooldown_remaining=max(0, rec.cooldown_until - tick),
            hunt_started_at=rec.hunt_started_at,
            target_id=rec.target_id,
            drop_x=rec.drop_cell.x if rec.drop_cell else None,
            drop_y=rec.drop_cell.y if rec.drop_cell else None,
        ),
    )


@router.get("/agents", response_model=list[AgentSchema])
def list_agents(manager: EngineManager = Depends(get_engine_manager)) -> list[AgentSchema]:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")
    return [serialize_agent(a, snapshot.tick) for a in snapshot.agents()]


@router.get("/agents/{agent_id}", response_model=AgentSchema)
def get_agent(agent_id: int, manager: EngineManager = Depends(get_engine_manager)) -> AgentSchema:
    try:
        agent = manager.agent_detail(agent_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No agent with id {agent_id}.")
    snapshot = manager.get_snapshot()
    return serialize_agent(agent, snapshot.tick if snapshot else 0)


@router.get("/agents/{agent_id}/events", response_model=list[EventSchema])
def agent_events(
    agent_id: int,
    limit: int = Query(50, ge=1, le=500, description="Most recent events to return"),
    manager: EngineManager = Depends(get_engine_manager),
) -> list[EventSchema]:
    try:
        manager.agent_detail(agent_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No agent with id {agent_id}.")
    return [serialize_event(ev) for ev in manager.event_log.for_entity(agent_id, limit)]


@router.post("/agents/{agent_id}/debug/{action}", response_model=ControlResponse)
def agent_debug(
    agent_id: int,
    action: DebugAction,
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    try:
        match action:
            case DebugAction.reset_cooldown:
                tick = manager.debug_reset_cooldown(agent_id)
                return ControlResponse(status="ok", message=f"Agent {agent_id} cooldown cleared.", tick=tick)
            case DebugAction.force_defend:
                tick = manager.debug_force_defend(agent_id)
                return ControlResponse(status="ok", message=f"Agent {agent_id} forced to DEFEND.", tick=tick)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No agent with id {agent_id}.")
