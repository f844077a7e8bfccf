"""POST /api/v1/control/{action} and /speed — run, pause, step, and pace the simulation."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends, Query

from lairsim.api.dependencies import get_engine_manager
from lairsim.api.engine_manager import EngineManager
from lairsim.api.schemas import ControlResponse

router = APIRouter()


class ControlAction(str, Enum):
    start = "start"
    pause = "pause"
    resume = "resume"
    step = "step"
    reset = "reset"


def _tick(manager: EngineManager) -> int:
    snapshot = manager.get_snapshot()
    return snapshot.tick if snapshot else 0


def _reply(manager: EngineManager, status: str, message: str) -> ControlResponse:
    return ControlResponse(status=status, message=message, tick=_tick(manager))


@router.post("/control/{action}", response_model=ControlResponse)
def control(
    action: ControlAction,
    ticks: int = Query(1, ge=1, le=60000, description="Ticks to advance when stepping"),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    if action in (ControlAction.pause, ControlAction.resume) and not manager.running:
        return _reply(manager, "error", "Not running.")

    match action:
        case ControlAction.start:
            if manager.running:
                return _reply(manager, "noop", "Already running.")
            manager.start()
            return _reply(manager, "ok", "Simulation started.")

        case ControlAction.pause:
            manager.pause()
            return _reply(manager, "ok", "Simulation paused.")

        case ControlAction.resume:
            manager.resume()
            return _reply(manager, "ok", "Simulation resumed.")

        case ControlAction.step:
            if not manager.running:
                manager.start()
                manager.pause()
            manager.step(ticks)
            return _reply(manager, "ok", f"Stepping {ticks} tick(s).")

        case ControlAction.reset:
            manager.reset()
            return _reply(manager, "ok", "Simulation reset.")


@router.post("/speed", response_model=ControlResponse)
def set_speed(
    fps: float = Query(20.0, gt=0.5, le=100.0, description="Frames per second"),
    ticks_per_frame: int = Query(25, ge=1, le=1000, description="World ticks simulated per frame"),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    manager.tick_rate = 1.0 / fps
    manager.ticks_per_frame = ticks_per_frame
    day_fraction = manager.ticks_per_frame * fps / manager.config.ticks_per_day
    return _reply(
        manager,
        "ok",
        f"{fps:.1f} fps x {manager.ticks_per_frame} ticks ({day_fraction:.3f} days per second).",
    )
