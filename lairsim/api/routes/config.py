"""GET /api/v1/config — expose simulation configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lairsim.api.dependencies import get_engine_manager
from lairsim.api.engine_manager import EngineManager
from lairsim.api.schemas import SimulationConfigResponse
from lairsim.captivity.progression import BROOD_INTERVAL_DAYS

router = APIRouter()


@router.get("/config", response_model=SimulationConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> SimulationConfigResponse:
    cfg = manager.config
    return SimulationConfigResponse(
        world_seed=cfg.world_seed,
        grid_width=cfg.grid_width,
        grid_height=cfg.grid_height,
        max_ticks=cfg.max_ticks,
        ticks_per_day=cfg.ticks_per_day,
        coarse_interval=cfg.coarse_interval,
        num_agents=cfg.num_agents,
        num_hatchlings=cfg.num_hatchlings,
        territory_default_radius=cfg.territory_default_radius,
        hunt_cooldown_ticks=cfg.hunt_cooldown_ticks,
        failed_hunt_cooldown_ticks=cfg.failed_hunt_cooldown_ticks,
        hunt_timeout_ticks=cfg.hunt_timeout_ticks,
        hunt_range_multiplier=cfg.hunt_range_multiplier,
        hunt_search_distance=cfg.hunt_search_distance,
        hunt_abort_distance=cfg.hunt_abort_distance,
        captivity_threshold_days=cfg.captivity_threshold_days,
        brood_interval_days=BROOD_INTERVAL_DAYS,
        max_brood_markers=cfg.max_brood_markers,
        tick_rate=manager.tick_rate,
        ticks_per_frame=manager.ticks_per_frame,
    )
