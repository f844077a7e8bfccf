"""GET /api/v1/map — static grid data (fetch once)."""

from __future__ import annotations

from typing import Sequence

from fastapi import APIRouter, Depends, HTTPException

from lairsim.api.dependencies import get_engine_manager
from lairsim.api.engine_manager import EngineManager
from lairsim.api.schemas import MapResponse

router = APIRouter()


def run_length_encode(values: Sequence[int]) -> list[int]:
    """RLE encode: [value, count, value, count, ...]"""
    rle: list[int] = []
    if not values:
        return rle
    cur_val = int(values[0])
    cur_count = 1
    for v in values[1:]:
        v = int(v)
        if v == cur_val:
            cur_count += 1
        else:
            rle.append(cur_val)
            rle.append(cur_count)
            cur_val = v
            cur_count = 1
    rle.append(cur_val)
    rle.append(cur_count)
    return rle


@router.get("/map", response_model=MapResponse)
def get_map(manager: EngineManager = Depends(get_engine_manager)) -> MapResponse:
    grid = manager.get_grid()
    if grid is None:
        raise HTTPException(status_code=503, detail="Simulation not initialized yet.")

    return MapResponse(
        width=grid.width,
        height=grid.height,
        grid=run_length_encode(grid._tiles),
        roofs=run_length_encode(grid._roofs),
    )
