"""Versioned API route modules."""

from fastapi import APIRouter

from lairsim.api.routes.agents import router as agents_router
from lairsim.api.routes.config import router as config_router
from lairsim.api.routes.containments import router as containments_router
from lairsim.api.routes.control import router as control_router
from lairsim.api.routes.map import router as map_router
from lairsim.api.routes.state import router as state_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(map_router, tags=["Map"])
api_router.include_router(state_router, tags=["State"])
api_router.include_router(agents_router, tags=["Agents"])
api_router.include_router(containments_router, tags=["Containments"])
api_router.include_router(control_router, tags=["Control"])
api_router.include_router(config_router, tags=["Config"])

__all__ = ["api_router"]
