"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lairsim import __version__
from lairsim.api.dependencies import set_engine_manager
from lairsim.api.engine_manager import EngineManager
from lairsim.api.routes import api_router
from lairsim.config import SimulationConfig
from lairsim.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: SimulationConfig | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = SimulationConfig()

    _config = config.sanitized()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = EngineManager(_config)
        set_engine_manager(manager)
        manager.start()
        logger.info("API server started — simulation running.")
        yield
        manager.stop()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Lair Simulation Engine",
        description=(
            "Territorial predator simulation — inspection and control API.\n\n"
            "## API Groups\n\n"
            "- **State** — Live simulation state: entities, structures, events\n"
            "- **Agents** — Territorial agents: mode, home, target, debug hooks\n"
            "- **Containments** — Occupied cocoons, captivity progress, release\n"
            "- **Map** — Static grid data (fetch once at startup)\n"
            "- **Control** — Simulation lifecycle: start, pause, resume, step, reset\n"
            "- **Config** — Read-only simulation configuration\n"
        ),
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live simulation state: entities, structures, and the event feed."},
            {"name": "Agents", "description": "Territorial agents and their mode records, plus debug hooks."},
            {"name": "Containments", "description": "Containment structures, their captives, and captivity progress."},
            {"name": "Map", "description": "Static grid/map data. The tile layout does not change during a run."},
            {"name": "Control", "description": "Simulation lifecycle controls: start, pause, resume, single-step, and reset."},
            {"name": "Config", "description": "Read-only simulation configuration parameters."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app
