"""Simulation engine: the tick loop."""

from lairsim.engine.world_loop import WorldLoop

__all__ = ["WorldLoop"]
