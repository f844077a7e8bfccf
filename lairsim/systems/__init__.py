"""Engine systems: RNG, spatial indexing, reachability, world and agent generation."""

from lairsim.systems.rng import DeterministicRNG
from lairsim.systems.spatial_hash import SpatialHash

__all__ = ["DeterministicRNG", "SpatialHash"]
