"""Simulation configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from lairsim.core.content import ContentDefs


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for the simulation run."""

    # World
    world_seed: int = 42
    grid_width: int = 160
    grid_height: int = 160

    # Timing
    ticks_per_day: int = 60000
    coarse_interval: int = 250             # Mode evaluation and containment upkeep cadence
    max_ticks: int = 240000

    # Spatial hash
    spatial_cell_size: int = 8

    # Pathfinding
    path_max_nodes: int = 6000

    # Population
    num_agents: int = 2
    num_hatchlings: int = 1                # Born next to an existing lair; adopt it
    num_colonists: int = 6
    num_raiders: int = 3
    num_wildlife: int = 4
    agent_move_ticks: int = 2
    bystander_move_ticks: int = 3
    bystander_wander_radius: int = 12

    # Territory
    territory_default_radius: int = 20

    # Hunt tuning
    hunt_cooldown_ticks: int = 120000
    failed_hunt_cooldown_divisor: int = 4
    hunt_timeout_ticks: int = 15000
    hunt_scan_interval: int = 500
    hunt_range_multiplier: float = 1.0     # Player setting, clamped to [0.5, 2.0]
    hunt_base_search_distance: int = 90    # Victim max distance from home (scaled)
    hunt_base_abort_distance: int = 130    # Victim abort distance from home (scaled)
    hunt_start_health: float = 0.75
    hunt_abort_health: float = 0.60
    victim_isolation_radius: int = 15
    victim_max_nearby_humanlikes: int = 2
    door_avoid_radius: int = 20
    turret_avoid_radius: int = 30
    abort_pause_min_ticks: int = 60
    abort_pause_max_ticks: int = 120

    # Combat awareness
    combat_recent_harm_ticks: int = 600
    combat_threat_radius: int = 25

    # Opportunistic capture
    capture_radius: int = 20
    capture_recent_harm_ticks: int = 1200

    # Approach and carry
    approach_min_range: int = 10
    approach_max_range: int = 18
    engage_range: int = 20
    engage_wait_ticks: int = 30
    drop_search_radius: int = 4
    home_return_fallback_radius: int = 6

    # Site selection
    site_samples: int = 500
    site_top_n: int = 20
    site_edge_min: int = 10
    site_edge_max: int = 75
    site_min_structure_distance: int = 10
    site_min_defense_distance: int = 50
    site_cluster_distance: int = 100
    site_cluster_penalty: int = 100
    site_density_radius: int = 4
    site_thin_roof_bonus: int = 30
    site_thick_roof_bonus: int = 10
    spawn_cell_tries: int = 25
    spawn_cell_radius: int = 5

    # Captivity
    captivity_threshold_days: float = 1.0  # Player setting, clamped to [0.5, 2.0]
    max_brood_markers: int = 6
    release_stagger_ticks: int = 180

    # Content
    content: ContentDefs = field(default_factory=ContentDefs)

    # Logging
    log_level: str = "INFO"
    replay_file: str = "replay.json"

    # -- derived values --

    @property
    def failed_hunt_cooldown_ticks(self) -> int:
        return self.hunt_cooldown_ticks // self.failed_hunt_cooldown_divisor

    @property
    def hunt_search_distance(self) -> int:
        return round(self.hunt_base_search_distance * self.hunt_range_multiplier)

    @property
    def hunt_abort_distance(self) -> int:
        return int(self.hunt_base_abort_distance * self.hunt_range_multiplier)

    @property
    def captivity_threshold_ticks(self) -> float:
        # Never below a tenth of a day
        return max(0.1, self.captivity_threshold_days) * self.ticks_per_day

    def sanitized(self) -> SimulationConfig:
        """Return a copy with player-facing settings clamped to their allowed range."""
        return replace(
            self,
            hunt_range_multiplier=_clamp(self.hunt_range_multiplier, 0.5, 2.0),
            captivity_threshold_days=_clamp(self.captivity_threshold_days, 0.5, 2.0),
        )
