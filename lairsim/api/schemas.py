"""Pydantic response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


# --- Entity ---

class EffectSchema(BaseModel):
    effect_type: str
    severity: float = 0.0
    location: str | None = None
    source: str = ""
    originator_id: int | None = None
    fertilized: bool = False


class CaptivitySchema(BaseModel):
    time_captive: int = 0
    time_since_last_event: int = 0
    psychological_effect_applied: bool = False
    first_event_notified: bool = False


class EntitySchema(BaseModel):
    id: int
    kind: str
    x: int
    y: int
    hp: int
    max_hp: int
    faction: str
    category: str
    downed: bool = False
    carried_by: int | None = None
    stunned: bool = False
    traits: list[str] = Field(default_factory=list)
    active_effects: list[EffectSchema] = Field(default_factory=list)


class TerritorySchema(BaseModel):
    mode: str
    home_x: int | None = None
    home_y: int | None = None
    radius: int
    cooldown_until: int = 0
    cooldown_remaining: int = 0
    hunt_started_at: int | None = None
    target_id: int | None = None
    drop_x: int | None = None
    drop_y: int | None = None


class AgentSchema(EntitySchema):
    territory: TerritorySchema
    carrying: int | None = None


# --- Map ---

class MapResponse(BaseModel):
    width: int
    height: int
    grid: list[int] = Field(description="Run-length encoded Material values: [value, count, value, count, ...]")
    roofs: list[int] = Field(default_factory=list, description="Run-length encoded RoofType values")


# --- Structures ---

class StructureSchema(BaseModel):
    structure_id: int
    kind: str
    x: int
    y: int
    player_owned: bool = False


class ContainmentSchema(BaseModel):
    structure_id: int
    x: int
    y: int
    built_by: int | None = None
    occupant: EntitySchema | None = None
    captivity: CaptivitySchema | None = None


class ReleaseResponse(BaseModel):
    status: str
    message: str
    captive_id: int | None = None
    tick: int = 0


# --- State ---

class EventSchema(BaseModel):
    tick: int
    category: str
    message: str
    entity_ids: list[int] = Field(default_factory=list)
    focus_x: int | None = None
    focus_y: int | None = None


class WorldStateResponse(BaseModel):
    tick: int
    day: float
    entities: list[EntitySchema]
    structures: list[StructureSchema] = Field(default_factory=list)
    events: list[EventSchema] = Field(default_factory=list)
    running: bool = False
    paused: bool = False


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int = 0


# --- Config ---

class SimulationConfigResponse(BaseModel):
    world_seed: int
    grid_width: int
    grid_height: int
    max_ticks: int
    ticks_per_day: int
    coarse_interval: int
    num_agents: int
    num_hatchlings: int
    territory_default_radius: int
    hunt_cooldown_ticks: int
    failed_hunt_cooldown_ticks: int
    hunt_timeout_ticks: int
    hunt_range_multiplier: float
    hunt_search_distance: int
    hunt_abort_distance: int
    captivity_threshold_days: float
    brood_interval_days: float
    max_brood_markers: int
    tick_rate: float
    ticks_per_frame: int
