"""EngineManager — singleton wrapper that runs the WorldLoop on a background thread.

The API reads from an atomically-swapped immutable Snapshot. The WorldLoop
mutates WorldState on its own thread; the few API commands that mutate the
world (debug hooks, releasing a captive) take the world lock, which the
loop holds for every tick batch.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

from lairsim.ai.brain import AIBrain
from lairsim.ai.controller import TerritoryController
from lairsim.captivity.containment import ContainmentStructure
from lairsim.captivity.progression import CaptivityProgressionEngine, DefaultBroodCollaborator
from lairsim.core.faction import FactionRegistry
from lairsim.core.snapshot import Snapshot
from lairsim.engine.world_loop import WorldLoop
from lairsim.systems.rng import DeterministicRNG
from lairsim.systems.world_builder import build_world
from lairsim.utils.event_log import RELEASE, EventLog, SimEvent

if TYPE_CHECKING:
    from lairsim.config import SimulationConfig
    from lairsim.core.grid import Grid
    from lairsim.core.models import Entity

logger = logging.getLogger(__name__)


class EngineManager:
    """Manages the simulation lifecycle on a background thread.

    Provides thread-safe access to:
      - latest snapshot (atomic reference swap)
      - event log (lock-guarded ring buffer)
      - control commands (start / pause / resume / step / reset)
      - debug commands on agents and containments
    """

    def __init__(self, config: SimulationConfig) -> None:
        self._config = config
        self.config = config
        self._tick_rate: float = 0.05       # seconds between frames
        self._ticks_per_frame: int = 25     # world ticks simulated per frame

        # Simulation components (built in _build)
        self._rng: DeterministicRNG | None = None
        self._loop: WorldLoop | None = None
        self._controller: TerritoryController | None = None

        # Thread-safe shared state
        self._snapshot_lock = threading.Lock()
        self._world_lock = threading.RLock()
        self._latest_snapshot: Snapshot | None = None
        self._event_log = EventLog()

        # Control
        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._step_requested = threading.Event()
        self._step_ticks: int = 1
        self._stop_requested = threading.Event()

        self._build()

    # -- public properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: float) -> None:
        self._tick_rate = max(0.01, min(value, 2.0))

    @property
    def ticks_per_frame(self) -> int:
        return self._ticks_per_frame

    @ticks_per_frame.setter
    def ticks_per_frame(self, value: int) -> None:
        self._ticks_per_frame = max(1, min(int(value), self._config.coarse_interval * 4))

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    # -- snapshot access --

    def get_snapshot(self) -> Snapshot | None:
        with self._snapshot_lock:
            return self._latest_snapshot

    def get_grid(self) -> Grid | None:
        """Return the grid from the latest snapshot (static data)."""
        snap = self.get_snapshot()
        return snap.grid if snap else None

    # -- lifecycle --

    def start(self) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        self._paused.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="engine-loop", daemon=True)
        self._thread.start()
        logger.info("EngineManager started (tick_rate=%.3fs, %d ticks/frame)", self._tick_rate, self._ticks_per_frame)

    def pause(self) -> None:
        self._paused.set()
        logger.info("EngineManager paused at tick %d", self._current_tick())

    def resume(self) -> None:
        self._paused.clear()
        logger.info("EngineManager resumed at tick %d", self._current_tick())

    def step(self, ticks: int = 1) -> None:
        """Advance exactly *ticks* ticks, then stay paused."""
        if not self._paused.is_set():
            self.pause()
        self._step_ticks = max(1, min(int(ticks), self._config.ticks_per_day))
        self._step_requested.set()

    def stop(self) -> None:
        self._stop_requested.set()
        self._paused.clear()
        self._running.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        logger.info("EngineManager stopped.")

    def reset(self) -> None:
        """Stop, rebuild, and leave in paused state ready to start."""
        self.stop()
        self._event_log.clear()
        self._build()
        logger.info("EngineManager reset.")

    # -- agent / containment commands --

    def agent_detail(self, agent_id: int) -> Entity:
        """Agent from the latest snapshot. Raises KeyError for unknown ids."""
        snap = self.get_snapshot()
        agent = snap.entities.get(agent_id) if snap else None
        if agent is None or agent.territory is None:
            raise KeyError(agent_id)
        return agent

    def debug_reset_cooldown(self, agent_id: int) -> int:
        """Clear the agent's hunt cooldown. Returns the current tick."""
        with self._world_lock:
            world = self._loop.world
            agent = self._live_agent(agent_id)
            self._controller.force_reset_cooldown(agent, world)
            self._publish_snapshot()
            return world.tick

    def debug_force_defend(self, agent_id: int) -> int:
        """Drop the agent back to DEFEND with no cooldown change. Returns the current tick."""
        with self._world_lock:
            world = self._loop.world
            agent = self._live_agent(agent_id)
            self._controller.force_defend(agent, world)
            self._publish_snapshot()
            return world.tick

    def release_containment(self, structure_id: int) -> Entity | None:
        """Open a containment. Raises KeyError when no such containment exists."""
        with self._world_lock:
            world = self._loop.world
            structure = world.structures.get(structure_id)
            if not isinstance(structure, ContainmentStructure):
                raise KeyError(structure_id)
            captive = structure.release(world, self._config)
            if captive is not None:
                self._event_log.append(SimEvent(
                    tick=world.tick,
                    category=RELEASE,
                    message=f"{captive.kind} #{captive.id} released from containment {structure_id}",
                    entity_ids=(captive.id,),
                    focus=(captive.pos.x, captive.pos.y),
                ))
            self._publish_snapshot()
            return captive.copy() if captive else None

    def _live_agent(self, agent_id: int) -> Entity:
        agent = self._loop.world.entities.get(agent_id)
        if agent is None or agent.territory is None:
            raise KeyError(agent_id)
        return agent

    # -- internals --

    def _build(self) -> None:
        cfg = self._config
        self._rng = DeterministicRNG(cfg.world_seed)
        faction_reg = FactionRegistry.default()

        world = build_world(cfg, self._rng, notify=self._event_log.append)
        self._controller = TerritoryController(cfg, self._rng, faction_reg)
        progression = CaptivityProgressionEngine(cfg, DefaultBroodCollaborator())
        brain = AIBrain(cfg, self._rng, self._controller, world, faction_reg)

        self._loop = WorldLoop(
            config=cfg, world=world, brain=brain,
            controller=self._controller, progression=progression,
        )

        # Initial snapshot
        snap = self._loop.create_snapshot()
        with self._snapshot_lock:
            self._latest_snapshot = snap

    def _run_loop(self) -> None:
        """Background thread main loop."""
        logger.info("Engine thread started.")
        assert self._loop is not None

        while not self._stop_requested.is_set():
            # Handle pause
            if self._paused.is_set() and not self._step_requested.is_set():
                time.sleep(0.01)
                continue

            single_step = self._step_requested.is_set()
            if single_step:
                self._step_requested.clear()

            can_continue = True
            events: list[SimEvent] = []
            with self._world_lock:
                for _ in range(self._step_ticks if single_step else self._ticks_per_frame):
                    can_continue = self._loop.tick_once()
                    events.extend(self._loop.tick_events)
                    if not can_continue:
                        break
                self._event_log.append_many(events)
                self._publish_snapshot()

            if not can_continue:
                logger.info("Simulation ended at tick %d.", self._loop.world.tick)
                break

            # Rate limiting
            if not single_step:
                time.sleep(self._tick_rate)

        self._running.clear()
        logger.info("Engine thread exited.")

    def _publish_snapshot(self) -> None:
        """Swap in a fresh snapshot of the world."""
        assert self._loop is not None
        snap = self._loop.create_snapshot()
        with self._snapshot_lock:
            self._latest_snapshot = snap

    def _current_tick(self) -> int:
        if self._loop:
            return self._loop.world.tick
        return 0
