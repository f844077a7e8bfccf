"""AIBrain — dispatches each acting entity to its behavior handler.

Territorial agents run the handler for their current mode (see
``ai.states.MODE_HANDLERS``); mode transitions themselves happen on the
coarse cadence in the TerritoryController. Everyone else wanders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lairsim.ai.pathfinding import Pathfinder
from lairsim.ai.states import AIContext, BYSTANDER_HANDLER, MODE_HANDLERS
from lairsim.core.faction import FactionRegistry

if TYPE_CHECKING:
    from lairsim.actions.base import ActionProposal
    from lairsim.ai.controller import TerritoryController
    from lairsim.config import SimulationConfig
    from lairsim.core.models import Entity
    from lairsim.core.world_state import WorldState
    from lairsim.systems.rng import DeterministicRNG


class AIBrain:
    """Builds the handler context and picks the handler for an actor."""

    __slots__ = ("_config", "_rng", "_controller", "_faction_reg", "_pathfinder")

    def __init__(
        self,
        config: SimulationConfig,
        rng: DeterministicRNG,
        controller: TerritoryController,
        world: WorldState,
        faction_reg: FactionRegistry | None = None,
    ) -> None:
        self._config = config
        self._rng = rng
        self._controller = controller
        self._faction_reg = faction_reg or FactionRegistry.default()
        self._pathfinder = Pathfinder(world, config.path_max_nodes)

    def decide(self, actor: Entity, world: WorldState) -> ActionProposal:
        ctx = AIContext(
            actor=actor,
            world=world,
            config=self._config,
            rng=self._rng,
            controller=self._controller,
            pathfinder=self._pathfinder,
            faction_reg=self._faction_reg,
        )
        if actor.territory is None:
            return BYSTANDER_HANDLER.handle(ctx)
        return MODE_HANDLERS[actor.territory.mode].handle(ctx)
