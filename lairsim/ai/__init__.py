"""AI layer: perception, site selection, mode control, and behavior handlers."""

from lairsim.ai.brain import AIBrain
from lairsim.ai.controller import TerritoryController
from lairsim.ai.perception import Perception
from lairsim.ai.site_selection import SiteSelector

__all__ = ["AIBrain", "Perception", "SiteSelector", "TerritoryController"]
