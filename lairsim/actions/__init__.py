"""Action system: proposals handed from behavior handlers to the world loop."""

from lairsim.actions.base import ActionProposal

__all__ = ["ActionProposal"]
