"""Base action proposal — the universal currency between AI and World."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lairsim.core.enums import ActionType


@dataclass(frozen=True, slots=True)
class ActionProposal:
    """An intent produced by a behavior handler.

    The WorldLoop validates and applies (or rejects) each proposal.
    For WAIT, ``target`` is the number of ticks to wait; for MOVE it is the
    destination cell; for CARRY and DEPOSIT it is the carried entity id.
    """

    actor_id: int
    verb: ActionType
    target: Any = None
    reason: str = ""

    def __repr__(self) -> str:
        return f"Proposal(entity={self.actor_id}, {self.verb.name}, target={self.target}, reason={self.reason!r})"
