"""Notification sink: arrivals, mode transitions, captures, releases, brood notifications.

The world loop collects per-tick events and the engine manager appends them
here in one batch per frame. API readers get copies, filtered by tick,
category, or involved entity.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterable

# Categories used across the engine
MODE = "mode"
CAPTURE = "capture"
RELEASE = "release"
ARRIVAL = "arrival"
NOTIFICATION = "notification"


@dataclass(frozen=True, slots=True)
class SimEvent:
    """One entry of the event feed."""

    tick: int
    category: str
    message: str
    entity_ids: tuple[int, ...] = ()
    focus: tuple[int, int] | None = None    # Cell a viewer should look at, if any

    def involves(self, entity_id: int) -> bool:
        return entity_id in self.entity_ids


class EventLog:
    """Bounded, lock-guarded event feed; oldest entries fall off first."""

    __slots__ = ("_events", "_lock")

    def __init__(self, maxlen: int = 5000) -> None:
        self._events: deque[SimEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    # -- writers --

    def append(self, event: SimEvent) -> None:
        with self._lock:
            self._events.append(event)

    def append_many(self, events: Iterable[SimEvent]) -> None:
        with self._lock:
            self._events.extend(events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    # -- readers --

    def _select(self, keep: Callable[[SimEvent], bool]) -> list[SimEvent]:
        with self._lock:
            return [e for e in self._events if keep(e)]

    def since_tick(self, tick: int) -> list[SimEvent]:
        return self._select(lambda e: e.tick >= tick)

    def by_category(self, category: str) -> list[SimEvent]:
        return self._select(lambda e: e.category == category)

    def for_entity(self, entity_id: int, limit: int = 50) -> list[SimEvent]:
        """Most recent *limit* events involving *entity_id*, oldest first."""
        return self._select(lambda e: e.involves(entity_id))[-limit:]
