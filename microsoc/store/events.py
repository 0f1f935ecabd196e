from __future__ import annotations

import asyncio
from collections import deque
from typing import Deque, List, Protocol

from ..core.models import Event


class EventStore(Protocol):
    """Append-only event storage collaborator."""

    async def append(self, event: Event) -> None:
        """Durably record ``event``; may raise PersistenceFailure."""
        ...

    async def recent(self, limit: int) -> List[Event]:
        """Newest-first slice of stored events."""
        ...

    async def prune(self, older_than: float) -> int:
        """Remove events with ``timestamp < older_than``; return how many."""
        ...

    async def purge(self) -> int:
        """Remove every event; return how many."""
        ...


class InMemoryEventStore:
    """
    Process-local EventStore backed by a deque in arrival order.

    Events arrive roughly in timestamp order, so pruning pops from the left
    until it meets a young enough event.
    """

    def __init__(self) -> None:
        self._events: Deque[Event] = deque()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._events)

    async def append(self, event: Event) -> None:
        async with self._lock:
            self._events.append(event)

    async def recent(self, limit: int) -> List[Event]:
        if limit <= 0:
            return []
        async with self._lock:
            newest = list(self._events)[-limit:]
        newest.reverse()
        return newest

    async def prune(self, older_than: float) -> int:
        removed = 0
        async with self._lock:
            while self._events and self._events[0].timestamp < older_than:
                self._events.popleft()
                removed += 1
        return removed

    async def purge(self) -> int:
        async with self._lock:
            removed = len(self._events)
            self._events.clear()
        return removed
