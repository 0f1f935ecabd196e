from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Set

from ..core.models import LiveMessage

logger = logging.getLogger(__name__)

_CLOSED = object()


class Subscription:
    """
    One observer's bounded inbox.

    Iterate with ``async for`` to receive messages in publish order. When the
    inbox is full the oldest undelivered message is dropped to make room, so a
    slow observer loses history instead of stalling the publisher.
    """

    def __init__(self, broadcaster: "Broadcaster", maxsize: int) -> None:
        self._broadcaster = broadcaster
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return self._queue.qsize()

    def _offer(self, item: object) -> bool:
        """Enqueue without blocking, evicting the oldest item if full."""
        dropped = False
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            self._queue.get_nowait()
            self._queue.put_nowait(item)
            dropped = True
        return dropped

    def deliver(self, message: LiveMessage) -> None:
        if self._closed:
            return
        if self._offer(message):
            self.dropped += 1

    async def get(self) -> LiveMessage:
        """Wait for the next message; raises StopAsyncIteration once closed."""
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def get_nowait(self) -> Optional[LiveMessage]:
        """Next message if one is waiting, else None."""
        try:
            item = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        return None if item is _CLOSED else item

    def drain(self) -> List[LiveMessage]:
        messages: List[LiveMessage] = []
        while True:
            message = self.get_nowait()
            if message is None:
                return messages
            messages.append(message)

    def close(self) -> None:
        """Stop receiving. Pipeline state is untouched."""
        if self._closed:
            return
        self._closed = True
        self._broadcaster.unsubscribe(self)
        # wake a pending get()
        self._offer(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> LiveMessage:
        return await self.get()

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class Broadcaster:
    """
    Fire-and-forget fan-out of live messages to every current subscriber.

    ``publish`` never awaits, so a slow or absent observer can never hold up
    the pipeline.
    """

    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._subscribers: Set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._queue_size)
        self._subscribers.add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscribers.discard(subscription)

    def publish(self, message: LiveMessage) -> int:
        """Deliver ``message`` to all subscribers; returns how many received it."""
        subscribers = list(self._subscribers)
        for subscription in subscribers:
            subscription.deliver(message)
        logger.debug("Published %s to %d subscriber(s)", message.kind, len(subscribers))
        return len(subscribers)
