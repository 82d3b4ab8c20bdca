"""Process-local pub/sub backed by asyncio queues."""

from __future__ import annotations

import asyncio
from collections import defaultdict

from ..logging import get_logger
from .base import Payload, PubSub, Subscription

logger = get_logger(__name__)

_CLOSED = object()


class InMemorySubscription(Subscription):
    def __init__(self, topic: str, owner: InMemoryPubSub, max_queue_size: int):
        super().__init__(topic)
        self._owner = owner
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)

    def deliver(self, payload: Payload) -> None:
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("Dropping payload for slow subscriber", topic=self.topic)

    async def __anext__(self) -> Payload:
        if self.closed:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._owner._unregister(self)
        # Wake up a consumer blocked in __anext__
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass


class InMemoryPubSub(PubSub):
    """Pub/sub for a single process; every instance is an isolated broker."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscriptions: dict[str, set[InMemorySubscription]] = defaultdict(set)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, ()))

    async def publish(self, topic: str, payload: Payload) -> None:
        subscriptions = list(self._subscriptions.get(topic, ()))
        logger.debug("Publishing payload", topic=topic, subscribers=len(subscriptions))
        for subscription in subscriptions:
            subscription.deliver(payload)

    async def subscribe(self, topic: str) -> Subscription:
        subscription = InMemorySubscription(topic, self, self.max_queue_size)
        self._subscriptions[topic].add(subscription)
        return subscription

    def _unregister(self, subscription: InMemorySubscription) -> None:
        subscribers = self._subscriptions.get(subscription.topic)
        if subscribers is None:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscriptions[subscription.topic]

    async def close(self) -> None:
        for subscribers in list(self._subscriptions.values()):
            for subscription in list(subscribers):
                await subscription.aclose()
