"""Pub/sub interface shared by the in-memory and Redis transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from typing import Any

Payload = dict[str, Any]


class Subscription(ABC):
    """A live subscription to one topic.

    Iterating yields payloads in delivery order. Only payloads published after
    the subscription was created are delivered. Always close the subscription
    (``aclose()`` or ``async with``) to release it.
    """

    def __init__(self, topic: str):
        self.topic = topic
        self.closed = False

    def __aiter__(self) -> Subscription:
        return self

    @abstractmethod
    async def __anext__(self) -> Payload: ...

    @abstractmethod
    async def aclose(self) -> None: ...

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class PubSub(ABC):
    """Broadcast transport: every subscriber of a topic sees every payload."""

    @abstractmethod
    async def publish(self, topic: str, payload: Payload) -> None:
        """Publish a JSON-serializable payload to all current subscribers of `topic`."""

    @abstractmethod
    async def subscribe(self, topic: str) -> Subscription:
        """Subscribe to `topic`. The subscription is active when this returns."""

    async def close(self) -> None:
        """Release transport resources."""


async def with_filter(
    subscription: Subscription, predicate: Callable[[Payload], bool]
) -> AsyncIterator[Payload]:
    """Yield only the payloads of `subscription` accepted by `predicate`.

    Closing the returned generator closes the subscription.
    """
    try:
        async for payload in subscription:
            if predicate(payload):
                yield payload
    finally:
        await subscription.aclose()
