"""Pub/sub transports injected into the GraphQL context."""

from __future__ import annotations

from ..config import Settings, settings
from .base import Payload, PubSub, Subscription, with_filter
from .memory import InMemoryPubSub
from .topics import USER_SIGNED_IN, USER_UPDATED


def create_pubsub(config: Settings | None = None) -> PubSub:
    """Create the pub/sub transport selected by `pubsub_backend`."""
    config = config or settings
    backend = config.pubsub_backend

    if backend == "memory":
        return InMemoryPubSub()
    elif backend == "redis":
        from .redis import RedisPubSub

        return RedisPubSub()
    else:
        raise ValueError(f"Unsupported pub/sub backend: {backend}")


__all__ = [
    "Payload",
    "PubSub",
    "Subscription",
    "InMemoryPubSub",
    "USER_SIGNED_IN",
    "USER_UPDATED",
    "create_pubsub",
    "with_filter",
]
