"""Pub/sub over Redis channels, for deployments running several API processes."""

from __future__ import annotations

import json

import redis.asyncio as redis
from redis.asyncio.client import PubSub as RedisPubSubConnection

from ..logging import get_logger
from ..redis_pool import get_redis_client
from .base import Payload, PubSub, Subscription

logger = get_logger(__name__)


def channel_for(topic: str) -> str:
    return f"pubsub:{topic}"


class RedisSubscription(Subscription):
    def __init__(self, topic: str, connection: RedisPubSubConnection, poll_timeout: float):
        super().__init__(topic)
        self._connection = connection
        self._poll_timeout = poll_timeout

    async def __anext__(self) -> Payload:
        while not self.closed:
            msg = await self._connection.get_message(
                ignore_subscribe_messages=True, timeout=self._poll_timeout
            )
            if not msg or msg.get("type") != "message":
                continue
            try:
                return json.loads(msg["data"])
            except (TypeError, ValueError):
                logger.warning("Skipping malformed pub/sub payload", topic=self.topic)
        raise StopAsyncIteration

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        await self._connection.unsubscribe(channel_for(self.topic))
        await self._connection.aclose()
        logger.debug("Unsubscribed from Redis channel", topic=self.topic)


class RedisPubSub(PubSub):
    def __init__(self, client: redis.Redis | None = None, poll_timeout: float = 1.0):
        self._client = client or get_redis_client()
        self._poll_timeout = poll_timeout

    async def publish(self, topic: str, payload: Payload) -> None:
        data = json.dumps(payload, default=str)
        receivers = await self._client.publish(channel_for(topic), data)
        logger.debug("Published payload to Redis", topic=topic, receivers=receivers)

    async def subscribe(self, topic: str) -> Subscription:
        connection = self._client.pubsub()
        await connection.subscribe(channel_for(topic))
        logger.debug("Subscribed to Redis channel", topic=topic)
        return RedisSubscription(topic, connection, self._poll_timeout)
