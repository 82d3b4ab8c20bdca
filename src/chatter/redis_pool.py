"""Shared Redis client for the process.

The connection pool is created on first use, so processes running the
in-memory pub/sub never open a Redis connection.
"""

from __future__ import annotations

import redis.asyncio as redis

from .config import settings
from .logging import get_logger

logger = get_logger(__name__)

MAX_CONNECTIONS = 50

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    global _client
    if _client is None:
        pool = redis.ConnectionPool.from_url(
            settings.redis_url,
            decode_responses=True,
            max_connections=MAX_CONNECTIONS,
            socket_connect_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        _client = redis.Redis(connection_pool=pool)
        logger.info("Redis connection pool created", max_connections=MAX_CONNECTIONS)
    return _client


async def close_redis_pool() -> None:
    """Close the shared client and its pool (application shutdown)."""
    global _client
    if _client is None:
        return
    client, _client = _client, None
    await client.aclose()
    await client.connection_pool.disconnect()
    logger.info("Redis connection pool closed")
