"""Detached push fan-out."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from ..config import settings
from ..logging import get_logger
from .client import ExpoPushClient, PushDeliveryError
from .models import ExpoMessage

logger = get_logger(__name__)


@dataclass
class DispatchStats:
    sent: int = 0
    failed: int = 0


class PushDispatcher:
    """
    Sends push messages in background tasks so callers never wait on the gateway.

    Each message is sent independently; a failure is logged and counted and
    does not affect the other messages of the same fan-out.
    """

    def __init__(self, client: ExpoPushClient | None = None, enabled: bool | None = None):
        self._client = client
        self.enabled = settings.push_enabled if enabled is None else enabled
        self.stats = DispatchStats()
        self._tasks: set[asyncio.Task] = set()

    @property
    def client(self) -> ExpoPushClient:
        if self._client is None:
            self._client = ExpoPushClient()
        return self._client

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, messages: Sequence[ExpoMessage]) -> asyncio.Task | None:
        """Schedule the fan-out and return its task without awaiting it."""
        if not messages:
            return None
        if not self.enabled:
            logger.debug("Push disabled, skipping fan-out", count=len(messages))
            return None

        task = asyncio.create_task(self._send_all(list(messages)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _send_all(self, messages: list[ExpoMessage]) -> None:
        sent = failed = 0
        for message in messages:
            try:
                await self.client.send(message)
            except (PushDeliveryError, httpx.HTTPError) as e:
                failed += 1
                logger.warning("Push delivery failed", token=message.to, error=str(e))
            except Exception:
                failed += 1
                logger.exception("Unexpected error delivering push", token=message.to)
            else:
                sent += 1

        self.stats.sent += sent
        self.stats.failed += failed
        logger.info("Push fan-out finished", count=len(messages), sent=sent, failed=failed)

    async def drain(self) -> None:
        """Wait for every scheduled fan-out to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        if self._client is not None:
            await self._client.aclose()


_dispatcher: PushDispatcher | None = None


def get_push_dispatcher() -> PushDispatcher:
    """Process-wide dispatcher used when none is injected into the GraphQL context."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = PushDispatcher()
    return _dispatcher
