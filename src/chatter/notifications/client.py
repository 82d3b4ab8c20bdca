"""HTTP client for the Expo push gateway."""

from __future__ import annotations

import httpx

from ..config import Settings, settings
from ..logging import get_logger
from .models import ExpoMessage, ExpoPushTicket

logger = get_logger(__name__)


class PushDeliveryError(Exception):
    """Raised when the push gateway does not accept a message."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ExpoPushClient:
    """Sends push messages to the Expo push endpoint."""

    def __init__(
        self,
        config: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or settings
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self.config.push_timeout_seconds
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.config.expo_access_token:
            headers["Authorization"] = f"Bearer {self.config.expo_access_token}"
        return headers

    async def send(self, message: ExpoMessage) -> ExpoPushTicket:
        """Send one message and return the gateway's ticket.

        Raises:
            PushDeliveryError: If the gateway rejects the request or the message, or
                answers with a body that is not a push ticket
            httpx.TransportError: If the gateway cannot be reached
        """
        response = await self._http_client.post(
            self.config.expo_push_url,
            json=message.model_dump(exclude_none=True),
            headers=self._headers(),
        )

        if response.status_code >= 400:
            raise PushDeliveryError(
                f"Push gateway returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            data = body.get("data", {"status": "ok"}) if isinstance(body, dict) else body
            ticket = ExpoPushTicket.model_validate(data)
        except ValueError as e:
            raise PushDeliveryError(
                f"Unreadable push gateway response: {response.text[:200]}",
                status_code=response.status_code,
            ) from e

        if ticket.status != "ok":
            raise PushDeliveryError(
                f"Push message rejected: {ticket.message}", status_code=response.status_code
            )

        logger.debug("Push message accepted", ticket_id=ticket.id)
        return ticket

    async def aclose(self) -> None:
        await self._http_client.aclose()
