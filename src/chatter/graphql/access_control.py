"""
Shared access control logic for GraphQL resolvers
"""

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry

from ..auth.adapters.base import AuthenticationError, AuthorizationError
from ..auth.context import AuthContext
from ..auth.middleware import authenticate
from ..logging import get_logger

if TYPE_CHECKING:
    from ..dbmodels import Messages

logger = get_logger(__name__)

_CONTEXT_KEY = "auth_context"


class NotFoundError(Exception):
    """Raised when a requested record does not exist."""


def _authorization_from_info(info: strawberry.Info) -> str | None:
    request = info.context.get("request")
    if request is not None:
        authorization = request.headers.get("authorization")
        if authorization:
            return authorization

    # Websocket clients send credentials in the connection_init payload
    params = info.context.get("connection_params") or {}
    if isinstance(params, dict):
        return params.get("authorization") or params.get("Authorization")
    return None


async def get_auth_context_from_info(info: strawberry.Info) -> AuthContext:
    """
    Extract auth context from GraphQL info object.

    The result is cached in the context, so a request is authenticated once no
    matter how many fields ask for it. Invalid credentials yield an
    unauthenticated context.
    """
    cached = info.context.get(_CONTEXT_KEY)
    if cached is not None:
        return cached

    try:
        auth_context = await authenticate(_authorization_from_info(info))
    except AuthenticationError as e:
        logger.info("GraphQL request with invalid credentials", error=str(e))
        auth_context = AuthContext.anonymous()

    info.context[_CONTEXT_KEY] = auth_context
    return auth_context


async def require_user_id(info: strawberry.Info) -> UUID:
    """Return the authenticated user's id or fail before any data access."""
    auth_context = await get_auth_context_from_info(info)
    if not auth_context.is_authenticated or auth_context.user_id is None:
        raise AuthorizationError("Authentication required")
    return auth_context.user_id


def parse_id(value: str | UUID, kind: str = "record") -> UUID:
    """Parse a GraphQL ID argument, treating malformed ids as unknown ones."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError(f"{kind.capitalize()} not found: {value}") from None


def ensure_sender(message: "Messages", user_id: UUID) -> None:
    if message.sender_id != user_id:
        logger.info(
            "Rejected change to another user's message",
            message_id=str(message.id),
            user_id=str(user_id),
        )
        raise AuthorizationError("Only the sender can modify this message")
