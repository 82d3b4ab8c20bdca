"""Request authentication for the REST endpoints and the GraphQL resolvers."""

from __future__ import annotations

from fastapi import Header, HTTPException

from ..database.connection import get_async_session
from ..logging import bind_user_id, get_logger
from .adapters.base import AuthenticationError
from .adapters.none import NoAuthAdapter
from .context import AuthContext
from .factory import get_auth_adapter_cached
from .provisioning import ensure_local_user

logger = get_logger(__name__)

BEARER = "Bearer "


def bearer_token(authorization: str) -> str:
    if not authorization.startswith(BEARER):
        logger.warning("Authorization header without Bearer scheme")
        raise AuthenticationError("Invalid authorization format. Expected: Bearer <token>")

    token = authorization[len(BEARER) :].strip()
    if not token:
        raise AuthenticationError("Empty token")
    return token


async def authenticate(authorization: str | None) -> AuthContext:
    """
    Resolve an ``Authorization`` header value to the local user.

    The token is verified by the configured adapter and the user row is
    provisioned on first sign-in. Without a header the request is anonymous;
    in no-auth mode it is the development user instead.

    Raises:
        AuthenticationError: If the header is malformed or the token is invalid
    """
    adapter = get_auth_adapter_cached()

    if not authorization:
        if not isinstance(adapter, NoAuthAdapter):
            return AuthContext.anonymous()
        authorization = f"{BEARER}dev-token"

    token = bearer_token(authorization)
    principal = await adapter.verify_token(token)

    async with get_async_session() as db:
        user_id = await ensure_local_user(db, principal)

    bind_user_id(str(user_id))
    logger.debug("Authenticated", provider=principal["provider"], subject=principal["subject"])
    return AuthContext(user_id=user_id, principal=principal, token=token)


async def get_auth_context(authorization: str | None = Header(None)) -> AuthContext:
    """FastAPI dependency; an invalid token is a 401."""
    try:
        return await authenticate(authorization)
    except AuthenticationError as e:
        logger.warning("Authentication failed", error=str(e))
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
