"""Token verification interface shared by the auth adapters."""

from __future__ import annotations

from typing import Literal, NotRequired, Protocol, TypedDict


class Principal(TypedDict):
    """The identity a bearer token vouches for.

    ``subject`` is stable per provider and, together with ``provider``, keys
    the local ``users`` row. The optional profile fields seed a new user.
    """

    provider: Literal["jwt", "none"]
    subject: str
    email: NotRequired[str]
    name: NotRequired[str]
    photo_url: NotRequired[str]
    claims: NotRequired[dict]


class AuthAdapter(Protocol):
    async def verify_token(self, token: str) -> Principal:
        """Return the principal of a valid token.

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        ...


class AuthenticationError(Exception):
    """The request carries credentials that cannot be verified."""


class AuthorizationError(Exception):
    """The request lacks the identity an operation needs."""
