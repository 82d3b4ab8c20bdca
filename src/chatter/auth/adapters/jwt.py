"""Bearer tokens signed with a shared secret."""

from __future__ import annotations

import jwt
from jwt.exceptions import InvalidTokenError

from ...logging import get_logger
from .base import AuthenticationError, Principal

logger = get_logger(__name__)

# Token claim -> principal field
PROFILE_CLAIMS = {"email": "email", "name": "name", "picture": "photo_url"}


def principal_from_claims(claims: dict) -> Principal:
    subject = claims.get("sub")
    if not subject:
        raise AuthenticationError("Token has no 'sub' claim")

    principal = Principal(provider="jwt", subject=str(subject), claims=claims)
    for claim, field in PROFILE_CLAIMS.items():
        value = claims.get(claim)
        if isinstance(value, str) and value:
            principal[field] = value  # type: ignore[literal-required]
    return principal


class JWTAuthAdapter:
    """Verifies signed JWTs for the chat API."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "chatter",
        audience: str = "chatter-api",
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience

    async def verify_token(self, token: str) -> Principal:
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={"require": ["exp", "sub"]},
            )
        except InvalidTokenError as e:
            logger.warning("Rejected bearer token", reason=str(e))
            raise AuthenticationError("Invalid token") from e

        return principal_from_claims(claims)
