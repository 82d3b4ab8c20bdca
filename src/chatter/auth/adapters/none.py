"""Development adapter that trusts every non-empty token."""

from __future__ import annotations

from ...config import settings
from ...logging import get_logger
from .base import AuthenticationError, Principal

logger = get_logger(__name__)

DEV_TOKEN_PREFIX = "dev-token"


class NoAuthAdapter:
    """
    Accepts any non-empty bearer token without verification.

    ``dev-token|<subject>`` signs in as ``<subject>``, so several local users
    can chat with each other. Any other token is the default user. Refuses to
    start when the environment is production.
    """

    def __init__(self, default_subject: str = "dev-user"):
        if settings.environment.lower() in ("production", "prod"):
            logger.error("No-auth mode requested in production", environment=settings.environment)
            raise RuntimeError(
                "NoAuthAdapter cannot be used in production; configure CHATTER_AUTH_PROVIDER=jwt"
            )

        self.default_subject = default_subject
        logger.warning("No-auth mode: bearer tokens are not verified", subject=default_subject)

    def subject_of(self, token: str) -> str:
        prefix, _, subject = token.partition("|")
        subject = subject.split("|")[0]
        if prefix == DEV_TOKEN_PREFIX and subject:
            return subject
        return self.default_subject

    async def verify_token(self, token: str) -> Principal:
        if not token:
            raise AuthenticationError("Token required (even in no-auth mode)")

        subject = self.subject_of(token)
        return Principal(
            provider="none",
            subject=subject,
            email=f"{subject}@example.com",
            name=subject,
            claims={"mode": "development"},
        )
