"""Selects the auth adapter named by ``settings.auth_provider``."""

from __future__ import annotations

from functools import lru_cache

from ..config import Settings, settings
from .adapters.base import AuthAdapter
from .adapters.jwt import JWTAuthAdapter
from .adapters.none import NoAuthAdapter


def get_auth_adapter(config: Settings | None = None) -> AuthAdapter:
    config = config or settings
    overrides = config.auth_config or {}

    if config.auth_provider == "none":
        return NoAuthAdapter(default_subject=overrides.get("default_subject", "dev-user"))

    if config.auth_provider == "jwt":
        secret_key = overrides.get("secret_key") or config.jwt_secret
        if not secret_key:
            raise ValueError("JWT auth needs a signing secret; set CHATTER_JWT_SECRET")
        return JWTAuthAdapter(
            secret_key=secret_key,
            algorithm=overrides.get("algorithm", config.jwt_algorithm),
            issuer=overrides.get("issuer", config.jwt_issuer),
            audience=overrides.get("audience", config.jwt_audience),
        )

    raise ValueError(f"Unsupported auth provider: {config.auth_provider}")


@lru_cache(maxsize=1)
def get_auth_adapter_cached() -> AuthAdapter:
    """Process-wide adapter built from the global settings."""
    return get_auth_adapter()
