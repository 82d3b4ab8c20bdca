"""Authentication adapters for different providers."""

from .base import AuthAdapter, AuthenticationError, AuthorizationError, Principal
from .jwt import JWTAuthAdapter
from .none import NoAuthAdapter

__all__ = [
    "AuthAdapter",
    "AuthenticationError",
    "AuthorizationError",
    "Principal",
    "JWTAuthAdapter",
    "NoAuthAdapter",
]
