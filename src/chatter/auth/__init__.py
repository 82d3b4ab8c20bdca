"""Authentication and authorization for the chatter API."""

from .adapters.base import AuthAdapter, AuthenticationError, AuthorizationError, Principal
from .context import AuthContext
from .factory import get_auth_adapter
from .middleware import authenticate, get_auth_context

__all__ = [
    "AuthAdapter",
    "AuthenticationError",
    "AuthorizationError",
    "Principal",
    "AuthContext",
    "authenticate",
    "get_auth_context",
    "get_auth_adapter",
]
