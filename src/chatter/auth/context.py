"""Identity attached to one HTTP request or websocket connection."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from .adapters.base import Principal


@dataclass
class AuthContext:
    user_id: UUID | None
    principal: Principal | None = None
    token: str | None = None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls(user_id=None)

    @property
    def is_authenticated(self) -> bool:
        """A local user was resolved from a verified token."""
        return self.user_id is not None and self.principal is not None
