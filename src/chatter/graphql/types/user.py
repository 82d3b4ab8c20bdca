"""
User GraphQL type definitions
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any

import strawberry

if TYPE_CHECKING:
    from ...dbmodels import Users


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@strawberry.type
class User:
    """User type for GraphQL API."""

    id: strawberry.ID
    email: str | None
    name: str | None
    nickname: str | None
    photo_url: str | None
    status_message: str | None
    last_signed_in_at: datetime | None
    created_at: datetime | None
    updated_at: datetime | None
    deleted_at: datetime | None = None

    @classmethod
    def from_model(cls, user: "Users") -> "User":
        return cls(
            id=strawberry.ID(str(user.id)),
            email=user.email,
            name=user.name,
            nickname=user.nickname,
            photo_url=user.photo_url,
            status_message=user.status_message,
            last_signed_in_at=user.last_signed_in_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
            deleted_at=user.deleted_at,
        )

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "User":
        """Build a user from a pub/sub payload produced by `user_payload`."""
        return cls(
            id=strawberry.ID(str(payload["id"])),
            email=payload.get("email"),
            name=payload.get("name"),
            nickname=payload.get("nickname"),
            photo_url=payload.get("photo_url"),
            status_message=payload.get("status_message"),
            last_signed_in_at=_parse_datetime(payload.get("last_signed_in_at")),
            created_at=_parse_datetime(payload.get("created_at")),
            updated_at=_parse_datetime(payload.get("updated_at")),
            deleted_at=_parse_datetime(payload.get("deleted_at")),
        )


def user_payload(user: "Users") -> dict[str, Any]:
    """JSON-safe pub/sub payload for a user row."""

    def iso(value: datetime | None) -> str | None:
        return value.isoformat() if value else None

    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "nickname": user.nickname,
        "photo_url": user.photo_url,
        "status_message": user.status_message,
        "last_signed_in_at": iso(user.last_signed_in_at),
        "created_at": iso(user.created_at),
        "updated_at": iso(user.updated_at),
        "deleted_at": iso(user.deleted_at),
    }
