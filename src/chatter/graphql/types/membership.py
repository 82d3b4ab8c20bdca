"""
Membership GraphQL type definitions
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import inspect

from .user import User

if TYPE_CHECKING:
    from ...dbmodels import Memberships


@strawberry.enum
class MembershipType(Enum):
    OWNER = "owner"
    MEMBER = "member"


@strawberry.type
class Membership:
    """Channel membership type for GraphQL API."""

    id: strawberry.ID
    user_id: strawberry.ID
    channel_id: strawberry.ID
    alert_mode: str | None
    membership_type: MembershipType
    created_at: datetime | None
    updated_at: datetime | None
    user: User | None = None

    @classmethod
    def from_model(cls, membership: "Memberships") -> "Membership":
        user = None
        if "user" not in inspect(membership).unloaded and membership.user is not None:
            user = User.from_model(membership.user)

        return cls(
            id=strawberry.ID(str(membership.id)),
            user_id=strawberry.ID(str(membership.user_id)),
            channel_id=strawberry.ID(str(membership.channel_id)),
            alert_mode=membership.alert_mode,
            membership_type=MembershipType(membership.membership_type or "member"),
            created_at=membership.created_at,
            updated_at=membership.updated_at,
            user=user,
        )
