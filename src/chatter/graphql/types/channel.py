"""
Channel GraphQL type definitions
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import strawberry

from ..pagination import Connection
from .membership import Membership
from .message import Message

if TYPE_CHECKING:
    from ...dbmodels import Channels


@strawberry.enum
class ChannelType(Enum):
    """Channel type enumeration."""

    PRIVATE = "private"
    PUBLIC = "public"
    SELF = "self"


@strawberry.type
class Channel:
    """Channel type for GraphQL API."""

    id: strawberry.ID
    channel_type: ChannelType
    name: str | None
    last_message_id: strawberry.ID | None
    created_at: datetime | None
    updated_at: datetime | None
    deleted_at: datetime | None

    @classmethod
    def from_model(cls, channel: "Channels") -> "Channel":
        return cls(
            id=strawberry.ID(str(channel.id)),
            channel_type=ChannelType(channel.channel_type or "private"),
            name=channel.name,
            last_message_id=(
                strawberry.ID(str(channel.last_message_id)) if channel.last_message_id else None
            ),
            created_at=channel.created_at,
            updated_at=channel.updated_at,
            deleted_at=channel.deleted_at,
        )

    @strawberry.field
    async def last_message(self, info: strawberry.Info) -> Message | None:
        """Newest non-deleted message of this channel, with its sender."""
        from ..resolvers.channel import resolve_channel_last_message

        return await resolve_channel_last_message(self, info)

    @strawberry.field
    async def messages(
        self,
        info: strawberry.Info,
        after: str | None = None,
        before: str | None = None,
        first: int | None = None,
        last: int | None = None,
    ) -> Connection[Message]:
        """Messages of this channel, newest first, without blocked senders."""
        from ..resolvers.channel import resolve_channel_messages

        return await resolve_channel_messages(self, info, after, before, first, last)

    @strawberry.field
    async def memberships(
        self, info: strawberry.Info, exclude_me: bool | None = False
    ) -> list[Membership]:
        """Get memberships of this channel."""
        from ..resolvers.channel import resolve_channel_memberships

        return await resolve_channel_memberships(self, info, bool(exclude_me))
