"""
Root GraphQL query definitions
"""

import strawberry

from ..types.channel import Channel
from ..types.message import Message
from ..types.user import User


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current authenticated user."""
        from ..resolvers.user import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def user(self, info: strawberry.Info, id: strawberry.ID) -> User | None:
        """Get a user by ID."""
        from ..resolvers.user import resolve_user_by_id

        return await resolve_user_by_id(info, id)

    @strawberry.field
    async def channel(self, info: strawberry.Info, channel_id: strawberry.ID) -> Channel | None:
        """Get a channel by ID."""
        from ..resolvers.channel import resolve_channel_by_id

        return await resolve_channel_by_id(info, channel_id)

    @strawberry.field
    async def channels(self, info: strawberry.Info) -> list[Channel]:
        """Get the channels the current user belongs to."""
        from ..resolvers.channel import resolve_my_channels

        return await resolve_my_channels(info)

    @strawberry.field
    async def message(self, info: strawberry.Info, id: strawberry.ID) -> Message | None:
        """Get a message by ID, including soft-deleted ones."""
        from ..resolvers.message import resolve_message_by_id

        return await resolve_message_by_id(info, id)
