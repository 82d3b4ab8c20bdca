"""
Root GraphQL mutation definitions
"""

import strawberry

from ..types.channel import Channel, ChannelType
from ..types.message import Message, MessageType
from ..types.user import User


# Input types for mutations
@strawberry.input
class MessageCreateInput:
    """Input for creating a message."""

    message_type: MessageType = MessageType.TEXT
    text: str | None = None
    image_urls: list[str] | None = None
    file_urls: list[str] | None = None


@strawberry.input
class ChannelCreateInput:
    """Input for creating a channel."""

    channel_type: ChannelType = ChannelType.PRIVATE
    name: str | None = None
    user_ids: list[strawberry.ID] | None = None


@strawberry.input
class UserUpdateInput:
    """Input for updating the current user's profile."""

    name: str | None = None
    nickname: str | None = None
    status_message: str | None = None
    photo_url: str | None = None


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Message mutations
    @strawberry.mutation(name="createMessage")
    async def create_message(
        self, info: strawberry.Info, channel_id: strawberry.ID, message: MessageCreateInput
    ) -> Message:
        """Post a message to a channel."""
        from ..resolvers.message import create_message

        return await create_message(info, channel_id, message)

    @strawberry.mutation(name="deleteMessage")
    async def delete_message(self, info: strawberry.Info, id: strawberry.ID) -> Message:
        """Soft-delete one of your messages."""
        from ..resolvers.message import delete_message

        return await delete_message(info, id)

    # Channel mutations
    @strawberry.mutation(name="createChannel")
    async def create_channel(self, info: strawberry.Info, channel: ChannelCreateInput) -> Channel:
        from ..resolvers.channel import create_channel

        return await create_channel(info, channel)

    # User mutations
    @strawberry.mutation(name="signIn")
    async def sign_in(self, info: strawberry.Info) -> User:
        """Record a sign-in for the bearer token's user."""
        from ..resolvers.user import sign_in

        return await sign_in(info)

    @strawberry.mutation(name="updateProfile")
    async def update_profile(self, info: strawberry.Info, user: UserUpdateInput) -> User:
        from ..resolvers.user import update_profile

        return await update_profile(info, user)

    @strawberry.mutation(name="registerPushToken")
    async def register_push_token(
        self,
        info: strawberry.Info,
        token: str,
        device: str | None = None,
        os: str | None = None,
    ) -> bool:
        """Register a device push token for the current user."""
        from ..resolvers.user import register_push_token

        return await register_push_token(info, token, device, os)

    @strawberry.mutation(name="unregisterPushToken")
    async def unregister_push_token(self, info: strawberry.Info, token: str) -> bool:
        from ..resolvers.user import unregister_push_token

        return await unregister_push_token(info, token)

    @strawberry.mutation(name="createBlockedUser")
    async def create_blocked_user(
        self, info: strawberry.Info, blocked_user_id: strawberry.ID
    ) -> User:
        """Hide a user's messages from the current user."""
        from ..resolvers.user import create_blocked_user

        return await create_blocked_user(info, blocked_user_id)

    @strawberry.mutation(name="deleteBlockedUser")
    async def delete_blocked_user(
        self, info: strawberry.Info, blocked_user_id: strawberry.ID
    ) -> bool:
        from ..resolvers.user import delete_blocked_user

        return await delete_blocked_user(info, blocked_user_id)
