from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ...database.connection import get_async_session
from ...dbmodels import BlockedUsers, Channels, Memberships, Messages
from ...logging import get_logger
from ..access_control import parse_id, require_user_id
from ..pagination import apply_window, build_connection, relay_to_window

if TYPE_CHECKING:
    from ..mutations.root import ChannelCreateInput
    from ..pagination import Connection
    from ..types.channel import Channel
    from ..types.membership import Membership
    from ..types.message import Message

logger = get_logger(__name__)


# Field resolvers
async def resolve_channel_last_message(channel: Channel, info: strawberry.Info) -> Message | None:
    from ..types.message import Message as MessageType

    async with get_async_session() as session:
        stmt = (
            select(Messages)
            .where(
                Messages.channel_id == parse_id(channel.id, "channel"),
                Messages.deleted_at.is_(None),
            )
            .options(selectinload(Messages.sender))
            .order_by(Messages.created_at.desc(), Messages.id.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        message = result.scalar_one_or_none()

        return MessageType.from_model(message) if message else None


async def resolve_channel_messages(
    channel: Channel,
    info: strawberry.Info,
    after: str | None,
    before: str | None,
    first: int | None,
    last: int | None,
) -> Connection[Message]:
    """
    Paginate the channel's messages for the authenticated user.

    Messages sent by users the caller has blocked are left out. Soft-deleted
    messages stay in the list with ``deletedAt`` set.
    """
    from ..types.message import Message as MessageType

    user_id = await require_user_id(info)
    window = relay_to_window(after=after, before=before, first=first, last=last)

    async with get_async_session() as session:
        blocked_result = await session.execute(
            select(BlockedUsers.blocked_user_id).where(BlockedUsers.user_id == user_id)
        )
        blocked_ids = list(blocked_result.scalars().all())

        stmt = (
            select(Messages)
            .where(Messages.channel_id == parse_id(channel.id, "channel"))
            .options(selectinload(Messages.sender))
        )
        if blocked_ids:
            stmt = stmt.where(Messages.sender_id.not_in(blocked_ids))
        stmt = apply_window(stmt, window, Messages.created_at, Messages.id)

        result = await session.execute(stmt)
        rows = result.scalars().all()

        return build_connection(rows, window, MessageType.from_model)


async def resolve_channel_memberships(
    channel: Channel, info: strawberry.Info, exclude_me: bool
) -> list[Membership]:
    from ..types.membership import Membership as MembershipType

    user_id = await require_user_id(info)

    async with get_async_session() as session:
        stmt = (
            select(Memberships)
            .where(Memberships.channel_id == parse_id(channel.id, "channel"))
            .options(selectinload(Memberships.user))
            .order_by(Memberships.created_at.asc())
        )
        if exclude_me:
            stmt = stmt.where(Memberships.user_id != user_id)

        result = await session.execute(stmt)
        return [MembershipType.from_model(m) for m in result.scalars().all()]


# Query resolvers
async def resolve_channel_by_id(info: strawberry.Info, channel_id: str) -> Channel | None:
    from ..types.channel import Channel as ChannelType

    await require_user_id(info)

    async with get_async_session() as session:
        stmt = select(Channels).where(
            Channels.id == parse_id(channel_id, "channel"), Channels.deleted_at.is_(None)
        )
        result = await session.execute(stmt)
        channel = result.scalar_one_or_none()

        if not channel:
            logger.info("Channel not found", channel_id=channel_id)
            return None

        return ChannelType.from_model(channel)


async def resolve_my_channels(info: strawberry.Info) -> list[Channel]:
    """Channels the authenticated user belongs to, most recent activity first."""
    from ..types.channel import Channel as ChannelType

    user_id = await require_user_id(info)

    async with get_async_session() as session:
        member_channel_ids = select(Memberships.channel_id).where(Memberships.user_id == user_id)
        stmt = (
            select(Channels)
            .where(Channels.id.in_(member_channel_ids), Channels.deleted_at.is_(None))
            .order_by(Channels.updated_at.desc())
        )
        result = await session.execute(stmt)
        return [ChannelType.from_model(c) for c in result.scalars().all()]


# Mutation resolvers
async def create_channel(info: strawberry.Info, input: ChannelCreateInput) -> Channel:
    """Create a channel owned by the caller, with the given users as members."""
    from ..types.channel import Channel as ChannelType
    from ..types.channel import ChannelType as ChannelKind

    user_id = await require_user_id(info)

    member_ids = []
    if input.channel_type != ChannelKind.SELF:
        for raw_id in input.user_ids or []:
            member_id = parse_id(raw_id, "user")
            if member_id != user_id and member_id not in member_ids:
                member_ids.append(member_id)

    async with get_async_session() as session:
        now = datetime.now(UTC)
        channel = Channels(
            channel_type=input.channel_type.value,
            name=input.name,
            created_at=now,
            updated_at=now,
        )
        session.add(channel)
        await session.flush()

        session.add(
            Memberships(user_id=user_id, channel_id=channel.id, membership_type="owner")
        )
        for member_id in member_ids:
            session.add(
                Memberships(user_id=member_id, channel_id=channel.id, membership_type="member")
            )
        await session.flush()

        logger.info(
            "Channel created",
            channel_id=str(channel.id),
            channel_type=channel.channel_type,
            members=len(member_ids) + 1,
        )
        return ChannelType.from_model(channel)
