from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ...database.connection import get_async_session
from ...dbmodels import Channels, Messages, Users
from ...i18n import negotiate_locale
from ...logging import get_logger
from ...notifications import (
    build_message_notifications,
    get_push_dispatcher,
    get_receivers_push_tokens,
)
from ..access_control import NotFoundError, ensure_sender, parse_id, require_user_id

if TYPE_CHECKING:
    from ...notifications import PushDispatcher
    from ..mutations.root import MessageCreateInput
    from ..types.message import Message

logger = get_logger(__name__)


def _dispatcher_from_info(info: strawberry.Info) -> PushDispatcher:
    return info.context.get("push_dispatcher") or get_push_dispatcher()


def _locale_from_info(info: strawberry.Info) -> str:
    request = info.context.get("request")
    header = request.headers.get("accept-language") if request is not None else None
    return negotiate_locale(header)


# Query resolvers
async def resolve_message_by_id(info: strawberry.Info, id: str) -> Message | None:
    """Any message by id, soft-deleted ones included."""
    from ..types.message import Message as MessageType

    await require_user_id(info)

    async with get_async_session() as session:
        stmt = (
            select(Messages)
            .where(Messages.id == parse_id(id, "message"))
            .options(selectinload(Messages.sender))
        )
        result = await session.execute(stmt)
        message = result.scalar_one_or_none()

        return MessageType.from_model(message) if message else None


# Mutation resolvers
async def create_message(
    info: strawberry.Info, channel_id: str, input: MessageCreateInput
) -> Message:
    """
    Create a message in a channel and notify the other members.

    The message insert and the channel's last-message pointer are written in
    one transaction. Push notifications are scheduled after the commit on the
    dispatcher's background task; their outcome never affects the mutation.
    """
    from ..types.message import Message as MessageType

    user_id = await require_user_id(info)
    channel_uuid = parse_id(channel_id, "channel")

    async with get_async_session() as session:
        channel = await session.get(Channels, channel_uuid)
        if channel is None or channel.deleted_at is not None:
            raise NotFoundError(f"Channel not found: {channel_id}")

        sender = await session.get(Users, user_id)

        now = datetime.now(UTC)
        message = Messages(
            message_type=input.message_type.value,
            text=input.text,
            image_urls=list(input.image_urls or []),
            file_urls=list(input.file_urls or []),
            sender_id=user_id,
            channel_id=channel_uuid,
            created_at=now,
            updated_at=now,
            deleted_at=None,
        )
        message.sender = sender
        session.add(message)
        await session.flush()

        channel.last_message_id = message.id
        channel.updated_at = now

        tokens = await get_receivers_push_tokens(session, channel_uuid, user_id)

    logger.info(
        "Message created",
        message_id=str(message.id),
        channel_id=str(channel_uuid),
        receivers=len(tokens),
    )

    notifications = build_message_notifications(
        message,
        tokens,
        sender_name=sender.name if sender else None,
        locale=_locale_from_info(info),
    )
    _dispatcher_from_info(info).dispatch(notifications)

    return MessageType.from_model(message)


async def delete_message(info: strawberry.Info, id: str) -> Message:
    """
    Soft-delete a message sent by the caller.

    If it was the channel's last message, the channel is re-pointed to the
    newest remaining non-deleted message (or to nothing) in the same
    transaction.
    """
    from ..types.message import Message as MessageType

    user_id = await require_user_id(info)
    message_id = parse_id(id, "message")

    async with get_async_session() as session:
        stmt = (
            select(Messages).where(Messages.id == message_id).options(selectinload(Messages.sender))
        )
        result = await session.execute(stmt)
        message = result.scalar_one_or_none()

        if not message:
            raise NotFoundError(f"Message not found: {id}")

        ensure_sender(message, user_id)

        if message.deleted_at is None:
            now = datetime.now(UTC)
            message.deleted_at = now
            message.updated_at = now
            await session.flush()

            channel = await session.get(Channels, message.channel_id)
            if channel is not None and channel.last_message_id == message.id:
                latest_stmt = (
                    select(Messages.id)
                    .where(
                        Messages.channel_id == message.channel_id,
                        Messages.deleted_at.is_(None),
                    )
                    .order_by(Messages.created_at.desc(), Messages.id.desc())
                    .limit(1)
                )
                latest = await session.execute(latest_stmt)
                channel.last_message_id = latest.scalar_one_or_none()
                logger.info(
                    "Channel last message re-pointed",
                    channel_id=str(channel.id),
                    last_message_id=str(channel.last_message_id),
                )

            logger.info("Message deleted", message_id=str(message.id))

        return MessageType.from_model(message)
