"""Receiver lookup and payload building for new-message notifications."""

from __future__ import annotations

import json
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..dbmodels import Memberships, Messages, Notifications
from ..i18n import translate
from .models import ExpoMessage


async def get_receivers_push_tokens(
    session: AsyncSession, channel_id: UUID, sender_id: UUID
) -> list[str]:
    """Push tokens of every member of the channel except the sender."""
    stmt = (
        select(Notifications.token)
        .join(Memberships, Memberships.user_id == Notifications.user_id)
        .where(
            Memberships.channel_id == channel_id,
            Memberships.user_id != sender_id,
        )
        .distinct()
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


def notification_body(message: Messages, locale: str | None = None) -> str:
    if message.message_type == "photo":
        return translate("PHOTO", locale)
    if message.message_type == "file":
        return translate("FILE", locale)
    return message.text or ""


def build_message_notifications(
    message: Messages,
    tokens: list[str],
    sender_name: str | None,
    locale: str | None = None,
) -> list[ExpoMessage]:
    """One push message per token for a newly created chat message."""
    body = notification_body(message, locale)
    data = {
        "data": json.dumps(
            {"messageId": str(message.id), "channelId": str(message.channel_id)}
        )
    }
    return [
        ExpoMessage(to=token, title=sender_name, body=body, data=data) for token in tokens
    ]
