from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import strawberry
from sqlalchemy import and_, delete, select

from ...auth.provisioning import get_user_by_id
from ...database.connection import get_async_session
from ...dbmodels import BlockedUsers, Notifications, Users
from ...logging import get_logger
from ...pubsub import USER_SIGNED_IN, USER_UPDATED, PubSub, with_filter
from ..access_control import NotFoundError, parse_id, require_user_id

if TYPE_CHECKING:
    from ..mutations.root import UserUpdateInput
    from ..types.user import User

logger = get_logger(__name__)


def _pubsub_from_info(info: strawberry.Info) -> PubSub:
    pubsub = info.context.get("pubsub")
    if pubsub is None:
        raise RuntimeError("Pub/sub is not configured for this GraphQL context")
    return pubsub


# Query resolvers
async def resolve_current_user(info: strawberry.Info) -> User | None:
    from ..types.user import User as UserType

    user_id = await require_user_id(info)

    async with get_async_session() as session:
        user = await get_user_by_id(session, user_id)
        return UserType.from_model(user) if user else None


async def resolve_user_by_id(info: strawberry.Info, id: str) -> User | None:
    from ..types.user import User as UserType

    await require_user_id(info)

    async with get_async_session() as session:
        user = await get_user_by_id(session, parse_id(id, "user"))
        if not user or user.deleted_at is not None:
            return None
        return UserType.from_model(user)


# Mutation resolvers
async def sign_in(info: strawberry.Info) -> User:
    """Record a sign-in for the token's user and announce it to subscribers."""
    from ..types.user import User as UserType
    from ..types.user import user_payload

    user_id = await require_user_id(info)
    pubsub = _pubsub_from_info(info)

    async with get_async_session() as session:
        user = await get_user_by_id(session, user_id)
        if not user:
            raise NotFoundError(f"User not found: {user_id}")

        user.last_signed_in_at = datetime.now(UTC)
        await session.flush()

    await pubsub.publish(USER_SIGNED_IN, user_payload(user))
    logger.info("User signed in", user_id=str(user_id))
    return UserType.from_model(user)


async def update_profile(info: strawberry.Info, input: UserUpdateInput) -> User:
    """Update the caller's profile; unset fields keep their values."""
    from ..types.user import User as UserType
    from ..types.user import user_payload

    user_id = await require_user_id(info)
    pubsub = _pubsub_from_info(info)

    async with get_async_session() as session:
        user = await get_user_by_id(session, user_id)
        if not user:
            raise NotFoundError(f"User not found: {user_id}")

        if input.name is not None:
            user.name = input.name
        if input.nickname is not None:
            user.nickname = input.nickname
        if input.status_message is not None:
            user.status_message = input.status_message
        if input.photo_url is not None:
            user.photo_url = input.photo_url
        user.updated_at = datetime.now(UTC)
        await session.flush()

    await pubsub.publish(USER_UPDATED, user_payload(user))
    logger.info("User profile updated", user_id=str(user_id))
    return UserType.from_model(user)


async def register_push_token(
    info: strawberry.Info, token: str, device: str | None, os: str | None
) -> bool:
    """Attach a push token to the caller; re-registering moves it to the caller."""
    user_id = await require_user_id(info)

    async with get_async_session() as session:
        result = await session.execute(select(Notifications).where(Notifications.token == token))
        notification = result.scalar_one_or_none()

        if notification:
            notification.user_id = user_id
            notification.device = device
            notification.os = os
        else:
            session.add(Notifications(user_id=user_id, token=token, device=device, os=os))
        await session.flush()

    logger.info("Push token registered", user_id=str(user_id), device=device, os=os)
    return True


async def unregister_push_token(info: strawberry.Info, token: str) -> bool:
    user_id = await require_user_id(info)

    async with get_async_session() as session:
        result = await session.execute(
            delete(Notifications).where(
                and_(Notifications.token == token, Notifications.user_id == user_id)
            )
        )
        return (result.rowcount or 0) > 0


async def create_blocked_user(info: strawberry.Info, blocked_user_id: str) -> User:
    """Block a user for the caller and return the blocked user."""
    from ..types.user import User as UserType

    user_id = await require_user_id(info)
    target_id = parse_id(blocked_user_id, "user")
    if target_id == user_id:
        raise ValueError("Users cannot block themselves")

    async with get_async_session() as session:
        target = await get_user_by_id(session, target_id)
        if not target:
            raise NotFoundError(f"User not found: {blocked_user_id}")

        existing = await session.execute(
            select(BlockedUsers).where(
                and_(BlockedUsers.user_id == user_id, BlockedUsers.blocked_user_id == target_id)
            )
        )
        if existing.scalar_one_or_none() is None:
            session.add(BlockedUsers(user_id=user_id, blocked_user_id=target_id))
            await session.flush()
            logger.info("User blocked", user_id=str(user_id), blocked_user_id=str(target_id))

        return UserType.from_model(target)


async def delete_blocked_user(info: strawberry.Info, blocked_user_id: str) -> bool:
    user_id = await require_user_id(info)
    target_id = parse_id(blocked_user_id, "user")

    async with get_async_session() as session:
        result = await session.execute(
            delete(BlockedUsers).where(
                and_(BlockedUsers.user_id == user_id, BlockedUsers.blocked_user_id == target_id)
            )
        )
        return (result.rowcount or 0) > 0


# Subscription resolvers
async def _watch_user(
    info: strawberry.Info, topic: str, user_id: str
) -> AsyncGenerator[User, None]:
    from ..types.user import User as UserType

    pubsub = _pubsub_from_info(info)
    subscription = await pubsub.subscribe(topic)
    logger.info("Subscription started", topic=topic, watched_user_id=user_id)

    events = with_filter(subscription, lambda payload: payload.get("id") == user_id)
    try:
        async for payload in events:
            yield UserType.from_payload(payload)
    finally:
        await events.aclose()
        logger.info("Subscription closed", topic=topic, watched_user_id=user_id)


def subscribe_user_signed_in(info: strawberry.Info, user_id: str) -> AsyncGenerator[User, None]:
    """Sign-in events of one user."""
    return _watch_user(info, USER_SIGNED_IN, str(user_id))


def subscribe_user_updated(info: strawberry.Info, user_id: str) -> AsyncGenerator[User, None]:
    """Profile updates of one user."""
    return _watch_user(info, USER_UPDATED, str(user_id))
