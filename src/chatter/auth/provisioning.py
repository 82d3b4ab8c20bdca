"""Local user rows for authenticated principals."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..dbmodels import Users
from ..logging import get_logger
from .adapters.base import Principal

logger = get_logger(__name__)

# Profile fields a principal may seed; values a user has set are kept
PROFILE_FIELDS = ("email", "name", "photo_url")


async def ensure_local_user(db: AsyncSession, principal: Principal) -> UUID:
    """
    Return the id of the user for `principal`, creating the row on first sign-in.

    Empty profile fields of an existing user are filled from the principal.
    """
    provider = principal["provider"]
    subject = principal["subject"]

    user = await get_user_by_auth_info(db, provider, subject)
    if user is None:
        user = Users(
            auth_provider=provider,
            auth_subject=subject,
            **{field: principal.get(field) for field in PROFILE_FIELDS},
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info("Provisioned user", user_id=str(user.id), provider=provider)
        return user.id

    filled = [
        field
        for field in PROFILE_FIELDS
        if principal.get(field) and not getattr(user, field)
    ]
    for field in filled:
        setattr(user, field, principal.get(field))
    if filled:
        await db.flush()
        logger.info("Filled empty profile fields", user_id=str(user.id), fields=filled)

    return user.id


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Users | None:
    result = await db.execute(select(Users).where(Users.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_auth_info(
    db: AsyncSession, auth_provider: str, auth_subject: str
) -> Users | None:
    result = await db.execute(
        select(Users).where(
            Users.auth_provider == auth_provider,
            Users.auth_subject == auth_subject,
        )
    )
    return result.scalar_one_or_none()
