"""
Root GraphQL subscription definitions
"""

from collections.abc import AsyncGenerator

import strawberry

from ..types.user import User


@strawberry.type
class Subscription:
    """Root GraphQL subscription type."""

    @strawberry.subscription(name="userSignedIn")
    async def user_signed_in(
        self, info: strawberry.Info, user_id: strawberry.ID
    ) -> AsyncGenerator[User, None]:
        """Sign-in events of the given user."""
        from ..resolvers.user import subscribe_user_signed_in

        events = subscribe_user_signed_in(info, user_id)
        try:
            async for user in events:
                yield user
        finally:
            await events.aclose()

    @strawberry.subscription(name="userUpdated")
    async def user_updated(
        self, info: strawberry.Info, user_id: strawberry.ID
    ) -> AsyncGenerator[User, None]:
        """Profile updates of the given user."""
        from ..resolvers.user import subscribe_user_updated

        events = subscribe_user_updated(info, user_id)
        try:
            async for user in events:
                yield user
        finally:
            await events.aclose()
