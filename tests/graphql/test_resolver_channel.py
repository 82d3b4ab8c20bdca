"""
Unit tests for channel field and query resolvers
"""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import strawberry
from sqlalchemy.dialects import postgresql

from chatter.auth.adapters.base import AuthorizationError
from chatter.dbmodels import Channels, Memberships, Messages, Users
from chatter.graphql.mutations.root import ChannelCreateInput
from chatter.graphql.resolvers.channel import (
    create_channel,
    resolve_channel_last_message,
    resolve_channel_memberships,
    resolve_channel_messages,
    resolve_my_channels,
)
from chatter.graphql.types.channel import Channel, ChannelType

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def compile_sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def make_user(name="Someone"):
    return Users(id=uuid.uuid4(), auth_provider="none", auth_subject=name, name=name)


def make_message(channel_id, sender, minutes_ago=0, **kwargs):
    return Messages(
        id=uuid.uuid4(),
        message_type=kwargs.pop("message_type", "text"),
        text=kwargs.pop("text", "hello"),
        image_urls=[],
        file_urls=[],
        sender_id=sender.id,
        sender=sender,
        channel_id=channel_id,
        created_at=BASE_TIME - timedelta(minutes=minutes_ago),
        updated_at=BASE_TIME - timedelta(minutes=minutes_ago),
        deleted_at=kwargs.pop("deleted_at", None),
    )


def result_with(*, scalar=None, scalars=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = scalars or []
    return result


@pytest.fixture
def channel():
    return Channel(
        id=strawberry.ID(str(uuid.uuid4())),
        channel_type=ChannelType.PRIVATE,
        name="general",
        last_message_id=None,
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
        deleted_at=None,
    )


@pytest.fixture
def mock_session():
    with patch("chatter.graphql.resolvers.channel.get_async_session") as mock_get_session:
        session = AsyncMock()
        session.add = MagicMock()
        mock_get_session.return_value.__aenter__.return_value = session
        yield session


@pytest.fixture
def signed_in(user_id):
    with patch(
        "chatter.graphql.resolvers.channel.require_user_id", AsyncMock(return_value=user_id)
    ):
        yield user_id


class TestChannelLastMessage:
    @pytest.mark.asyncio
    async def test_returns_newest_message_with_sender(self, mock_info, channel, mock_session):
        sender = make_user("Alice")
        newest = make_message(uuid.UUID(channel.id), sender, text="latest")
        mock_session.execute.return_value = result_with(scalar=newest)

        result = await resolve_channel_last_message(channel, mock_info)

        assert result is not None
        assert result.id == str(newest.id)
        assert result.text == "latest"
        assert result.sender is not None
        assert result.sender.name == "Alice"

        sql = compile_sql(mock_session.execute.call_args.args[0])
        assert "messages.deleted_at IS NULL" in sql
        assert "ORDER BY messages.created_at DESC" in sql

    @pytest.mark.asyncio
    async def test_returns_none_for_empty_channel(self, mock_info, channel, mock_session):
        mock_session.execute.return_value = result_with(scalar=None)

        assert await resolve_channel_last_message(channel, mock_info) is None


class TestChannelMessages:
    @pytest.mark.asyncio
    async def test_excludes_blocked_senders(self, mock_info, channel, mock_session, signed_in):
        blocked_id = uuid.uuid4()
        friend = make_user("Friend")
        rows = [make_message(uuid.UUID(channel.id), friend, minutes_ago=i) for i in range(3)]
        mock_session.execute.side_effect = [
            result_with(scalars=[blocked_id]),
            result_with(scalars=rows),
        ]

        connection = await resolve_channel_messages(channel, mock_info, None, None, 10, None)

        assert [edge.node.id for edge in connection.edges] == [str(r.id) for r in rows]
        assert not connection.page_info.has_next_page

        messages_stmt = mock_session.execute.call_args_list[1].args[0]
        sql = compile_sql(messages_stmt)
        assert "messages.sender_id NOT IN" in sql
        assert [blocked_id] in messages_stmt.compile().params.values()

    @pytest.mark.asyncio
    async def test_blocked_set_is_read_on_every_call(
        self, mock_info, channel, mock_session, signed_in
    ):
        mock_session.execute.side_effect = [
            result_with(scalars=[]),
            result_with(scalars=[]),
            result_with(scalars=[uuid.uuid4()]),
            result_with(scalars=[]),
        ]

        await resolve_channel_messages(channel, mock_info, None, None, 5, None)
        await resolve_channel_messages(channel, mock_info, None, None, 5, None)

        assert mock_session.execute.call_count == 4
        first_sql = compile_sql(mock_session.execute.call_args_list[1].args[0])
        second_sql = compile_sql(mock_session.execute.call_args_list[3].args[0])
        assert "NOT IN" not in first_sql
        assert "NOT IN" in second_sql

    @pytest.mark.asyncio
    async def test_soft_deleted_messages_stay_listed(
        self, mock_info, channel, mock_session, signed_in
    ):
        sender = make_user()
        removed = make_message(uuid.UUID(channel.id), sender, deleted_at=BASE_TIME)
        mock_session.execute.side_effect = [result_with(scalars=[]), result_with(scalars=[removed])]

        connection = await resolve_channel_messages(channel, mock_info, None, None, None, None)

        assert connection.edges[0].node.deleted_at == BASE_TIME

    @pytest.mark.asyncio
    async def test_requires_authentication(self, mock_info, channel, mock_session):
        with patch(
            "chatter.graphql.resolvers.channel.require_user_id",
            AsyncMock(side_effect=AuthorizationError("Authentication required")),
        ):
            with pytest.raises(AuthorizationError):
                await resolve_channel_messages(channel, mock_info, None, None, 5, None)

        mock_session.execute.assert_not_called()


class TestChannelMemberships:
    @pytest.mark.asyncio
    async def test_exclude_me_filters_own_membership(
        self, mock_info, channel, mock_session, signed_in
    ):
        other = make_user("Other")
        membership = Memberships(
            id=uuid.uuid4(),
            user_id=other.id,
            user=other,
            channel_id=uuid.UUID(channel.id),
            membership_type="member",
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        )
        mock_session.execute.return_value = result_with(scalars=[membership])

        result = await resolve_channel_memberships(channel, mock_info, exclude_me=True)

        assert len(result) == 1
        assert result[0].user.name == "Other"
        sql = compile_sql(mock_session.execute.call_args.args[0])
        assert "memberships.user_id !=" in sql

    @pytest.mark.asyncio
    async def test_without_exclude_me_lists_everyone(
        self, mock_info, channel, mock_session, signed_in
    ):
        mock_session.execute.return_value = result_with(scalars=[])

        await resolve_channel_memberships(channel, mock_info, exclude_me=False)

        sql = compile_sql(mock_session.execute.call_args.args[0])
        assert "memberships.user_id !=" not in sql


class TestChannelQueriesAndMutations:
    @pytest.mark.asyncio
    async def test_my_channels(self, mock_info, mock_session, signed_in):
        row = Channels(
            id=uuid.uuid4(),
            channel_type="public",
            name="lobby",
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        )
        mock_session.execute.return_value = result_with(scalars=[row])

        result = await resolve_my_channels(mock_info)

        assert [c.name for c in result] == ["lobby"]
        assert result[0].channel_type == ChannelType.PUBLIC

    @pytest.mark.asyncio
    async def test_create_channel_adds_owner_and_members(
        self, mock_info, mock_session, signed_in
    ):
        other_id = uuid.uuid4()

        async def assign_ids():
            for call in mock_session.add.call_args_list:
                obj = call.args[0]
                if getattr(obj, "id", None) is None:
                    obj.id = uuid.uuid4()

        mock_session.flush.side_effect = assign_ids

        result = await create_channel(
            mock_info,
            ChannelCreateInput(
                channel_type=ChannelType.PRIVATE,
                name="pair",
                user_ids=[strawberry.ID(str(other_id)), strawberry.ID(str(signed_in))],
            ),
        )

        added = [call.args[0] for call in mock_session.add.call_args_list]
        memberships = [obj for obj in added if isinstance(obj, Memberships)]
        assert result.name == "pair"
        assert {(m.user_id, m.membership_type) for m in memberships} == {
            (signed_in, "owner"),
            (other_id, "member"),
        }
        assert all(m.channel_id == uuid.UUID(result.id) for m in memberships)
