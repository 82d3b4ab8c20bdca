"""
Unit tests for message mutation resolvers
"""

import json
import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from chatter.auth.adapters.base import AuthorizationError
from chatter.dbmodels import Channels, Messages, Users
from chatter.graphql.access_control import NotFoundError
from chatter.graphql.mutations.root import MessageCreateInput
from chatter.graphql.resolvers.message import (
    create_message,
    delete_message,
    resolve_message_by_id,
)
from chatter.graphql.types.message import MessageType
from chatter.notifications import PushDeliveryError, PushDispatcher
from chatter.notifications.models import ExpoPushTicket

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def sender(user_id):
    return Users(id=user_id, auth_provider="none", auth_subject="u1", name="User One")


@pytest.fixture
def channel_row():
    return Channels(
        id=uuid.uuid4(),
        channel_type="private",
        name="trio",
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
    )


@pytest.fixture
def mock_session(user_id):
    with (
        patch("chatter.graphql.resolvers.message.get_async_session") as mock_get_session,
        patch(
            "chatter.graphql.resolvers.message.require_user_id",
            AsyncMock(return_value=user_id),
        ),
    ):
        session = AsyncMock()
        session.add = MagicMock()
        mock_get_session.return_value.__aenter__.return_value = session
        yield session


@pytest.fixture
def push_client():
    client = MagicMock()
    client.send = AsyncMock(return_value=ExpoPushTicket(status="ok", id="ticket"))
    return client


@pytest.fixture
def dispatcher(mock_info, push_client):
    dispatcher = PushDispatcher(client=push_client, enabled=True)
    mock_info.context["push_dispatcher"] = dispatcher
    return dispatcher


@pytest.fixture
def receivers():
    with patch(
        "chatter.graphql.resolvers.message.get_receivers_push_tokens",
        AsyncMock(return_value=["token-u2", "token-u3"]),
    ) as mock_receivers:
        yield mock_receivers


def prepare_create(mock_session, channel_row, sender):
    mock_session.get.side_effect = [channel_row, sender]

    async def assign_id():
        message = mock_session.add.call_args.args[0]
        message.id = uuid.uuid4()

    mock_session.flush.side_effect = assign_id


class TestCreateMessage:
    @pytest.mark.asyncio
    async def test_creates_message_and_moves_channel_pointer(
        self, mock_info, mock_session, channel_row, sender, dispatcher, receivers
    ):
        prepare_create(mock_session, channel_row, sender)

        result = await create_message(
            mock_info, str(channel_row.id), MessageCreateInput(text="hi")
        )

        stored = mock_session.add.call_args.args[0]
        assert isinstance(stored, Messages)
        assert stored.sender_id == sender.id
        assert stored.channel_id == channel_row.id
        assert stored.image_urls == []
        assert stored.file_urls == []
        assert channel_row.last_message_id == stored.id
        assert channel_row.updated_at == stored.created_at

        assert result.id == str(stored.id)
        assert result.message_type == MessageType.TEXT
        assert result.sender.name == "User One"
        receivers.assert_awaited_once_with(mock_session, channel_row.id, sender.id)

        await dispatcher.drain()

    @pytest.mark.asyncio
    async def test_one_push_per_other_member(
        self, mock_info, mock_session, channel_row, sender, dispatcher, push_client, receivers
    ):
        prepare_create(mock_session, channel_row, sender)

        result = await create_message(
            mock_info, str(channel_row.id), MessageCreateInput(text="hi")
        )
        await dispatcher.drain()

        assert push_client.send.await_count == 2
        sent = [call.args[0] for call in push_client.send.await_args_list]
        assert {m.to for m in sent} == {"token-u2", "token-u3"}
        for message in sent:
            assert message.title == "User One"
            assert message.body == "hi"
            assert message.sound == "default"
            assert json.loads(message.data["data"]) == {
                "messageId": result.id,
                "channelId": str(channel_row.id),
            }
        assert dispatcher.stats.sent == 2

    @pytest.mark.asyncio
    async def test_photo_message_uses_placeholder_body(
        self, mock_info, mock_session, channel_row, sender, dispatcher, push_client, receivers
    ):
        prepare_create(mock_session, channel_row, sender)

        await create_message(
            mock_info,
            str(channel_row.id),
            MessageCreateInput(message_type=MessageType.PHOTO, image_urls=["https://x/a.png"]),
        )
        await dispatcher.drain()

        bodies = {call.args[0].body for call in push_client.send.await_args_list}
        assert bodies == {"Sent a photo."}

    @pytest.mark.asyncio
    async def test_push_failures_do_not_fail_the_mutation(
        self, mock_info, mock_session, channel_row, sender, dispatcher, push_client, receivers
    ):
        prepare_create(mock_session, channel_row, sender)
        push_client.send.side_effect = [
            PushDeliveryError("gateway down", status_code=503),
            ExpoPushTicket(status="ok"),
        ]

        result = await create_message(
            mock_info, str(channel_row.id), MessageCreateInput(text="still here")
        )
        await dispatcher.drain()

        assert result.text == "still here"
        assert dispatcher.stats.failed == 1
        assert dispatcher.stats.sent == 1

    @pytest.mark.asyncio
    async def test_unknown_channel(self, mock_info, mock_session, dispatcher):
        mock_session.get.return_value = None

        with pytest.raises(NotFoundError):
            await create_message(mock_info, str(uuid.uuid4()), MessageCreateInput(text="hi"))

        mock_session.add.assert_not_called()
        assert dispatcher.pending == 0


def stored_message(sender, channel_id, **kwargs):
    return Messages(
        id=kwargs.pop("id", uuid.uuid4()),
        message_type="text",
        text="to be removed",
        image_urls=[],
        file_urls=[],
        sender_id=sender.id,
        sender=sender,
        channel_id=channel_id,
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
        deleted_at=kwargs.pop("deleted_at", None),
    )


def scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestDeleteMessage:
    @pytest.mark.asyncio
    async def test_soft_deletes_and_repoints_channel(
        self, mock_info, mock_session, channel_row, sender
    ):
        message = stored_message(sender, channel_row.id)
        previous_id = uuid.uuid4()
        channel_row.last_message_id = message.id
        mock_session.execute.side_effect = [scalar_result(message), scalar_result(previous_id)]
        mock_session.get.return_value = channel_row

        result = await delete_message(mock_info, str(message.id))

        assert message.deleted_at is not None
        assert result.deleted_at == message.deleted_at
        assert result.sender.name == "User One"
        assert channel_row.last_message_id == previous_id
        mock_session.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_last_remaining_message_clears_pointer(
        self, mock_info, mock_session, channel_row, sender
    ):
        message = stored_message(sender, channel_row.id)
        channel_row.last_message_id = message.id
        mock_session.execute.side_effect = [scalar_result(message), scalar_result(None)]
        mock_session.get.return_value = channel_row

        await delete_message(mock_info, str(message.id))

        assert channel_row.last_message_id is None

    @pytest.mark.asyncio
    async def test_older_message_leaves_pointer(
        self, mock_info, mock_session, channel_row, sender
    ):
        message = stored_message(sender, channel_row.id)
        newest_id = uuid.uuid4()
        channel_row.last_message_id = newest_id
        mock_session.execute.side_effect = [scalar_result(message)]
        mock_session.get.return_value = channel_row

        await delete_message(mock_info, str(message.id))

        assert channel_row.last_message_id == newest_id
        assert mock_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_message(self, mock_info, mock_session):
        mock_session.execute.return_value = scalar_result(None)

        with pytest.raises(NotFoundError):
            await delete_message(mock_info, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_only_sender_can_delete(self, mock_info, mock_session, channel_row):
        someone_else = Users(id=uuid.uuid4(), auth_provider="none", auth_subject="u2")
        message = stored_message(someone_else, channel_row.id)
        mock_session.execute.return_value = scalar_result(message)

        with pytest.raises(AuthorizationError):
            await delete_message(mock_info, str(message.id))

        assert message.deleted_at is None

    @pytest.mark.asyncio
    async def test_deleted_message_still_readable_by_id(
        self, mock_info, mock_session, channel_row, sender
    ):
        message = stored_message(sender, channel_row.id, deleted_at=BASE_TIME)
        mock_session.execute.return_value = scalar_result(message)

        result = await resolve_message_by_id(mock_info, str(message.id))

        assert result.id == str(message.id)
        assert result.deleted_at == BASE_TIME
