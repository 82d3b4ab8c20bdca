"""Tests for push notification building, delivery and fan-out."""

import asyncio
import json
import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from sqlalchemy.dialects import postgresql

from chatter.config import Settings
from chatter.dbmodels import Messages
from chatter.notifications import (
    ExpoMessage,
    ExpoPushClient,
    PushDeliveryError,
    PushDispatcher,
    build_message_notifications,
    get_receivers_push_tokens,
)
from chatter.notifications.models import ExpoPushTicket


def make_message(**kwargs):
    return Messages(
        id=uuid.uuid4(),
        channel_id=uuid.uuid4(),
        sender_id=uuid.uuid4(),
        message_type=kwargs.pop("message_type", "text"),
        text=kwargs.pop("text", None),
        image_urls=[],
        file_urls=[],
    )


class TestReceivers:
    @pytest.mark.asyncio
    async def test_tokens_of_members_except_sender(self):
        session = AsyncMock()
        result = MagicMock()
        result.scalars.return_value.all.return_value = ["token-u2", "token-u3"]
        session.execute.return_value = result
        channel_id, sender_id = uuid.uuid4(), uuid.uuid4()

        tokens = await get_receivers_push_tokens(session, channel_id, sender_id)

        assert tokens == ["token-u2", "token-u3"]
        stmt = session.execute.call_args.args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert "JOIN memberships ON memberships.user_id = notifications.user_id" in sql
        assert "memberships.user_id !=" in sql
        params = stmt.compile().params
        assert channel_id in params.values()
        assert sender_id in params.values()


class TestBuildNotifications:
    def test_text_message(self):
        message = make_message(text="hello there")

        [push] = build_message_notifications(message, ["tok"], "Alice")

        assert push.to == "tok"
        assert push.title == "Alice"
        assert push.body == "hello there"
        assert push.sound == "default"
        assert json.loads(push.data["data"]) == {
            "messageId": str(message.id),
            "channelId": str(message.channel_id),
        }

    @pytest.mark.parametrize(
        "message_type,locale,body",
        [
            ("photo", "en", "Sent a photo."),
            ("file", "en", "Sent a file."),
            ("photo", "ko", "사진을 보냈습니다."),
            ("file", "xx", "Sent a file."),
        ],
    )
    def test_media_placeholders(self, message_type, locale, body):
        message = make_message(message_type=message_type, text="ignored")

        [push] = build_message_notifications(message, ["tok"], "Alice", locale=locale)

        assert push.body == body

    def test_one_message_per_token(self):
        pushes = build_message_notifications(make_message(text="x"), ["a", "b", "c"], None)

        assert [p.to for p in pushes] == ["a", "b", "c"]


def make_client(handler, **settings_overrides):
    config = Settings(expo_push_url="https://push.test/send", **settings_overrides)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ExpoPushClient(config=config, http_client=http_client)


class TestExpoPushClient:
    @pytest.mark.asyncio
    async def test_posts_message_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"status": "ok", "id": "abc"}})

        client = make_client(handler, expo_access_token="secret")
        ticket = await client.send(
            ExpoMessage(to="ExponentPushToken[x]", title="Alice", body="hi", data={"data": "{}"})
        )
        await client.aclose()

        assert ticket.id == "abc"
        assert seen["url"] == "https://push.test/send"
        assert seen["headers"]["authorization"] == "Bearer secret"
        assert seen["headers"]["accept"] == "application/json"
        assert seen["body"] == {
            "to": "ExponentPushToken[x]",
            "sound": "default",
            "title": "Alice",
            "body": "hi",
            "data": {"data": "{}"},
        }

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        client = make_client(lambda request: httpx.Response(502, text="bad gateway"))

        with pytest.raises(PushDeliveryError) as exc_info:
            await client.send(ExpoMessage(to="tok"))

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_rejected_ticket_raises(self):
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={"data": {"status": "error", "message": "DeviceNotRegistered"}},
            )
        )

        with pytest.raises(PushDeliveryError, match="DeviceNotRegistered"):
            await client.send(ExpoMessage(to="tok"))

    @pytest.mark.asyncio
    async def test_non_ticket_body_raises_delivery_error(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>proxy error</html>"))

        with pytest.raises(PushDeliveryError, match="Unreadable") as exc_info:
            await client.send(ExpoMessage(to="tok"))

        assert exc_info.value.status_code == 200

    @pytest.mark.asyncio
    async def test_unexpected_ticket_shape_raises_delivery_error(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": [1, 2]}))

        with pytest.raises(PushDeliveryError):
            await client.send(ExpoMessage(to="tok"))


class TestPushDispatcher:
    @pytest.mark.asyncio
    async def test_dispatch_is_detached(self):
        release = asyncio.Event()
        push_client = MagicMock()

        async def slow_send(message):
            await release.wait()
            return ExpoPushTicket(status="ok")

        push_client.send = AsyncMock(side_effect=slow_send)
        dispatcher = PushDispatcher(client=push_client, enabled=True)

        task = dispatcher.dispatch([ExpoMessage(to="a"), ExpoMessage(to="b")])

        assert task is not None
        assert dispatcher.pending == 1
        release.set()
        await dispatcher.drain()
        assert dispatcher.pending == 0
        assert dispatcher.stats.sent == 2

    @pytest.mark.asyncio
    async def test_each_send_is_isolated(self):
        push_client = MagicMock()
        push_client.send = AsyncMock(
            side_effect=[
                httpx.ConnectError("boom"),
                ExpoPushTicket(status="ok"),
                PushDeliveryError("rejected"),
            ]
        )
        dispatcher = PushDispatcher(client=push_client, enabled=True)

        dispatcher.dispatch([ExpoMessage(to=t) for t in ("a", "b", "c")])
        await dispatcher.drain()

        assert push_client.send.await_count == 3
        assert dispatcher.stats.sent == 1
        assert dispatcher.stats.failed == 2

    @pytest.mark.asyncio
    async def test_empty_or_disabled_dispatch_schedules_nothing(self):
        push_client = MagicMock()
        push_client.send = AsyncMock()

        assert PushDispatcher(client=push_client, enabled=True).dispatch([]) is None
        disabled = PushDispatcher(client=push_client, enabled=False)
        assert disabled.dispatch([ExpoMessage(to="a")]) is None
        push_client.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_close_drains_and_closes_client(self):
        push_client = MagicMock()
        push_client.send = AsyncMock(return_value=ExpoPushTicket(status="ok"))
        push_client.aclose = AsyncMock()
        dispatcher = PushDispatcher(client=push_client, enabled=True)

        dispatcher.dispatch([ExpoMessage(to="a")])
        await dispatcher.close()

        assert dispatcher.stats.sent == 1
        push_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unreadable_response_does_not_stop_the_fan_out(self):
        requested = []

        def handler(request):
            token = json.loads(request.content)["to"]
            requested.append(token)
            if token == "first":
                return httpx.Response(200, text="<html>proxy error</html>")
            return httpx.Response(200, json={"data": {"status": "ok", "id": "t-2"}})

        dispatcher = PushDispatcher(client=make_client(handler), enabled=True)

        dispatcher.dispatch([ExpoMessage(to="first"), ExpoMessage(to="second")])
        await dispatcher.drain()

        assert requested == ["first", "second"]
        assert dispatcher.stats.sent == 1
        assert dispatcher.stats.failed == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_is_counted(self):
        push_client = MagicMock()
        push_client.send = AsyncMock(side_effect=[RuntimeError("bug"), ExpoPushTicket(status="ok")])
        dispatcher = PushDispatcher(client=push_client, enabled=True)

        task = dispatcher.dispatch([ExpoMessage(to="a"), ExpoMessage(to="b")])
        await dispatcher.drain()

        assert task.exception() is None
        assert (dispatcher.stats.sent, dispatcher.stats.failed) == (1, 1)

    @pytest.mark.asyncio
    async def test_finish_log_reports_counts_of_that_fan_out(self):
        push_client = MagicMock()
        push_client.send = AsyncMock(return_value=ExpoPushTicket(status="ok"))
        dispatcher = PushDispatcher(client=push_client, enabled=True)

        with patch("chatter.notifications.dispatcher.logger") as logger:
            dispatcher.dispatch([ExpoMessage(to="a"), ExpoMessage(to="b")])
            await dispatcher.drain()
            dispatcher.dispatch([ExpoMessage(to="c")])
            await dispatcher.drain()

        finished = [c.kwargs for c in logger.info.call_args_list if c.args[0].endswith("finished")]
        assert finished == [
            {"count": 2, "sent": 2, "failed": 0},
            {"count": 1, "sent": 1, "failed": 0},
        ]
        assert dispatcher.stats.sent == 3
