"""Unit tests for the Slack chat clients."""

from __future__ import annotations

import typing as typ
from unittest import mock

import aiohttp
import pytest
from slack_sdk.errors import SlackApiError

from ci_notify.errors import ChatAPIError
from ci_notify.slack.client import (
    ChatClient,
    MockChatClient,
    PostedMessage,
    SlackChatClient,
)


def _api_error(code: str) -> SlackApiError:
    return SlackApiError(f"The request failed: {code}", {"ok": False, "error": code})


def _client(**methods: typ.Any) -> tuple[SlackChatClient, mock.AsyncMock]:
    web_client = mock.AsyncMock()
    for name, value in methods.items():
        setattr(web_client, name, value)
    return SlackChatClient("xoxb-test", web_client=web_client), web_client


class TestLookupUserId:
    """Tests for SlackChatClient.lookup_user_id."""

    @pytest.mark.asyncio
    async def test_returns_user_id(self) -> None:
        """The id of the matching user is returned."""
        client, web = _client(
            users_lookupByEmail=mock.AsyncMock(
                return_value={"ok": True, "user": {"id": "U123"}}
            )
        )

        assert await client.lookup_user_id("dev@example.com") == "U123"
        web.users_lookupByEmail.assert_awaited_once_with(email="dev@example.com")

    @pytest.mark.asyncio
    async def test_users_not_found_is_none(self) -> None:
        """Slack's users_not_found error means no such user."""
        client, _ = _client(
            users_lookupByEmail=mock.AsyncMock(
                side_effect=_api_error("users_not_found")
            )
        )

        assert await client.lookup_user_id("ghost@example.com") is None

    @pytest.mark.asyncio
    async def test_other_api_errors_raise(self) -> None:
        """Other Slack errors keep their error code."""
        client, _ = _client(
            users_lookupByEmail=mock.AsyncMock(side_effect=_api_error("invalid_auth"))
        )

        with pytest.raises(ChatAPIError) as exc:
            await client.lookup_user_id("dev@example.com")

        assert exc.value.error_code == "invalid_auth"

    @pytest.mark.asyncio
    async def test_transport_errors_raise(self) -> None:
        """Connection failures are wrapped as ChatAPIError."""
        client, _ = _client(
            users_lookupByEmail=mock.AsyncMock(
                side_effect=aiohttp.ClientConnectionError("reset")
            )
        )

        with pytest.raises(ChatAPIError) as exc:
            await client.lookup_user_id("dev@example.com")

        assert exc.value.error_code is None
        assert "transport error" in str(exc.value)

    @pytest.mark.asyncio
    async def test_response_without_user_is_none(self) -> None:
        """A response lacking a user object yields no id."""
        client, _ = _client(
            users_lookupByEmail=mock.AsyncMock(return_value={"ok": True})
        )

        assert await client.lookup_user_id("dev@example.com") is None


class TestPostMessage:
    """Tests for SlackChatClient.post_message."""

    @pytest.mark.asyncio
    async def test_posts_without_unfurling(self) -> None:
        """Messages are posted with link unfurling disabled."""
        client, web = _client(
            chat_postMessage=mock.AsyncMock(
                return_value={"ok": True, "channel": "C042", "ts": "1.000100"}
            )
        )

        posted = await client.post_message("ops-alerts", "hello")

        assert posted == PostedMessage(channel="C042", ts="1.000100")
        web.chat_postMessage.assert_awaited_once_with(
            channel="ops-alerts", text="hello", unfurl_links=False
        )

    @pytest.mark.asyncio
    async def test_api_error_raises(self) -> None:
        """Rejected posts raise ChatAPIError with the Slack code."""
        client, _ = _client(
            chat_postMessage=mock.AsyncMock(
                side_effect=_api_error("channel_not_found")
            )
        )

        with pytest.raises(ChatAPIError) as exc:
            await client.post_message("nowhere", "hello")

        assert exc.value.error_code == "channel_not_found"

    @pytest.mark.asyncio
    async def test_missing_timestamp_raises(self) -> None:
        """A response without ts cannot be reported and is an error."""
        client, _ = _client(
            chat_postMessage=mock.AsyncMock(return_value={"ok": True})
        )

        with pytest.raises(ChatAPIError):
            await client.post_message("ops-alerts", "hello")


class TestMockChatClient:
    """Tests for the dry-run chat client."""

    @pytest.mark.asyncio
    async def test_records_posts_with_increasing_timestamps(self) -> None:
        """Each post is recorded and gets a distinct timestamp."""
        client = MockChatClient()

        first = await client.post_message("U00MOCK000", "one")
        second = await client.post_message("ops-alerts", "two")

        assert first.ts < second.ts
        assert second.channel == "ops-alerts"
        assert client.posted == [("U00MOCK000", "one"), ("ops-alerts", "two")]

    def test_satisfies_chat_protocol(self) -> None:
        """Both clients implement the ChatClient protocol."""
        assert isinstance(MockChatClient(), ChatClient)
        assert isinstance(SlackChatClient("x", web_client=mock.AsyncMock()), ChatClient)
