"""Slack chat clients.

:class:`SlackChatClient` wraps the Slack SDK's async web client and converts
its failures into :class:`~ci_notify.errors.ChatAPIError`.
:class:`MockChatClient` implements the same protocol without network access
for dry runs.
"""

from __future__ import annotations

import dataclasses
import itertools
import typing as typ

import aiohttp
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from ci_notify.errors import ChatAPIError
from ci_notify.logging import get_logger, log_info

logger = get_logger(__name__)

_USER_NOT_FOUND = "users_not_found"


@dataclasses.dataclass(frozen=True, slots=True)
class PostedMessage:
    """Identifiers Slack assigns to a posted message."""

    channel: str
    ts: str


@typ.runtime_checkable
class ChatClient(typ.Protocol):
    """Chat operations needed to notify commit authors."""

    async def lookup_user_id(self, email: str) -> str | None:
        """Return the Slack user id registered with ``email``, if any."""
        ...

    async def post_message(self, channel: str, text: str) -> PostedMessage:
        """Post ``text`` to a channel name, channel id or user id."""
        ...


def _slack_error_code(exc: SlackApiError) -> str:
    response = exc.response
    code = response.get("error") if response is not None else None
    return code if isinstance(code, str) else "unknown_error"


class SlackChatClient:
    """Slack Web API implementation of :class:`ChatClient`.

    Parameters
    ----------
    token
        Bot token used to authenticate against the Web API.
    web_client
        Optional pre-built ``AsyncWebClient``, mainly for tests.

    """

    def __init__(
        self,
        token: str,
        *,
        web_client: AsyncWebClient | None = None,
    ) -> None:
        """Initialise the client with a bot token or an existing web client."""
        self._client = web_client or AsyncWebClient(token=token)

    async def lookup_user_id(self, email: str) -> str | None:
        """Return the Slack user id for ``email``.

        Returns
        -------
        str | None
            The user id, or ``None`` when Slack reports ``users_not_found`` or
            the response carries no id.

        Raises
        ------
        ChatAPIError
            For any other API or transport failure.

        """
        method = "users.lookupByEmail"
        try:
            response = await self._client.users_lookupByEmail(email=email)
        except SlackApiError as exc:
            code = _slack_error_code(exc)
            if code == _USER_NOT_FOUND:
                return None
            raise ChatAPIError.api_error(method, code) from exc
        except (SlackClientError, aiohttp.ClientError, TimeoutError) as exc:
            raise ChatAPIError.transport_error(method, str(exc)) from exc

        user = response.get("user")
        if not isinstance(user, dict):
            return None
        user_id = user.get("id")
        return user_id if isinstance(user_id, str) and user_id else None

    async def post_message(self, channel: str, text: str) -> PostedMessage:
        """Post ``text`` to ``channel`` with link unfurling disabled.

        Raises
        ------
        ChatAPIError
            When Slack rejects the message or the request fails.

        """
        method = "chat.postMessage"
        try:
            response = await self._client.chat_postMessage(
                channel=channel,
                text=text,
                unfurl_links=False,
            )
        except SlackApiError as exc:
            raise ChatAPIError.api_error(method, _slack_error_code(exc)) from exc
        except (SlackClientError, aiohttp.ClientError, TimeoutError) as exc:
            raise ChatAPIError.transport_error(method, str(exc)) from exc

        posted_channel = response.get("channel")
        ts = response.get("ts")
        if not isinstance(ts, str):
            raise ChatAPIError.api_error(method, "missing_ts")
        return PostedMessage(
            channel=posted_channel if isinstance(posted_channel, str) else channel,
            ts=ts,
        )


class MockChatClient:
    """Offline :class:`ChatClient` that logs messages instead of sending them.

    Every email resolves to the same user id and every post returns a
    monotonically increasing timestamp, so dry runs exercise the whole
    pipeline, including output writing, without a Slack workspace.

    Examples
    --------
    >>> import asyncio
    >>> client = MockChatClient()
    >>> asyncio.run(client.lookup_user_id("dev@example.com"))
    'U00MOCK000'

    """

    def __init__(self, user_id: str = "U00MOCK000") -> None:
        """Initialise the mock with the user id returned for every email."""
        self._user_id = user_id
        self._counter = itertools.count(1)
        self.posted: list[tuple[str, str]] = []

    async def lookup_user_id(self, email: str) -> str | None:
        """Return the configured mock user id."""
        log_info(logger, "[dry-run] Slack user lookup for %s", email)
        return self._user_id

    async def post_message(self, channel: str, text: str) -> PostedMessage:
        """Record the message and return synthetic identifiers."""
        self.posted.append((channel, text))
        log_info(logger, "[dry-run] Slack message to %s: %s", channel, text)
        ts = f"1700000000.{next(self._counter):06d}"
        return PostedMessage(channel=channel, ts=ts)


__all__ = ["ChatClient", "MockChatClient", "PostedMessage", "SlackChatClient"]
