"""Message delivery to Slack users and channels."""

from __future__ import annotations

import typing as typ

from ci_notify.errors import ChatAPIError, ChatDispatchError
from ci_notify.logging import get_logger, log_debug, log_info
from ci_notify.models import DispatchResult

if typ.TYPE_CHECKING:
    from .client import ChatClient

logger = get_logger(__name__)


async def send_to_user(chat: ChatClient, email: str, text: str) -> DispatchResult:
    """Send ``text`` as a direct message to the Slack user owning ``email``.

    Unlike mention rendering, the user lookup here is not best-effort: a
    failed or empty lookup abandons the whole dispatch.

    Returns
    -------
    DispatchResult
        The recipient user id and the message timestamp.

    Raises
    ------
    ChatDispatchError
        If the user cannot be resolved or the message cannot be posted.

    """
    try:
        user_id = await chat.lookup_user_id(email)
    except ChatAPIError as exc:
        raise ChatDispatchError.lookup_failed(email, exc) from exc
    if user_id is None:
        raise ChatDispatchError.user_not_found(email)

    log_debug(logger, "Sending message to %s: %s", user_id, text)
    try:
        posted = await chat.post_message(user_id, text)
    except ChatAPIError as exc:
        raise ChatDispatchError.post_failed(f"user {user_id}", exc) from exc

    log_info(logger, "Message sent to user %s at %s", user_id, posted.ts)
    return DispatchResult(target_id=user_id, timestamp=posted.ts)


async def send_to_channel(chat: ChatClient, channel: str, text: str) -> DispatchResult:
    """Broadcast ``text`` to ``channel``.

    Returns
    -------
    DispatchResult
        The channel id Slack resolved the name to and the message timestamp.

    Raises
    ------
    ChatDispatchError
        If the message cannot be posted.

    """
    try:
        posted = await chat.post_message(channel, text)
    except ChatAPIError as exc:
        raise ChatDispatchError.post_failed(f"channel {channel}", exc) from exc

    log_info(logger, "Message sent to channel %s at %s", posted.channel, posted.ts)
    return DispatchResult(target_id=posted.channel, timestamp=posted.ts)
