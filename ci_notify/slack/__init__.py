"""Slack delivery for CI notifications."""

from __future__ import annotations

from .client import ChatClient, MockChatClient, PostedMessage, SlackChatClient
from .dispatch import send_to_channel, send_to_user

__all__ = [
    "ChatClient",
    "MockChatClient",
    "PostedMessage",
    "SlackChatClient",
    "send_to_channel",
    "send_to_user",
]
