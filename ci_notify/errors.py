"""Configuration and chat delivery errors."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class NotifierConfigError(Exception):
    """Raised when required inputs are missing or invalid.

    Configuration errors are fatal: the CLI reports them and exits before any
    network call is attempted.
    """

    @classmethod
    def missing_input(cls, name: str) -> NotifierConfigError:
        """Return an error for a required input that was not supplied."""
        return cls(f"Input required and not supplied: {name}")

    @classmethod
    def missing_inputs(cls, names: cabc.Sequence[str]) -> NotifierConfigError:
        """Return an error listing every missing required input."""
        if len(names) == 1:
            return cls.missing_input(names[0])
        joined = ", ".join(names)
        return cls(f"Inputs required and not supplied: {joined}")


class ChatError(Exception):
    """Base exception for Slack delivery failures."""


class ChatAPIError(ChatError):
    """Raised when the Slack API or its transport returns an error.

    Attributes
    ----------
    error_code
        Slack ``error`` field (for example ``channel_not_found``), if known.

    """

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        """Initialise with a message and optional Slack error code."""
        self.error_code = error_code
        super().__init__(message)

    @classmethod
    def api_error(cls, method: str, error_code: str) -> ChatAPIError:
        """Return an error for a Slack ``ok: false`` response."""
        return cls(f"Slack {method} failed: {error_code}", error_code=error_code)

    @classmethod
    def transport_error(cls, method: str, detail: str) -> ChatAPIError:
        """Return an error for network or client failures."""
        return cls(f"Slack {method} transport error: {detail}")


class ChatDispatchError(ChatError):
    """Raised when a dispatch path cannot deliver its message."""

    @classmethod
    def user_not_found(cls, email: str) -> ChatDispatchError:
        """Return an error when no Slack user matches an email."""
        return cls(f"No Slack user found for {email}")

    @classmethod
    def lookup_failed(cls, email: str, cause: BaseException) -> ChatDispatchError:
        """Return an error when the Slack user lookup itself failed."""
        return cls(f"Slack user lookup failed for {email}: {cause}")

    @classmethod
    def post_failed(cls, target: str, cause: BaseException) -> ChatDispatchError:
        """Return an error when posting the message failed."""
        return cls(f"Posting message to {target} failed: {cause}")


__all__ = [
    "ChatAPIError",
    "ChatDispatchError",
    "ChatError",
    "NotifierConfigError",
]
