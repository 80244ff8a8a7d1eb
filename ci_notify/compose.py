"""Slack message composition for CI status notifications.

The composers are pure functions over :class:`~ci_notify.models.Commit` and
:class:`~ci_notify.models.CommitStatus`. Only :func:`build_author_mention`
performs I/O, and it never fails: when the Slack lookup errors or finds no
user the author is rendered as a plain GitHub profile link.
"""

from __future__ import annotations

import typing as typ

from ci_notify.errors import ChatAPIError
from ci_notify.github.urls import DEFAULT_SERVER_URL, profile_url
from ci_notify.logging import get_logger, log_info
from ci_notify.models import ConclusionKind

if typ.TYPE_CHECKING:
    from ci_notify.models import Commit, CommitStatus
    from ci_notify.slack.client import ChatClient

logger = get_logger(__name__)

_STATUS_PRESENTATION: dict[ConclusionKind, tuple[str, str]] = {
    ConclusionKind.SUCCESS: (":large_green_circle:", "was successful"),
    ConclusionKind.FAILURE: (":red_circle:", "failed"),
    ConclusionKind.UNKNOWN: (":question:", "has unknown status"),
}


def escape_mrkdwn(text: str) -> str:
    """Escape the characters Slack reserves in mrkdwn text.

    >>> escape_mrkdwn("a < b & c")
    'a &lt; b &amp; c'

    """
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _link(url: str, label: str) -> str:
    return f"<{url}|{escape_mrkdwn(label)}>"


def _commit_link(commit: Commit) -> str:
    return f'<{commit.url}|"_{escape_mrkdwn(commit.title)}_">'


def render_author_mention(
    username: str,
    user_id: str | None,
    *,
    server_url: str = DEFAULT_SERVER_URL,
    fallback: str = "",
) -> str:
    """Render the commit author for a Slack message.

    Parameters
    ----------
    username
        GitHub login of the commit author; may be empty.
    user_id
        Slack user id, or ``None`` when the author could not be found.
    server_url
        GitHub server used to build the profile link.
    fallback
        Text shown when there is neither a login nor a user id, usually the
        commit email.

    Returns
    -------
    str
        ``<@U123> (<https://github.com/octocat|octocat>)`` when a user id is
        known, otherwise just the profile link. Without a login only the
        mention, or the escaped fallback, is rendered.

    >>> render_author_mention("", "U123")
    '<@U123>'
    >>> render_author_mention("", None, fallback="dev@example.com")
    'dev@example.com'

    """
    if not username:
        return f"<@{user_id}>" if user_id else escape_mrkdwn(fallback)
    github_link = _link(profile_url(server_url, username), username)
    if user_id:
        return f"<@{user_id}> ({github_link})"
    return github_link


async def build_author_mention(
    chat: ChatClient,
    email: str,
    username: str,
    *,
    server_url: str = DEFAULT_SERVER_URL,
) -> str:
    """Look up the author in Slack and render a mention or a profile link."""
    user_id: str | None = None
    try:
        user_id = await chat.lookup_user_id(email)
    except ChatAPIError as exc:
        log_info(
            logger,
            "Got error getting Slack user by email, defaulting to GitHub link: %s",
            exc,
        )
    else:
        if user_id is None:
            log_info(logger, "No Slack user for %s, defaulting to GitHub link", email)
    return render_author_mention(
        username, user_id, server_url=server_url, fallback=email
    )


def compose_failure_notice(
    commit: Commit, status: CommitStatus, author_mention: str
) -> str:
    """Compose the channel broadcast for a failed pipeline step."""
    return (
        f":warning: The commit {_commit_link(commit)} by {author_mention} "
        f"has failed the pipeline step {_link(status.url, status.name)}"
    )


def compose_status_summary(commit: Commit, status: CommitStatus) -> str:
    """Compose the direct message summarising a pipeline step outcome.

    Unrecognised conclusions are rendered with a question mark and logged.
    """
    kind = status.kind
    if kind is ConclusionKind.UNKNOWN:
        log_info(logger, "Got unknown commit status: %s", status.conclusion)
    emoji, description = _STATUS_PRESENTATION[kind]
    return (
        f"{emoji} The CI job {_link(status.url, status.name)} "
        f"for {_commit_link(commit)} {description}"
    )


__all__ = [
    "build_author_mention",
    "compose_failure_notice",
    "compose_status_summary",
    "escape_mrkdwn",
    "render_author_mention",
]
