"""Notification run orchestration.

A run is strictly linear::

    ResolveIdentity -> MaybeSendDirect -> MaybeSendChannel -> Done

Input loading happens before the runner exists (see
:meth:`ci_notify.config.NotifierConfig.from_env`). Each dispatch path is
best-effort: a failure is logged and the other path still runs.

Step outputs use distinct keys per path, so a run that sends both a direct
message and a channel broadcast reports both results.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from ci_notify.compose import (
    build_author_mention,
    compose_failure_notice,
    compose_status_summary,
)
from ci_notify.errors import ChatDispatchError
from ci_notify.identity import ResolutionRequest, resolve_author_email
from ci_notify.logging import get_logger, log_error, log_info
from ci_notify.models import RunReport
from ci_notify.slack.dispatch import send_to_channel, send_to_user

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ci_notify.config import NotifierConfig
    from ci_notify.identity import ResolutionStrategy, ResolvedEmail
    from ci_notify.models import Commit, CommitStatus, DispatchResult
    from ci_notify.outputs import ActionOutputs
    from ci_notify.slack.client import ChatClient

logger = get_logger(__name__)

DIRECT_MESSAGE_ID = "direct_message_id"
DIRECT_USER_ID = "direct_user_id"
CHANNEL_MESSAGE_ID = "channel_message_id"
CHANNEL_ID = "channel_id"


class NotificationRunner:
    """Resolve the commit author and deliver the configured notifications.

    Parameters
    ----------
    config
        Validated run configuration.
    chat
        Slack client used for lookups and delivery.
    strategies
        Ordered email resolution strategies.
    outputs
        Writer for step outputs.

    """

    def __init__(
        self,
        config: NotifierConfig,
        *,
        chat: ChatClient,
        strategies: cabc.Sequence[ResolutionStrategy],
        outputs: ActionOutputs,
    ) -> None:
        """Store the collaborators for a single run."""
        self._config = config
        self._chat = chat
        self._strategies = list(strategies)
        self._outputs = outputs

    async def run(self) -> RunReport:
        """Execute the run and return a record of what was delivered."""
        config = self._config
        resolved = await self._resolve_identity(config.commit)
        commit = config.commit.with_author_email(resolved.email)
        status = config.status

        direct: DispatchResult | None = None
        if config.send_to_user:
            direct = await self._maybe_send_direct(commit, status)

        channel: DispatchResult | None = None
        if config.channel and status.failed:
            channel = await self._maybe_send_channel(
                config.channel, commit, status, resolved.login
            )
        elif config.channel:
            log_info(
                logger,
                "Conclusion %r is not a failure, skipping channel %s",
                status.conclusion,
                config.channel,
            )

        if direct is not None and channel is not None:
            log_info(
                logger,
                "Sent both direct and channel messages; outputs %s/%s and %s/%s",
                DIRECT_MESSAGE_ID,
                DIRECT_USER_ID,
                CHANNEL_MESSAGE_ID,
                CHANNEL_ID,
            )

        return RunReport(
            commit=commit,
            email_source=resolved.source,
            direct=direct,
            channel=channel,
        )

    async def _resolve_identity(self, commit: Commit) -> ResolvedEmail:
        request = ResolutionRequest(
            org=self._config.github_org,
            username=commit.author_username,
            commit_url=commit.url,
        )
        return await resolve_author_email(
            self._strategies, request, fallback_email=commit.author_email
        )

    async def _maybe_send_direct(
        self, commit: Commit, status: CommitStatus
    ) -> DispatchResult | None:
        log_info(logger, "Sending message to user %s", commit.author_email)
        message = compose_status_summary(commit, status)
        try:
            result = await send_to_user(self._chat, commit.author_email, message)
        except ChatDispatchError as exc:
            log_error(logger, "Failed to send message to user: %s", exc)
            return None

        self._outputs.set_outputs(
            {DIRECT_MESSAGE_ID: result.timestamp, DIRECT_USER_ID: result.target_id}
        )
        return result

    async def _maybe_send_channel(
        self, channel: str, commit: Commit, status: CommitStatus, login: str
    ) -> DispatchResult | None:
        log_info(logger, "Sending message to channel %s", channel)
        mention = await build_author_mention(
            self._chat,
            commit.author_email,
            login,
            server_url=self._config.server_url,
        )
        message = compose_failure_notice(commit, status, mention)
        try:
            result = await send_to_channel(self._chat, channel, message)
        except ChatDispatchError as exc:
            log_error(logger, "Failed to send message to channel: %s", exc)
            return None

        self._outputs.set_outputs(
            {CHANNEL_MESSAGE_ID: result.timestamp, CHANNEL_ID: result.target_id}
        )
        return result


def summarize(report: RunReport) -> dict[str, object]:
    """Return a loggable summary of a run report."""
    return {
        "commit": report.commit.url,
        "email_source": str(report.email_source),
        "direct": dataclasses.asdict(report.direct) if report.direct else None,
        "channel": dataclasses.asdict(report.channel) if report.channel else None,
    }


__all__ = [
    "CHANNEL_ID",
    "CHANNEL_MESSAGE_ID",
    "DIRECT_MESSAGE_ID",
    "DIRECT_USER_ID",
    "NotificationRunner",
    "summarize",
]
