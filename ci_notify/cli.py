"""Command-line entrypoint for CI status notifications.

Reads action inputs from the environment, resolves the commit author and
notifies Slack. Run it as ``ci-notify`` or ``python -m ci_notify``.

Exit codes:

- ``0``: the run completed, including runs that skipped both dispatch paths
  or whose dispatches failed (those are logged, not fatal).
- ``1``: an unexpected error aborted the run.
- ``2``: required inputs are missing; no network call was made.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import dataclasses
import enum
import os
import typing as typ

from ci_notify.config import NotifierConfig
from ci_notify.errors import NotifierConfigError
from ci_notify.github.client import GitHubClient, GitHubClientConfig
from ci_notify.identity import default_strategies
from ci_notify.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from ci_notify.outputs import ActionOutputs, emit_error
from ci_notify.runner import NotificationRunner, summarize
from ci_notify.slack.client import MockChatClient, SlackChatClient

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ci_notify.models import RunReport
    from ci_notify.slack.client import ChatClient

logger = get_logger(__name__)


class ExitCode(enum.IntEnum):
    """Process exit codes."""

    OK = 0
    FAILURE = 1
    CONFIG_ERROR = 2


def build_github_client(config: NotifierConfig) -> GitHubClient:
    """Create the GitHub client for a run."""
    return GitHubClient(
        GitHubClientConfig(
            token=config.github_token,
            api_url=config.api_url,
            graphql_url=config.graphql_url,
        )
    )


def build_chat_client(config: NotifierConfig) -> ChatClient:
    """Create the Slack client, or the offline mock for dry runs."""
    if config.dry_run:
        log_info(logger, "Dry run: Slack messages will be logged, not sent")
        return MockChatClient()
    return SlackChatClient(config.slack_token)


async def run_notifications(config: NotifierConfig) -> RunReport:
    """Build collaborators, run the notification pipeline and close clients."""
    chat = build_chat_client(config)
    async with contextlib.AsyncExitStack() as stack:
        github = build_github_client(config)
        stack.push_async_callback(github.aclose)
        runner = NotificationRunner(
            config,
            chat=chat,
            strategies=default_strategies(github),
            outputs=ActionOutputs(config.output_path),
        )
        return await runner.run()


def _parse_args(argv: cabc.Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ci-notify",
        description="Notify Slack about the outcome of a CI pipeline step.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log Slack messages instead of sending them",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (overrides CI_NOTIFY_LOG_LEVEL)",
    )
    return parser.parse_args(argv)


def main(
    argv: cabc.Sequence[str] | None = None,
    *,
    env: cabc.Mapping[str, str] | None = None,
) -> int:
    """Run a notification and return the process exit code.

    Parameters
    ----------
    argv : Sequence[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.
    env : Mapping[str, str] | None, optional
        Environment to read inputs from. ``None`` defaults to ``os.environ``.

    Returns
    -------
    int
        One of :class:`ExitCode`.

    """
    args = _parse_args(argv)
    environ = os.environ if env is None else env

    raw_level = args.log_level or environ.get("CI_NOTIFY_LOG_LEVEL", "INFO")
    normalized_level, invalid_level = configure_logging(raw_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid log level %r, falling back to %s",
            raw_level,
            normalized_level,
        )

    log_info(logger, "Running ci-notify")
    try:
        config = NotifierConfig.from_env(environ)
    except NotifierConfigError as exc:
        log_error(logger, "Configuration error: %s", exc)
        emit_error(str(exc))
        return ExitCode.CONFIG_ERROR

    if args.dry_run and not config.dry_run:
        config = dataclasses.replace(config, dry_run=True)

    try:
        report = asyncio.run(run_notifications(config))
    except Exception as exc:  # noqa: BLE001 - top-level boundary reports failure
        log_exception(logger, f"ci-notify failed: {exc}", exc)
        emit_error(str(exc))
        return ExitCode.FAILURE

    log_info(logger, "Run complete: %s", summarize(report))
    return ExitCode.OK


if __name__ == "__main__":
    raise SystemExit(main())
