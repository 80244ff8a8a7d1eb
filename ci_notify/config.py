"""Run configuration for ci-notify.

The configuration is built once, from an explicit environment mapping, and
passed to every component. Only :mod:`ci_notify.cli` hands ``os.environ`` to
:meth:`NotifierConfig.from_env`; nothing else reads ambient state.

Usage
-----
>>> config = NotifierConfig.from_env(
...     {
...         "SLACK_ACCESS_TOKEN": "xoxb-1",
...         "GITHUB_ACCESS_TOKEN": "ghp-1",
...         "COMMIT_URL": "https://github.com/acme/widget/commit/" + "a" * 40,
...         "COMMIT_AUTHOR_USERNAME": "octocat",
...         "COMMIT_AUTHOR_EMAIL": "octocat@example.com",
...         "COMMIT_MESSAGE": "Fix bug",
...         "STATUS_NAME": "build",
...         "STATUS_DESCRIPTION": "Build",
...         "STATUS_CONCLUSION": "failure",
...         "STATUS_URL": "https://ci.example.com/runs/1",
...         "SEND_MESSAGE_TO_CHANNEL": "null",
...     }
... )
>>> config.channel is None
True
>>> config.github_org
'acme'

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from ci_notify.errors import NotifierConfigError
from ci_notify.github.urls import DEFAULT_SERVER_URL, parse_commit_url
from ci_notify.models import Commit, CommitStatus

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_DEFAULT_API_URL = "https://api.github.com"
_CHANNEL_DISABLED_SENTINEL = "null"
_TRUE_FLAG = "true"

_REQUIRED_TOKENS = ("slack-access-token", "github-access-token")
_REQUIRED_COMMIT_INPUTS = ("commit-url", "commit-author-email", "commit-message")
_REQUIRED_STATUS_INPUTS = (
    "status-name",
    "status-description",
    "status-conclusion",
    "status-url",
)


def _input_keys(name: str) -> tuple[str, ...]:
    """Return the environment keys checked for an action input, in order."""
    upper = name.upper()
    underscored = upper.replace("-", "_").replace(" ", "_")
    return (f"INPUT_{upper}", f"INPUT_{underscored}", underscored)


def read_input(env: cabc.Mapping[str, str], name: str) -> str:
    """Read an action input from ``env``, returning ``""`` when unset.

    GitHub Actions exposes inputs as ``INPUT_<NAME>`` with hyphens kept;
    composite actions and local runs usually pass plain ``<NAME>`` variables
    with underscores. Whitespace around values is stripped, except in the
    commit message.

    >>> read_input({"INPUT_STATUS-NAME": " build "}, "status-name")
    'build'
    >>> read_input({"STATUS_NAME": "lint"}, "status-name")
    'lint'

    """
    for key in _input_keys(name):
        value = env.get(key)
        if value is not None and value.strip():
            return value if name == "commit-message" else value.strip()
    return ""


def _parse_channel(raw: str) -> str | None:
    if not raw or raw == _CHANNEL_DISABLED_SENTINEL:
        return None
    return raw


def _parse_flag(raw: str) -> bool:
    return raw.strip().lower() == _TRUE_FLAG


def _optional_env(env: cabc.Mapping[str, str], key: str) -> str | None:
    value = env.get(key, "").strip()
    return value or None


@dc.dataclass(frozen=True, slots=True)
class NotifierConfig:
    """Everything a notification run needs, validated up front.

    Attributes
    ----------
    slack_token
        Slack bot token.
    github_token
        GitHub token able to read organisation SSO identities and pull
        requests.
    commit
        Commit metadata from the CI environment.
    status
        Status check being reported.
    channel
        Channel for failure broadcasts, or ``None`` to skip them.
    send_to_user
        Whether to send the status summary to the commit author.
    github_org
        Organisation whose SAML mapping is queried; defaults to the commit
        URL owner.
    output_path
        ``$GITHUB_OUTPUT`` file receiving ``key=value`` lines, if set.
    api_url, graphql_url, server_url
        GitHub endpoints, overridable for GitHub Enterprise Server.
    dry_run
        Log Slack messages instead of sending them.

    """

    slack_token: str
    github_token: str
    commit: Commit
    status: CommitStatus
    channel: str | None = None
    send_to_user: bool = False
    github_org: str | None = None
    output_path: Path | None = None
    api_url: str = _DEFAULT_API_URL
    graphql_url: str | None = None
    server_url: str = DEFAULT_SERVER_URL
    dry_run: bool = False

    @staticmethod
    def _require(env: cabc.Mapping[str, str], names: cabc.Iterable[str]) -> list[str]:
        return [name for name in names if not read_input(env, name)]

    @classmethod
    def from_env(cls, env: cabc.Mapping[str, str]) -> NotifierConfig:
        """Build configuration from an environment mapping.

        Raises
        ------
        NotifierConfigError
            If any required input is missing. Tokens are reported first.

        """
        missing = cls._require(env, _REQUIRED_TOKENS)
        missing += cls._require(
            env, (*_REQUIRED_COMMIT_INPUTS, *_REQUIRED_STATUS_INPUTS)
        )
        if missing:
            raise NotifierConfigError.missing_inputs(missing)

        commit = Commit(
            url=read_input(env, "commit-url"),
            author_username=read_input(env, "commit-author-username"),
            author_email=read_input(env, "commit-author-email"),
            message=read_input(env, "commit-message"),
        )
        status = CommitStatus(
            name=read_input(env, "status-name"),
            description=read_input(env, "status-description"),
            conclusion=read_input(env, "status-conclusion"),
            url=read_input(env, "status-url"),
        )

        github_org = read_input(env, "github-organization") or None
        if github_org is None:
            ref = parse_commit_url(commit.url)
            github_org = ref.owner if ref is not None else None

        raw_output = _optional_env(env, "GITHUB_OUTPUT")

        return cls(
            slack_token=read_input(env, "slack-access-token"),
            github_token=read_input(env, "github-access-token"),
            commit=commit,
            status=status,
            channel=_parse_channel(read_input(env, "send-message-to-channel")),
            send_to_user=_parse_flag(read_input(env, "send-message-to-user")),
            github_org=github_org,
            output_path=Path(raw_output) if raw_output else None,
            api_url=_optional_env(env, "GITHUB_API_URL") or _DEFAULT_API_URL,
            graphql_url=_optional_env(env, "GITHUB_GRAPHQL_URL"),
            server_url=_optional_env(env, "GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
            dry_run=_parse_flag(env.get("CI_NOTIFY_DRY_RUN", "")),
        )


__all__ = ["NotifierConfig", "read_input"]
