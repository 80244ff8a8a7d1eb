"""Typed domain models for CI status notifications."""

from __future__ import annotations

import dataclasses
import enum


class ConclusionKind(enum.StrEnum):
    """Presentation category for a CI status conclusion."""

    SUCCESS = "success"
    FAILURE = "failure"
    UNKNOWN = "unknown"


_FAILURE_CONCLUSIONS = frozenset({"failure", "error"})


def classify_conclusion(conclusion: str) -> ConclusionKind:
    """Map a raw conclusion label onto a :class:`ConclusionKind`.

    Only ``success``, ``failure`` and ``error`` are recognised; every other
    label (``cancelled``, ``skipped``, provider-specific values) is UNKNOWN.

    Examples
    --------
    >>> classify_conclusion("error")
    <ConclusionKind.FAILURE: 'failure'>
    >>> classify_conclusion("cancelled")
    <ConclusionKind.UNKNOWN: 'unknown'>

    """
    if conclusion == "success":
        return ConclusionKind.SUCCESS
    if conclusion in _FAILURE_CONCLUSIONS:
        return ConclusionKind.FAILURE
    return ConclusionKind.UNKNOWN


def commit_title(message: str) -> str:
    """Return the first line of a commit message."""
    return message.split("\n", 1)[0]


@dataclasses.dataclass(frozen=True, slots=True)
class Commit:
    """Commit metadata supplied by the CI environment."""

    url: str
    author_username: str
    author_email: str
    message: str

    @property
    def title(self) -> str:
        """Commit message title, truncated at the first newline."""
        return commit_title(self.message)

    def with_author_email(self, email: str) -> Commit:
        """Return a copy carrying a resolved author email."""
        return dataclasses.replace(self, author_email=email)


@dataclasses.dataclass(frozen=True, slots=True)
class CommitStatus:
    """Outcome of the CI status check being reported."""

    name: str
    description: str
    conclusion: str
    url: str

    @property
    def kind(self) -> ConclusionKind:
        """Presentation category for :attr:`conclusion`."""
        return classify_conclusion(self.conclusion)

    @property
    def failed(self) -> bool:
        """Whether the conclusion is a failure kind."""
        return self.kind is ConclusionKind.FAILURE


@dataclasses.dataclass(frozen=True, slots=True)
class PullRequest:
    """Pull request associated with a commit, used for identity fallback."""

    number: int
    title: str
    url: str
    head_ref: str
    base_ref: str
    author_login: str | None


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchResult:
    """Slack identifiers for a delivered message.

    Attributes
    ----------
    target_id
        Channel id for channel broadcasts, user id for direct messages.
    timestamp
        Slack message timestamp (``ts``), which doubles as the message id.

    """

    target_id: str
    timestamp: str


class EmailSource(enum.StrEnum):
    """Where the author email used for delivery came from."""

    COMMIT = "commit"
    SSO = "sso"
    PULL_REQUEST_SSO = "pull_request_sso"


@dataclasses.dataclass(frozen=True, slots=True)
class RunReport:
    """Structured record of one notification run."""

    commit: Commit
    email_source: EmailSource
    direct: DispatchResult | None = None
    channel: DispatchResult | None = None


__all__ = [
    "Commit",
    "CommitStatus",
    "ConclusionKind",
    "DispatchResult",
    "EmailSource",
    "PullRequest",
    "RunReport",
    "classify_conclusion",
    "commit_title",
]
