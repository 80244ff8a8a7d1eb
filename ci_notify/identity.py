"""Commit author email resolution.

The email used to find the author in Slack is resolved through an ordered
list of strategies. Each strategy returns a :class:`StrategyOutcome` instead
of raising, and :func:`resolve_author_email` stops at the first success. When
every strategy fails the email from the commit metadata is kept, so
resolution never aborts a run.

Strategies, in order:

1. :class:`SsoLoginStrategy` maps the commit author's GitHub login to the
   organisation's SAML ``nameId``.
2. :class:`PullRequestAuthorStrategy` finds the pull request associated with
   the commit and maps its author's login instead. This covers commits whose
   git author is not linked to a GitHub account, such as squash merges made
   through the web UI.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from ci_notify.github.errors import GitHubAPIError, GitHubResponseShapeError
from ci_notify.github.urls import parse_commit_url
from ci_notify.logging import get_logger, log_debug, log_info
from ci_notify.models import EmailSource

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ci_notify.github.client import GitHubIdentityClient

logger = get_logger(__name__)

_SOFT_GITHUB_ERRORS = (GitHubAPIError, GitHubResponseShapeError)


@dataclasses.dataclass(frozen=True, slots=True)
class ResolutionRequest:
    """Inputs shared by every resolution strategy."""

    org: str | None
    username: str
    commit_url: str


@dataclasses.dataclass(frozen=True, slots=True)
class StrategyOutcome:
    """Result of a single resolution attempt."""

    email: str | None
    source: EmailSource
    reason: str = ""
    login: str = ""

    @classmethod
    def success(cls, email: str, source: EmailSource, login: str) -> StrategyOutcome:
        """Build a successful outcome for the GitHub login that was mapped."""
        return cls(email=email, source=source, login=login)

    @classmethod
    def failure(cls, source: EmailSource, reason: str) -> StrategyOutcome:
        """Build a failed outcome carrying a human-readable reason."""
        return cls(email=None, source=source, reason=reason)


@dataclasses.dataclass(frozen=True, slots=True)
class ResolvedEmail:
    """Email chosen for delivery and where it came from.

    ``login`` is the GitHub login the email belongs to: the pull request
    author after a pull request fallback, otherwise the commit author.
    """

    email: str
    source: EmailSource
    login: str = ""


class ResolutionStrategy(typ.Protocol):
    """A single step of the email resolution chain."""

    async def resolve(self, request: ResolutionRequest) -> StrategyOutcome:
        """Attempt to resolve an email; never raises for lookup failures."""
        ...


async def _sso_email_for_login(
    github: GitHubIdentityClient,
    org: str | None,
    login: str,
    source: EmailSource,
) -> StrategyOutcome:
    if not org:
        return StrategyOutcome.failure(source, "no GitHub organisation configured")
    try:
        email = await github.lookup_sso_email(org, login)
    except _SOFT_GITHUB_ERRORS as exc:
        return StrategyOutcome.failure(source, f"SSO lookup for {login} failed: {exc}")
    if email is None:
        return StrategyOutcome.failure(
            source, f"no SSO identity mapped to {login} in {org}"
        )
    return StrategyOutcome.success(email, source, login)


class SsoLoginStrategy:
    """Resolve the commit author's login through the organisation SSO mapping."""

    def __init__(self, github: GitHubIdentityClient) -> None:
        """Store the GitHub client used for SSO lookups."""
        self._github = github

    async def resolve(self, request: ResolutionRequest) -> StrategyOutcome:
        """Look up the SSO email for the commit author login."""
        return await _sso_email_for_login(
            self._github, request.org, request.username, EmailSource.SSO
        )


class PullRequestAuthorStrategy:
    """Resolve through the author of the pull request that introduced the commit."""

    def __init__(self, github: GitHubIdentityClient) -> None:
        """Store the GitHub client used for pull request and SSO lookups."""
        self._github = github

    async def resolve(self, request: ResolutionRequest) -> StrategyOutcome:
        """Find the commit's pull request and look up its author's SSO email."""
        source = EmailSource.PULL_REQUEST_SSO
        ref = parse_commit_url(request.commit_url)
        if ref is None:
            return StrategyOutcome.failure(
                source, f"cannot extract commit SHA from {request.commit_url!r}"
            )

        try:
            pull_requests = await self._github.list_commit_pull_requests(
                ref.owner, ref.repo, ref.sha
            )
        except _SOFT_GITHUB_ERRORS as exc:
            return StrategyOutcome.failure(source, f"pull request lookup failed: {exc}")
        if not pull_requests:
            return StrategyOutcome.failure(
                source, f"no pull request associated with {ref.slug}@{ref.sha}"
            )

        pull_request = pull_requests[0]
        login = pull_request.author_login
        if not login:
            return StrategyOutcome.failure(
                source, f"pull request #{pull_request.number} has no author"
            )
        if login == request.username:
            return StrategyOutcome.failure(
                source,
                f"pull request #{pull_request.number} author {login} already tried",
            )

        log_debug(
            logger,
            "Retrying SSO lookup with pull request #%d author %s",
            pull_request.number,
            login,
        )
        return await _sso_email_for_login(self._github, request.org, login, source)


def default_strategies(github: GitHubIdentityClient) -> list[ResolutionStrategy]:
    """Return the standard resolution chain for ``github``."""
    return [SsoLoginStrategy(github), PullRequestAuthorStrategy(github)]


async def resolve_author_email(
    strategies: cabc.Sequence[ResolutionStrategy],
    request: ResolutionRequest,
    *,
    fallback_email: str,
) -> ResolvedEmail:
    """Resolve the author email, falling back to ``fallback_email``.

    Parameters
    ----------
    strategies
        Resolution strategies tried in order; the first success wins.
    request
        Organisation, login and commit URL shared by the strategies.
    fallback_email
        Email from the commit metadata, kept when every strategy fails.

    Returns
    -------
    ResolvedEmail
        The chosen email, its source and the GitHub login it belongs to.

    """
    if not request.username:
        log_info(logger, "No commit author username supplied, skipping resolution")
        return ResolvedEmail(email=fallback_email, source=EmailSource.COMMIT)

    for strategy in strategies:
        outcome = await strategy.resolve(request)
        if outcome.email is not None:
            log_info(
                logger,
                "Resolved author email %s via %s",
                outcome.email,
                outcome.source,
            )
            return ResolvedEmail(
                email=outcome.email, source=outcome.source, login=outcome.login
            )
        log_info(
            logger,
            "Email resolution via %s failed: %s",
            outcome.source,
            outcome.reason,
        )

    log_info(logger, "Using commit metadata email %s", fallback_email)
    return ResolvedEmail(
        email=fallback_email, source=EmailSource.COMMIT, login=request.username
    )


__all__ = [
    "PullRequestAuthorStrategy",
    "ResolutionRequest",
    "ResolutionStrategy",
    "ResolvedEmail",
    "SsoLoginStrategy",
    "StrategyOutcome",
    "default_strategies",
    "resolve_author_email",
]
