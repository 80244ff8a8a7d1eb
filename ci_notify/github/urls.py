"""GitHub URL utilities.

Commit URLs handed over by CI look like
``https://github.com/<owner>/<repo>/commit/<sha>``. They are parsed here
rather than with ``urllib`` path helpers so that the owner, repository and
full 40-character SHA are validated in one place.
"""

from __future__ import annotations

import dataclasses
import re

DEFAULT_SERVER_URL = "https://github.com"

_COMMIT_URL_PATTERN = re.compile(
    r"^https?://[^/]+/(?P<owner>[^/]+)/(?P<repo>[^/]+)/commit/"
    r"(?P<sha>[0-9a-fA-F]{40})(?:[/?#].*)?$"
)


@dataclasses.dataclass(frozen=True, slots=True)
class CommitRef:
    """Repository coordinates and SHA extracted from a commit URL."""

    owner: str
    repo: str
    sha: str

    @property
    def slug(self) -> str:
        """Repository slug in ``owner/repo`` format."""
        return f"{self.owner}/{self.repo}"


def parse_commit_url(url: str) -> CommitRef | None:
    """Parse a GitHub commit URL into a :class:`CommitRef`.

    Parameters
    ----------
    url:
        Commit URL as supplied by the CI environment.

    Returns
    -------
    CommitRef | None
        Parsed coordinates, or ``None`` when the URL is not a commit URL with
        a full 40-character hexadecimal SHA.

    Examples
    --------
    >>> ref = parse_commit_url(
    ...     "https://github.com/acme/widget/commit/"
    ...     "5494d59c335d1dabc1e7fb6739b2e4b2f1aa2eff"
    ... )
    >>> (ref.owner, ref.repo)
    ('acme', 'widget')
    >>> parse_commit_url("https://github.com/acme/widget/commit/abc123") is None
    True

    """
    match = _COMMIT_URL_PATTERN.match(url.strip())
    if match is None:
        return None
    return CommitRef(
        owner=match.group("owner"),
        repo=match.group("repo"),
        sha=match.group("sha").lower(),
    )


def profile_url(server_url: str, login: str) -> str:
    """Return the GitHub profile URL for ``login``.

    >>> profile_url("https://github.com/", "octocat")
    'https://github.com/octocat'

    """
    return f"{server_url.rstrip('/')}/{login}"
