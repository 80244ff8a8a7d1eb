"""GitHub lookups for commit author identity resolution."""

from __future__ import annotations

from .client import GitHubClient, GitHubClientConfig, GitHubIdentityClient
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .urls import DEFAULT_SERVER_URL, CommitRef, parse_commit_url, profile_url

__all__ = [
    "DEFAULT_SERVER_URL",
    "CommitRef",
    "GitHubAPIError",
    "GitHubClient",
    "GitHubClientConfig",
    "GitHubConfigError",
    "GitHubIdentityClient",
    "GitHubResponseShapeError",
    "parse_commit_url",
    "profile_url",
]
