"""GitHub lookup errors."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, api: str, status_code: int) -> GitHubAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"GitHub {api} HTTP {status_code}", status_code=status_code)

    @classmethod
    def graphql_errors(cls, errors: object) -> GitHubAPIError:
        """Return an error for GraphQL `errors` payloads."""
        return cls(f"GitHub GraphQL errors: {errors}")

    @classmethod
    def network_error(cls, api: str, detail: str) -> GitHubAPIError:
        """Return an error for timeouts and connection failures."""
        return cls(f"GitHub {api} network error: {detail}")


class GitHubResponseShapeError(RuntimeError):
    """Raised when GitHub responses do not match the expected schema."""

    @classmethod
    def invalid(cls, api: str, detail: str) -> GitHubResponseShapeError:
        """Return an error for a body that failed schema validation."""
        return cls(f"GitHub {api} response failed validation: {detail}")

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing or null response field."""
        return cls(f"GitHub response missing expected field: {field}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
