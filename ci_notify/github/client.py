"""GitHub API client used for commit author identity lookups."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

from ci_notify.models import PullRequest

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError
from .models import PullRequestPayload, SsoQueryResponse

_DEFAULT_API_URL = "https://api.github.com"
_HTTP_ERROR_STATUS_THRESHOLD = 400
_REST_API_VERSION = "2022-11-28"

_SSO_IDENTITY_QUERY = """
query($org: String!, $login: String!) {
  organization(login: $org) {
    samlIdentityProvider {
      externalIdentities(first: 1, login: $login) {
        edges {
          node {
            samlIdentity {
              nameId
            }
          }
        }
      }
    }
  }
}
"""


class GitHubIdentityClient(typ.Protocol):
    """Interface for the GitHub lookups used by identity resolution."""

    async def lookup_sso_email(self, org: str, login: str) -> str | None:
        """Return the SAML ``nameId`` mapped to ``login`` in ``org``."""
        ...

    async def list_commit_pull_requests(
        self, owner: str, repo: str, sha: str
    ) -> list[PullRequest]:
        """Return pull requests associated with a commit."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubClientConfig:
    """Configuration for the GitHub GraphQL and REST client."""

    token: str
    api_url: str = _DEFAULT_API_URL
    graphql_url: str | None = None
    timeout_s: float = 20.0
    user_agent: str = "ci-notify/0.1"

    @property
    def graphql_endpoint(self) -> str:
        """GraphQL endpoint, derived from :attr:`api_url` when unset."""
        return self.graphql_url or f"{self.api_url.rstrip('/')}/graphql"


def _sso_email_from_response(response: SsoQueryResponse) -> str | None:
    """Extract the single mapped SSO email from a validated response."""
    if response.errors:
        raise GitHubAPIError.graphql_errors([err.message for err in response.errors])
    if response.data is None:
        raise GitHubResponseShapeError.missing("data")
    organization = response.data.organization
    if organization is None:
        raise GitHubResponseShapeError.missing("data.organization")
    provider = organization.saml_identity_provider
    if provider is None:
        return None

    edges = provider.external_identities.edges
    if len(edges) != 1:
        return None
    node = edges[0].node
    if node is None or node.saml_identity is None:
        return None
    name_id = (node.saml_identity.name_id or "").strip()
    return name_id or None


def _pull_request_from_payload(payload: PullRequestPayload) -> PullRequest:
    return PullRequest(
        number=payload.number,
        title=payload.title,
        url=payload.html_url,
        head_ref=payload.head.ref,
        base_ref=payload.base.ref,
        author_login=payload.user.login if payload.user else None,
    )


class GitHubClient:
    """GitHub implementation of :class:`GitHubIdentityClient`."""

    def __init__(
        self,
        config: GitHubClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise GitHubConfigError.empty_token()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def lookup_sso_email(self, org: str, login: str) -> str | None:
        """Return the SAML ``nameId`` mapped to ``login`` in ``org``.

        Returns
        -------
        str | None
            The mapped email, or ``None`` when the organisation has no SAML
            provider or the query did not return exactly one identity edge.

        Raises
        ------
        GitHubAPIError
            On transport failures, non-2xx responses or GraphQL errors.
        GitHubResponseShapeError
            When the body does not match the expected schema.

        """
        response = await self._send(
            "GraphQL",
            "POST",
            self._config.graphql_endpoint,
            json={
                "query": _SSO_IDENTITY_QUERY,
                "variables": {"org": org, "login": login},
            },
            headers={"Accept": "application/json"},
        )
        try:
            decoded = msgspec.json.decode(response.content, type=SsoQueryResponse)
        except msgspec.DecodeError as exc:
            raise GitHubResponseShapeError.invalid("GraphQL", str(exc)) from exc
        return _sso_email_from_response(decoded)

    async def list_commit_pull_requests(
        self, owner: str, repo: str, sha: str
    ) -> list[PullRequest]:
        """Return pull requests associated with a commit, newest association first.

        Raises
        ------
        GitHubAPIError
            On transport failures or non-2xx responses.
        GitHubResponseShapeError
            When the body does not match the expected schema.

        """
        base_url = self._config.api_url.rstrip("/")
        url = f"{base_url}/repos/{owner}/{repo}/commits/{sha}/pulls"
        response = await self._send(
            "REST",
            "GET",
            url,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": _REST_API_VERSION,
            },
        )
        try:
            payloads = msgspec.json.decode(
                response.content, type=list[PullRequestPayload]
            )
        except msgspec.DecodeError as exc:
            raise GitHubResponseShapeError.invalid("REST", str(exc)) from exc
        return [_pull_request_from_payload(payload) for payload in payloads]

    async def _send(
        self,
        api: str,
        method: str,
        url: str,
        **kwargs: typ.Any,  # noqa: ANN401 - forwarded to httpx
    ) -> httpx.Response:
        """Perform a request and reject error statuses."""
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise GitHubAPIError.network_error(api, "request timed out") from exc
        except httpx.RequestError as exc:
            raise GitHubAPIError.network_error(api, str(exc)) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(api, response.status_code)
        return response
