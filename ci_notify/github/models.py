"""msgspec schemas for the GitHub responses ci-notify consumes.

Responses are decoded straight into these structs, so a body that does not
match the expected shape fails with :class:`msgspec.ValidationError` before
any field is read. Nullable GraphQL fields are modelled as ``| None``.
"""

from __future__ import annotations

import msgspec


class SamlIdentity(msgspec.Struct, rename="camel"):
    """SAML identity attached to an external identity node."""

    name_id: str | None = None


class ExternalIdentityNode(msgspec.Struct, rename="camel"):
    """External identity linked to an organisation member."""

    saml_identity: SamlIdentity | None = None


class ExternalIdentityEdge(msgspec.Struct):
    """Connection edge wrapping an external identity node."""

    node: ExternalIdentityNode | None = None


class ExternalIdentityConnection(msgspec.Struct):
    """Paginated external identity connection."""

    edges: list[ExternalIdentityEdge]


class SamlIdentityProvider(msgspec.Struct, rename="camel"):
    """Organisation SAML identity provider."""

    external_identities: ExternalIdentityConnection


class Organization(msgspec.Struct, rename="camel"):
    """Organisation node; the provider is null when SAML SSO is disabled."""

    saml_identity_provider: SamlIdentityProvider | None = None


class SsoQueryData(msgspec.Struct):
    """``data`` field of the SSO identity query."""

    organization: Organization | None = None


class GraphQLError(msgspec.Struct):
    """Single entry of a GraphQL ``errors`` payload."""

    message: str = ""


class SsoQueryResponse(msgspec.Struct):
    """Top-level GraphQL response for the SSO identity query."""

    data: SsoQueryData | None = None
    errors: list[GraphQLError] | None = None


class GitHubUser(msgspec.Struct):
    """Minimal REST user object."""

    login: str


class GitRef(msgspec.Struct):
    """Head or base reference of a pull request."""

    ref: str


class PullRequestPayload(msgspec.Struct):
    """REST pull request as returned by the commit pulls endpoint."""

    number: int
    title: str
    html_url: str
    head: GitRef
    base: GitRef
    user: GitHubUser | None = None


__all__ = [
    "ExternalIdentityConnection",
    "ExternalIdentityEdge",
    "ExternalIdentityNode",
    "GitHubUser",
    "GitRef",
    "GraphQLError",
    "Organization",
    "PullRequestPayload",
    "SamlIdentity",
    "SamlIdentityProvider",
    "SsoQueryData",
    "SsoQueryResponse",
]
