"""
Hierarchical trust — identity names and wildcard grants.

Every identity a service creates lives under the service's namespace:

    {service}/{component}-{accountId}-{region}
    embedding/processor-366920167720-us-east-2

A resource that must be reachable from another service does not name
that service's identity (which would only be known after it deployed,
creating a deploy-order cycle).  It grants ``{service}/*`` instead,
scoped to an account and optionally a region:

    TrustPattern(namespace="embedding", account="366920167720")

The pattern is a naming contract, not a graph edge, so it adds nothing
to the wiring order.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, field_validator

from rag_contracts.core.errors import NamingConventionViolation

WILDCARD = "*"

_NAMESPACE_RE = re.compile(r"^[a-z][a-z0-9-]*$")
_LEAF_RE = re.compile(
    r"^(?P<component>[a-z][a-z0-9-]*?)-(?P<account>\d+)-(?P<region>[a-z]{2}(?:-[a-z]+)+-\d+)$"
)
_COMPONENT_RE = re.compile(r"^[a-z][a-z0-9-]*$")


class IdentityName(BaseModel):
    """A parsed hierarchical identity name."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    component: str
    account: str
    region: str

    @field_validator("namespace")
    @classmethod
    def _check_namespace(cls, v: str) -> str:
        if not _NAMESPACE_RE.match(v):
            raise ValueError(f"invalid namespace '{v}'")
        return v

    @field_validator("component")
    @classmethod
    def _check_component(cls, v: str) -> str:
        if not _COMPONENT_RE.match(v):
            raise ValueError(f"invalid component '{v}'")
        return v

    @property
    def value(self) -> str:
        return f"{self.namespace}/{self.component}-{self.account}-{self.region}"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str) -> IdentityName:
        """Parse ``{service}/{component}-{account}-{region}``.

        Raises:
            NamingConventionViolation: If ``raw`` does not follow the scheme.
        """
        namespace, sep, leaf = raw.partition("/")
        if not sep or "/" in leaf or not _NAMESPACE_RE.match(namespace):
            raise NamingConventionViolation(
                f"Identity '{raw}' is not of the form "
                "'{service}/{component}-{account}-{region}'"
            )
        m = _LEAF_RE.match(leaf)
        if m is None:
            raise NamingConventionViolation(
                f"Identity '{raw}' has no '{{component}}-{{account}}-{{region}}' leaf"
            )
        return cls(namespace=namespace, **m.groupdict())


def validate_identity(namespace: str, raw: str) -> IdentityName:
    """Parse ``raw`` and require it to sit under ``namespace``.

    Raises:
        NamingConventionViolation: On a malformed name or a foreign namespace.
    """
    identity = IdentityName.parse(raw)
    if identity.namespace != namespace:
        raise NamingConventionViolation(
            f"Identity '{raw}' is outside its service namespace '{namespace}/'"
        )
    return identity


class TrustPattern(BaseModel):
    """A ``{service}/*`` grant scoped to an account (and optionally a region)."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    account: str
    region: str | None = None

    @field_validator("namespace")
    @classmethod
    def _check_namespace(cls, v: str) -> str:
        if not _NAMESPACE_RE.match(v):
            raise ValueError(f"invalid namespace '{v}'")
        return v

    @classmethod
    def parse(cls, pattern: str, account: str, region: str | None = None) -> TrustPattern:
        """Build a pattern from its ``{service}/*`` string form."""
        namespace, sep, rest = pattern.partition("/")
        if not sep or rest != WILDCARD or not _NAMESPACE_RE.match(namespace):
            raise NamingConventionViolation(
                f"Trust pattern '{pattern}' must be a prefix wildcard '{{service}}/*'"
            )
        return cls(namespace=namespace, account=account, region=region)

    @property
    def prefix(self) -> str:
        return f"{self.namespace}/{WILDCARD}"

    @property
    def scoped(self) -> str:
        """Glob-style rendering including the account/region scope."""
        region = self.region or WILDCARD
        return f"{self.namespace}/{WILDCARD}-{self.account}-{region}"

    def matches(self, identity: str | IdentityName) -> bool:
        """Whether ``identity`` falls under this grant.

        Malformed identity strings never match.
        """
        if isinstance(identity, str):
            try:
                identity = IdentityName.parse(identity)
            except NamingConventionViolation:
                return False
        if identity.namespace != self.namespace:
            return False
        if identity.account != self.account:
            return False
        if self.region is not None and identity.region != self.region:
            return False
        return True

    def __str__(self) -> str:
        return self.scoped
