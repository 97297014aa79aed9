"""
Trust check use case — would a trust pattern admit an identity?
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rag_contracts.core.errors import ContractsError
from rag_contracts.core.registry import ContractsRegistry
from rag_contracts.core.trust import IdentityName, TrustPattern


@dataclass
class TrustCheckResult:
    identity: str = ""
    pattern: str = ""
    allowed: bool = False
    # Nodes in the graph whose grants admit the identity
    granted_nodes: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {"identity": self.identity, "pattern": self.pattern}
        if self.error:
            result["error"] = self.error
            return result
        result["allowed"] = self.allowed
        result["granted_nodes"] = self.granted_nodes
        return result


def check_trust(
    identity: str,
    pattern: str,
    account: str,
    region: str | None = None,
    registry: ContractsRegistry | None = None,
) -> TrustCheckResult:
    """Match ``identity`` against ``pattern`` (``{service}/*``) in ``account``.

    With a registry, also lists every node whose grants admit the identity.
    """
    result = TrustCheckResult(identity=identity, pattern=pattern)
    try:
        parsed = IdentityName.parse(identity)
        trust = TrustPattern.parse(pattern, account, region)
    except ContractsError as e:
        result.error = str(e)
        return result

    result.pattern = trust.scoped
    result.allowed = trust.matches(parsed)
    if registry is not None:
        result.granted_nodes = [g.node.address for g in registry.grants_for(parsed)]
    return result
