"""
Resolve use case — deploy-time values for every edge, from a values file.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rag_contracts.core.errors import ContractsError, UnresolvedValueError
from rag_contracts.core.persistence.values_file import load_values
from rag_contracts.core.resolution import ResolvedValue, ValueOrigin, resolve_edge
from rag_contracts.core.use_cases.graph import build_registry


@dataclass
class ResolveResult:
    """Values for every edge, plus the edges that could not resolve."""

    resolved: list[ResolvedValue] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.unresolved

    def count(self, origin: ValueOrigin) -> int:
        return sum(1 for r in self.resolved if r.origin is origin)

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "ok": self.ok,
            "resolved": [r.to_dict() for r in self.resolved],
            "unresolved": self.unresolved,
            "counts": {o.value: self.count(o) for o in ValueOrigin},
        }


def resolve_values(
    values_path: Path,
    deployed: Sequence[str] = (),
    config_path: Path | None = None,
) -> ResolveResult:
    """Resolve every edge of the RAG graph against a shared values file.

    Args:
        values_path: JSON values file (see ``persistence.values_file``).
        deployed: Extra enver addresses to treat as deployed.
        config_path: Optional explicit path to contracts.yml.
    """
    result = ResolveResult()
    try:
        registry = build_registry(config_path)
    except ContractsError as e:
        result.error = str(e)
        return result

    source = load_values(values_path).to_source()
    for address in deployed:
        source.mark_deployed(address)

    for edge in registry.edges():
        try:
            result.resolved.append(resolve_edge(edge, source))
        except UnresolvedValueError as e:
            result.unresolved.append(str(e))
    return result
