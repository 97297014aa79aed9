"""
Graph use cases — build the registry and summarize what it contains.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rag_contracts.core import context
from rag_contracts.core.config.loader import load_config
from rag_contracts.core.errors import ContractsError
from rag_contracts.core.registry import ContractsRegistry
from rag_contracts.core.resolution import Edge


def build_registry(config_path: Path | None = None) -> ContractsRegistry:
    """Return the process registry, building the RAG contracts if needed.

    Raises:
        ContractsError: If configuration or wiring fails.
    """
    existing = context.get_registry()
    if existing is not None:
        return existing

    from rag_contracts.services.contracts import RagContracts

    config = load_config(config_path)
    return RagContracts(config=config)


@dataclass
class GraphSummary:
    """Builds, envers and edge counts of a wired registry."""

    registry: ContractsRegistry | None = None
    error: str | None = None

    build_count: int = 0
    enver_count: int = 0
    producer_count: int = 0
    consumer_count: int = 0
    order: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        result: dict = {
            "build_count": self.build_count,
            "enver_count": self.enver_count,
            "producer_count": self.producer_count,
            "consumer_count": self.consumer_count,
            "order": self.order,
        }
        if self.registry:
            result["registry"] = self.registry.to_dict()
        return result


def summarize_graph(config_path: Path | None = None) -> GraphSummary:
    """Build (or reuse) the registry and count what it holds."""
    summary = GraphSummary()
    try:
        registry = build_registry(config_path)
    except ContractsError as e:
        summary.error = str(e)
        return summary

    summary.registry = registry
    envers = list(registry.envers())
    summary.build_count = len(registry.builds)
    summary.enver_count = len(envers)
    summary.producer_count = sum(len(e.producers) for e in envers)
    summary.consumer_count = sum(len(e.consumers) for e in envers)
    summary.order = registry.plan.build_ids if registry.plan else []
    return summary


@dataclass
class RedeployResult:
    """Envers affected by a new value at one producer node."""

    node_address: str = ""
    targets: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"node": self.node_address, "error": self.error}
        return {"node": self.node_address, "redeploy": self.targets, "skipped": self.skipped}


def find_redeploy_targets(node_address: str, config_path: Path | None = None) -> RedeployResult:
    """Which envers redeploy when ``node_address`` publishes a new value.

    ``skipped`` lists the consumers that read the node but opted out of
    propagation.
    """
    result = RedeployResult(node_address=node_address)
    try:
        registry = build_registry(config_path)
        node = registry.get_node(node_address)
    except ContractsError as e:
        result.error = str(e)
        return result

    result.targets = [e.address for e in registry.redeploy_targets(node)]
    result.skipped = [
        edge.consumer_address
        for edge in registry.edges_from(node)
        if edge.owner_address not in result.targets
    ]
    return result


def list_edges(config_path: Path | None = None) -> list[Edge]:
    """Every consumer edge of the RAG graph."""
    return build_registry(config_path).edges()
