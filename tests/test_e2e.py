"""
End-to-end: the three-service pipeline, wired in good and bad orders.
"""

import pytest

from rag_contracts.core import context
from rag_contracts.core.errors import UnresolvedReferenceError
from rag_contracts.core.resolution import InMemoryValueSource, ValueOrigin
from tests.pipeline import make_registry


class TestPipeline:
    def test_wires_in_dependency_order(self):
        registry = make_registry(wire=False)
        report = registry.wire(order=["ingest", "process", "embed"])
        assert report.order == ["ingest", "process", "embed"]
        assert context.get_registry() is registry

        embed = registry.get_build("embed").dev
        assert embed.processed.target.address == "process/dev/output/processed-content-bucket"

    def test_embedding_before_processing_fails(self):
        registry = make_registry(wire=False)
        with pytest.raises(UnresolvedReferenceError, match="process/dev"):
            registry.wire(order=["ingest", "embed", "process"])
        # A failed registry is never published
        assert context.get_registry() is None

    def test_ingestion_has_no_consumers(self):
        registry = make_registry()
        assert registry.get_build("ingest").dev.consumers == []

    def test_edges(self):
        registry = make_registry()
        targets = sorted(e.target_address for e in registry.edges())
        assert targets == [
            "ingest/dev/store/document-bucket",
            "process/dev/output/processed-content-bucket",
        ]

    def test_redeploy_targets(self):
        registry = make_registry()
        node = registry.get_node("ingest/dev/store/document-bucket")
        assert [e.address for e in registry.redeploy_targets(node)] == ["process/dev"]

    def test_resolve_after_deploy(self):
        registry = make_registry()
        source = InMemoryValueSource()
        source.publish("ingest/dev/store/document-bucket", "docs-dev", "ingest/dev")
        source.publish("process/dev/output/processed-content-bucket", "processed-dev", "process/dev")

        resolved = [c.resolve(source) for c in registry.consumers()]
        assert [r.value for r in resolved] == ["docs-dev", "processed-dev"]
        assert all(r.origin is ValueOrigin.PRODUCER for r in resolved)
