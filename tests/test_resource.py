"""
Tests for resource trees — NodeSpec, ResourceNode, Producer and NodeRef.
"""

import pytest
from pydantic import ValidationError

from rag_contracts.core.errors import DuplicateRegistrationError, UnresolvedReferenceError
from rag_contracts.core.models import NodeRef, NodeSpec, Producer
from tests.pipeline import DocumentStore, make_registry


class TestNodeSpec:
    def test_rejects_duplicate_siblings(self):
        with pytest.raises(ValidationError, match="duplicate sibling"):
            NodeSpec(
                path_part="api",
                children=[NodeSpec(path_part="a"), NodeSpec(path_part="a")],
            )

    def test_rejects_separator_in_segment(self):
        with pytest.raises(ValidationError):
            NodeSpec(path_part="a/b")

    def test_has_path(self):
        spec = NodeSpec(
            path_part="root",
            children=[NodeSpec(path_part="api", children=[NodeSpec(path_part="schema")])],
        )
        assert spec.has_path("api")
        assert spec.has_path("api/schema")
        assert not spec.has_path("api/other")
        assert not spec.has_path("schema")


class TestResourceNode:
    def test_addresses(self):
        registry = make_registry()
        store = registry.get_build("ingest").dev.store
        assert store.address == "ingest/dev/store"
        assert store.document_bucket.address == "ingest/dev/store/document-bucket"
        assert store.document_bucket.path == "store/document-bucket"

    def test_positional_and_named_access_agree(self):
        registry = make_registry()
        store = registry.get_build("ingest").dev.store
        assert store[0] is store.document_bucket
        assert store[1] is store.schema
        assert store[0] is store.child("document-bucket")

    def test_address_is_stable(self):
        registry = make_registry()
        node = registry.get_build("ingest").dev.store.document_bucket
        assert node.address == node.address
        assert registry.get_node(node.address) is node

    def test_leaf_and_artifact_flags(self):
        registry = make_registry()
        store = registry.get_build("ingest").dev.store
        assert store.root.is_leaf is False
        assert store.document_bucket.is_leaf is True
        assert store.schema.is_schema_artifact is True
        assert store.document_bucket.is_schema_artifact is False

    def test_out_of_range_position(self):
        registry = make_registry()
        store = registry.get_build("ingest").dev.store
        with pytest.raises(UnresolvedReferenceError, match="no position 5"):
            store[5]

    def test_negative_position(self):
        registry = make_registry()
        store = registry.get_build("ingest").dev.store
        with pytest.raises(UnresolvedReferenceError, match="no position -1"):
            store[-1]
        with pytest.raises(UnresolvedReferenceError, match="no position -1"):
            store.root[-1]

    def test_unknown_child(self):
        registry = make_registry()
        store = registry.get_build("ingest").dev.store
        with pytest.raises(UnresolvedReferenceError, match="quarantine"):
            store.child("quarantine")

    def test_walk_is_depth_first(self):
        registry = make_registry()
        store = registry.get_build("ingest").dev.store
        assert [n.path for n in store.walk()] == [
            "store",
            "store/document-bucket",
            "store/schema",
        ]
        assert store.node_count == 3

    def test_to_dict(self):
        registry = make_registry()
        data = registry.get_build("ingest").dev.store.to_dict()
        assert data["id"] == "store"
        assert data["wiring_time"] is False
        assert data["tree"]["children"][1]["schema_artifact"] is True


class TestProducer:
    def test_node_ref_must_match_layout(self):
        with pytest.raises(TypeError, match="not declared in the layout"):

            class Broken(Producer):
                layout = (NodeSpec(path_part="bucket"),)
                bucket = NodeRef("buckets")

    def test_node_ref_on_class_returns_descriptor(self):
        assert isinstance(DocumentStore.document_bucket, NodeRef)

    def test_empty_path_is_root(self):
        registry = make_registry()
        enver = registry.get_build("ingest").dev
        assert enver.producer("store").node("") is enver.store.root

    def test_duplicate_producer_id_rejected(self):
        from tests.pipeline import IngestBuild, IngestEnver

        class TwiceEnver(IngestEnver):
            def __init__(self, *args):
                super().__init__(*args)
                DocumentStore(self, "store")

        class TwiceBuild(IngestBuild):
            enver_class = TwiceEnver

        with pytest.raises(DuplicateRegistrationError, match="'store' registered twice"):
            make_registry(builds=(TwiceBuild,))
