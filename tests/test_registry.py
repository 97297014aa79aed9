"""
Tests for the contracts registry — singleton, duplicates, environment, lookups.
"""

import pytest

from rag_contracts.core import context
from rag_contracts.core.config.environment import BuildEnvironment
from rag_contracts.core.errors import (
    DuplicateRegistrationError,
    LifecycleError,
    MissingConfigurationError,
    UnresolvedReferenceError,
)
from rag_contracts.core.registry import ContractsRegistry
from tests.pipeline import IngestBuild, ProcessBuild, make_registry


class TestSingleton:
    def test_second_registry_rejected(self):
        make_registry()
        with pytest.raises(DuplicateRegistrationError, match="singleton"):
            make_registry()

    def test_unwired_registry_is_not_published(self):
        make_registry(wire=False)
        assert context.get_registry() is None

    def test_unwired_registry_still_holds_the_slot(self):
        make_registry(wire=False)
        with pytest.raises(DuplicateRegistrationError, match="under construction"):
            make_registry(wire=False)

    def test_unwired_then_wired_is_published(self):
        registry = make_registry(wire=False)
        registry.wire()
        assert context.get_registry() is registry

    def test_failed_construction_releases_the_slot(self):
        with pytest.raises(DuplicateRegistrationError):
            make_registry(builds=(IngestBuild, IngestBuild))
        registry = make_registry()
        assert context.get_registry() is registry

    def test_failed_wiring_releases_the_slot(self):
        registry = make_registry(wire=False)
        with pytest.raises(UnresolvedReferenceError):
            registry.wire(order=["ingest", "embed", "process"])
        assert context.get_registry() is None
        assert make_registry() is context.get_registry()

    def test_reset_allows_a_new_registry(self):
        first = make_registry()
        context.reset_registry()
        second = make_registry()
        assert second is not first
        assert context.get_registry() is second


class TestDuplicates:
    def test_duplicate_build_id(self):
        with pytest.raises(DuplicateRegistrationError, match="ingest"):
            make_registry(builds=(IngestBuild, IngestBuild))

    def test_shared_namespace(self):
        class Impostor(ProcessBuild):
            namespace = "ingest"

        with pytest.raises(DuplicateRegistrationError, match="identity namespace 'ingest'"):
            make_registry(builds=(IngestBuild, Impostor))

    def test_registering_after_wiring_started(self):
        registry = make_registry()
        with pytest.raises(LifecycleError):
            ProcessBuild(registry)

    def test_build_without_namespace(self):
        class Anonymous(IngestBuild):
            namespace = ""

        with pytest.raises(TypeError, match="namespace"):
            make_registry(builds=(Anonymous,))

    def test_trust_for_unknown_namespace(self):
        from tests.pipeline import IngestEnver

        class TrustingEnver(IngestEnver):
            def __init__(self, *args):
                super().__init__(*args)
                self.trust(self.store.document_bucket, "nobody")

        class TrustingBuild(IngestBuild):
            enver_class = TrustingEnver

        with pytest.raises(UnresolvedReferenceError, match="'nobody/\\*'"):
            make_registry(builds=(TrustingBuild,))


class TestEnvironment:
    def test_from_env(self):
        env = BuildEnvironment.from_env()
        assert env.cli_version == "2.0.0"
        assert env.account == "123456789012"
        assert env.region == "us-east-1"

    def test_missing_cli_version(self, monkeypatch):
        monkeypatch.delenv("CDK_CLI_VERSION")
        with pytest.raises(MissingConfigurationError, match="CDK_CLI_VERSION"):
            make_registry()
        assert context.get_registry() is None

    def test_missing_region(self, monkeypatch):
        monkeypatch.delenv("CDK_DEFAULT_REGION")
        with pytest.raises(MissingConfigurationError):
            BuildEnvironment.from_env()

    def test_account_from_codebuild_arn(self, monkeypatch):
        monkeypatch.delenv("CDK_DEFAULT_ACCOUNT")
        monkeypatch.setenv(
            "CODEBUILD_BUILD_ARN",
            "arn:aws:codebuild:us-east-1:999988887777:build/project:abc",
        )
        assert BuildEnvironment.from_env().account == "999988887777"

    def test_no_account_anywhere(self, monkeypatch):
        monkeypatch.delenv("CDK_DEFAULT_ACCOUNT")
        with pytest.raises(MissingConfigurationError, match="CODEBUILD_BUILD_ARN"):
            BuildEnvironment.from_env()

    def test_explicit_mapping(self):
        env = BuildEnvironment.from_env(
            {"CDK_CLI_VERSION": "2", "CDK_DEFAULT_REGION": "eu-west-1", "CDK_DEFAULT_ACCOUNT": "1"}
        )
        assert env.region == "eu-west-1"


class TestLookups:
    def test_get_build_unknown(self):
        registry = make_registry()
        with pytest.raises(UnresolvedReferenceError, match="No build 'nope'"):
            registry.get_build("nope")

    def test_get_enver_and_node(self):
        registry = make_registry()
        enver = registry.get_enver("process/dev")
        assert enver is registry.get_build("process").dev
        node = registry.get_node("process/dev/output/processed-content-bucket")
        assert node is enver.output.processed_content_bucket

    def test_get_node_needs_a_producer(self):
        registry = make_registry()
        with pytest.raises(UnresolvedReferenceError, match="not a node address"):
            registry.get_node("process/dev")

    def test_edges_before_wiring(self):
        registry = make_registry(wire=False)
        with pytest.raises(LifecycleError):
            registry.edges()

    def test_edges_into(self):
        registry = make_registry()
        edges = registry.edges_into(registry.get_enver("embed/dev"))
        assert [e.consumer_address for e in edges] == ["embed/dev/processed"]

    def test_to_dict(self):
        registry = make_registry()
        data = registry.to_dict()
        assert data["name"] == "ContractsRegistry"
        assert data["wiring"]["order"] == ["ingest", "process", "embed"]
        assert [b["build_id"] for b in data["builds"]] == ["ingest", "process", "embed"]

    def test_default_registry_has_no_builds(self):
        registry = ContractsRegistry()
        assert registry.builds == []
        assert registry.is_wired
