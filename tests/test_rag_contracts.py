"""
Tests for the RAG platform graph — structure, wiring, consumers, trust.
"""

import pytest

from rag_contracts.core.errors import DuplicateRegistrationError, LifecycleError
from rag_contracts.core.resolution import Propagation
from rag_contracts.services.contracts import RagContracts

WORKSPACE1 = "366920167720"
WORKSPACE2 = "217471730138"


class TestStructure:
    def test_all_builds_registered(self, rag):
        assert [b.build_id for b in rag.builds] == [
            "rag-contracts-npm",
            "ragIngest",
            "ragDocumentProcessing",
            "ragEmbedding",
            "ragVectorStorage",
            "ragRetr",
            "ragGeneration",
            "userAuth",
        ]

    def test_singleton(self, rag):
        with pytest.raises(DuplicateRegistrationError, match="RagContracts is a singleton"):
            RagContracts()

    def test_accounts(self, rag):
        assert rag.accounts["workspace1"] == WORKSPACE1
        assert len(rag.all_accounts) == len(set(rag.all_accounts))

    def test_repos(self, rag):
        assert rag.document_ingestion.repo.full_name == "odmd-rag/rag-document-ingestion-service"
        assert rag.user_auth.repo.name == "user-auth"
        assert rag.contracts_lib.repo.gh_app_install_id == 69236037

    def test_service_envers(self, rag):
        for build in (
            rag.document_ingestion,
            rag.document_processing,
            rag.embedding,
            rag.vector_storage,
            rag.knowledge_retrieval,
            rag.generation,
        ):
            assert build.dev.account == WORKSPACE1
            assert str(build.dev.revision) == "b..dev"
            assert build.prod.account == WORKSPACE2
            assert str(build.prod.revision) == "b..main"
            assert build.dev.region == "us-east-2"

    def test_user_auth_single_enver(self, rag):
        assert len(rag.user_auth.envers) == 1
        assert str(rag.user_auth.shared.revision) == "b..odmd-rag"

    def test_contracts_lib(self, rag):
        (enver,) = rag.contracts_lib.envers
        assert enver.account == "447839931803"
        assert rag.contracts_lib.package_name == "@odmd-rag/contracts-lib-rag"

    def test_rev_stack_names(self, rag):
        assert rag.document_ingestion.dev.rev_stack_names() == [
            "ragIngest--dev",
            "ragIngest--dev-webHosting",
            "ragIngest--dev-webUi",
        ]
        assert rag.user_auth.shared.rev_stack_names() == [
            "userAuth--odmd-rag",
            "userAuth--odmd-rag-web-hosting",
            "userAuth--odmd-rag-web-ui",
        ]
        assert rag.embedding.prod.rev_stack_names() == ["ragEmbedding--main"]


class TestProducers:
    def test_document_storage(self, rag):
        storage = rag.document_ingestion.dev.document_storage
        assert storage.document_bucket.address == "ragIngest/dev/store/document-bucket"
        assert storage.doc_metadata_schema.is_schema_artifact
        assert storage.quarantine_bucket.path == "store/quarantine"

    def test_processing_streams(self, rag):
        streams = rag.document_processing.dev.processing_streams
        assert len(streams.children) == 5
        assert streams.dlq_stream.child("failed-record-schema") is streams.failed_record_schema
        assert all(len(s.children) == 2 for s in streams.children)

    def test_processed_content_is_wiring_time(self, rag):
        storage = rag.document_processing.dev.processed_content_storage
        assert storage.wiring_time is True
        assert storage.processed_content_bucket.address == (
            "ragDocumentProcessing/dev/processed-content-storage/processed-content-bucket"
        )

    def test_vector_search_proxy(self, rag):
        api = rag.knowledge_retrieval.dev.vector_search_proxy_api
        assert [c.path_segment for c in api.proxy_api.children] == [
            "vector-search-endpoint",
            "health-check-endpoint",
            "search-request-schema",
            "search-response-schema",
            "home-server-config",
        ]

    def test_generation_api(self, rag):
        api = rag.generation.dev.generation_api
        assert api.feedback_schema.is_schema_artifact
        assert api[1] is api.web_ui_cloudfront_url
        assert api[2] is api.web_ui_s3_bucket

    def test_status_apis(self, rag):
        for build in (rag.document_processing, rag.embedding, rag.vector_storage):
            assert build.dev.status_api.status_endpoint.path == "status-api/status-api-endpoint"


class TestWiring:
    def test_order(self, rag):
        assert rag.plan.build_ids == [
            "rag-contracts-npm",
            "ragDocumentProcessing",
            "ragEmbedding",
            "ragVectorStorage",
            "ragIngest",
            "ragRetr",
            "ragGeneration",
            "userAuth",
        ]

    def test_consumer_counts(self, rag):
        assert rag.report.consumers == {
            "rag-contracts-npm": 0,
            "ragDocumentProcessing": 4,
            "ragEmbedding": 2,
            "ragVectorStorage": 8,
            "ragIngest": 10,
            "ragRetr": 6,
            "ragGeneration": 10,
            "userAuth": 4,
        }

    def test_consumers_read_their_counterpart(self, rag):
        prod = rag.embedding.prod
        assert prod.processed_content_subscription.target_owner is rag.document_processing.prod

    def test_ingestion_status_subscriptions(self, rag):
        subs = rag.document_ingestion.dev.status_subscriptions
        assert sorted(subs) == ["ragDocumentProcessing", "ragEmbedding", "ragVectorStorage"]
        assert subs["ragEmbedding"].target.address == (
            "ragEmbedding/dev/status-api/status-api-endpoint"
        )

    def test_user_auth_consumes_every_ingestion_enver(self, rag):
        shared = rag.user_auth.shared
        owners = [c.target_owner.address for c in shared.callback_urls]
        assert owners == ["ragIngest/dev", "ragIngest/prod"]
        assert len(shared.logout_urls) == 2

    def test_optional_consumers(self, rag):
        gen = rag.generation.dev
        edge = gen.vector_search_proxy_subscription.edge
        assert edge.fallback_value == "default-vector-search-api"
        assert edge.propagation is Propagation.NONE
        assert gen.auth_provider_client_id.fallback_value == "default-client-id"

        vs = rag.vector_storage.dev
        assert vs.home_server_domain.fallback_value == "https://localhost:3000"
        assert vs.embedding_subscription.propagation is Propagation.NONE

    def test_ingestion_auth_is_direct(self, rag):
        consumer = rag.document_ingestion.dev.auth_provider_client_id
        assert consumer.fallback_value is None
        assert consumer.propagation is Propagation.DIRECT

    def test_redeploy_targets(self, rag):
        client_id = rag.user_auth.shared.id_provider_client_id.root
        targets = [e.address for e in rag.redeploy_targets(client_id)]
        # Only ingestion consumes the client id without opting out
        assert targets == ["ragIngest/dev", "ragIngest/prod"]

    def test_processing_cannot_be_wired_again(self, rag):
        with pytest.raises(LifecycleError):
            rag.document_processing.wire_consuming()


class TestTrust:
    def test_processing_reads_uploads(self, rag):
        bucket = rag.document_ingestion.dev.document_storage.document_bucket
        processor = rag.document_processing.dev.processor_identity
        assert rag.is_authorized(bucket, processor)
        # prod processing runs in another account
        assert not rag.is_authorized(bucket, rag.document_processing.prod.processor_identity)

    def test_embedding_reads_processed_content(self, rag):
        bucket = rag.document_processing.dev.processed_content_storage.processed_content_bucket
        assert rag.is_authorized(bucket, rag.embedding.dev.poller_identity)
        assert not rag.is_authorized(bucket, rag.vector_storage.dev.poller_identity)

    def test_vector_storage_reads_embeddings(self, rag):
        bucket = rag.embedding.dev.embedding_storage.embeddings_bucket
        assert rag.is_authorized(bucket, rag.vector_storage.dev.indexer_identity)

    def test_identities_follow_convention(self, rag):
        namespaces = {b.namespace for b in rag.builds}
        identities = rag.identities()
        assert identities
        for identity in identities:
            assert identity.namespace in namespaces
            assert identity.account in rag.all_accounts
            assert identity.region == "us-east-2"

    def test_grants_for(self, rag):
        grants = rag.grants_for(rag.embedding.dev.processor_identity)
        assert [g.node.address for g in grants] == [
            "ragDocumentProcessing/dev/processed-content-storage/processed-content-bucket"
        ]
