"""
Document ingestion — upload entry point and status aggregator.

Ingestion exposes document storage to the processing service and shows
pipeline status in its web UI, so it consumes the status API of every
downstream pipeline service.  Those status APIs only exist once their
services are wired, which makes ingestion one of the last builds wired.
"""

from __future__ import annotations

from rag_contracts.core.models import (
    Build,
    Consumer,
    NodeRef,
    NodeSpec,
    Producer,
    SrcRevRef,
    WiredConsumer,
)
from rag_contracts.services.base import RagEnver, RagServiceBuild
from rag_contracts.services.document_processing import (
    NAMESPACE as PROCESSING_NAMESPACE,
)
from rag_contracts.services.user_auth import consume_identity_provider

NAMESPACE = "document-ingestion"


class DocumentStorageProducer(Producer):
    """S3 storage for uploaded documents; status travels in object metadata."""

    layout = (
        NodeSpec(path_part="document-bucket"),
        NodeSpec(path_part="schema", schema_artifact=True),
        NodeSpec(path_part="quarantine"),
    )

    document_bucket = NodeRef("document-bucket")
    # JSON schema for document metadata, a revision-stamped artifact
    doc_metadata_schema = NodeRef("schema")
    # Documents held for manual review
    quarantine_bucket = NodeRef("quarantine")


class DocumentIngestionEnver(RagEnver):
    rev_stack_suffixes = ("-webHosting", "-webUi")

    auth_provider_client_id = WiredConsumer()
    auth_provider_name = WiredConsumer()
    status_subscriptions = WiredConsumer()

    def __init__(self, build: Build, name: str, account: str, region: str, revision: SrcRevRef) -> None:
        super().__init__(build, name, account, region, revision)

        self.document_storage = DocumentStorageProducer(self, "store")
        self.auth_callback_url = Producer(self, "auth-callback-url")
        self.logout_url = Producer(self, "logout-url")

        self.upload_identity = self.create_identity("upload-handler")
        self.validator_identity = self.create_identity("validator")

        # Any document-processing role in this account/region may read uploads
        self.trust(self.document_storage.document_bucket, PROCESSING_NAMESPACE)
        self.trust(self.document_storage.quarantine_bucket, PROCESSING_NAMESPACE)

    def wire(self) -> None:
        rag = self.rag
        self.auth_provider_client_id, self.auth_provider_name = consume_identity_provider(
            self, fallback=False
        )

        subscriptions: dict[str, Consumer] = {}
        for build in (rag.document_processing, rag.embedding, rag.vector_storage):
            upstream = build.counterpart(self)
            subscriptions[build.build_id] = Consumer(
                self,
                f"{build.namespace}-status",
                upstream.status_api.status_endpoint,
            )
        self.status_subscriptions = subscriptions


class DocumentIngestionBuild(RagServiceBuild):
    BUILD_ID = "ragIngest"
    REPO_KEY = "ragDocumentIngestion"
    namespace = NAMESPACE
    enver_class = DocumentIngestionEnver
    wiring_dependencies = ("ragDocumentProcessing", "ragEmbedding", "ragVectorStorage")
