"""
Embedding — polls processed content and writes embeddings for vector storage.
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
    WiredProducer,
)
from rag_contracts.services.base import RagEnver, RagServiceBuild, StatusApiProducer

NAMESPACE = "embedding"
VECTOR_STORAGE_NAMESPACE = "vector-storage"


class EmbeddingStorageProducer(Producer):
    """S3 buckets the vector storage service polls."""

    layout = (
        NodeSpec(path_part="embeddings-bucket"),
        NodeSpec(path_part="embedding-status-bucket"),
    )

    # Embedding JSON files plus their metadata
    embeddings_bucket = NodeRef("embeddings-bucket")
    # Completion status and metrics, for monitoring
    embedding_status_bucket = NodeRef("embedding-status-bucket")


class EmbeddingEnver(RagEnver):
    processed_content_subscription = WiredConsumer()
    status_api = WiredProducer()

    def __init__(self, build: Build, name: str, account: str, region: str, revision: SrcRevRef) -> None:
        super().__init__(build, name, account, region, revision)

        self.embedding_storage = EmbeddingStorageProducer(self, "embedding-storage")
        self.trust(self.embedding_storage.embeddings_bucket, VECTOR_STORAGE_NAMESPACE)

        self.processor_identity = self.create_identity("processor")
        self.poller_identity = self.create_identity("s3-poller")

    def wire(self) -> None:
        processing = self.rag.document_processing.counterpart(self)
        self.processed_content_subscription = Consumer(
            self,
            "processed-content-subscription",
            processing.processed_content_storage.processed_content_bucket,
        )
        self.status_api = StatusApiProducer(self, "status-api")


class EmbeddingBuild(RagServiceBuild):
    BUILD_ID = "ragEmbedding"
    REPO_KEY = "ragEmbedding"
    namespace = NAMESPACE
    enver_class = EmbeddingEnver
    wiring_dependencies = ("ragDocumentProcessing",)
