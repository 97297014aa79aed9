"""
Vector storage — indexes embeddings and serves the vector database.

The embeddings subscription carries a fallback so vector storage can
deploy before embedding ever has; it does not redeploy when the bucket
name changes.
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
from rag_contracts.core.resolution import Propagation
from rag_contracts.services.base import RagEnver, RagServiceBuild, StatusApiProducer
from rag_contracts.services.user_auth import consume_identity_provider

NAMESPACE = "vector-storage"


class VectorStorageProducer(Producer):
    layout = (
        NodeSpec(path_part="vector-database-endpoint"),
        NodeSpec(path_part="vector-index-name"),
        NodeSpec(path_part="vector-metadata-bucket"),
        NodeSpec(path_part="vector-backup-bucket"),
    )

    vector_database_endpoint = NodeRef("vector-database-endpoint")
    vector_index_name = NodeRef("vector-index-name")
    vector_metadata_bucket = NodeRef("vector-metadata-bucket")
    vector_backup_bucket = NodeRef("vector-backup-bucket")


class VectorStorageEnver(RagEnver):
    embedding_subscription = WiredConsumer()
    auth_provider_client_id = WiredConsumer()
    auth_provider_name = WiredConsumer()
    home_server_domain = WiredConsumer()
    status_api = WiredProducer()

    def __init__(self, build: Build, name: str, account: str, region: str, revision: SrcRevRef) -> None:
        super().__init__(build, name, account, region, revision)

        self.vector_storage = VectorStorageProducer(self, "vector-storage")

        self.poller_identity = self.create_identity("s3-poller")
        self.indexer_identity = self.create_identity("indexer")

    def wire(self) -> None:
        embedding = self.rag.embedding.counterpart(self)
        self.embedding_subscription = Consumer(
            self,
            "embedding-subscription",
            embedding.embedding_storage.embeddings_bucket,
            fallback_value="default-embeddings-bucket-name",
            propagation=Propagation.NONE,
        )
        (
            self.auth_provider_client_id,
            self.auth_provider_name,
            self.home_server_domain,
        ) = consume_identity_provider(self, home_server=True)
        self.status_api = StatusApiProducer(self, "status-api")


class VectorStorageBuild(RagServiceBuild):
    BUILD_ID = "ragVectorStorage"
    REPO_KEY = "ragVectorStorage"
    namespace = NAMESPACE
    enver_class = VectorStorageEnver
