"""
RagContracts — the registry of every RAG platform build.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import cast

from rag_contracts.core.registry import BuildFactory, ContractsRegistry
from rag_contracts.services.contracts_lib import ContractsLibBuild
from rag_contracts.services.document_ingestion import DocumentIngestionBuild
from rag_contracts.services.document_processing import DocumentProcessingBuild
from rag_contracts.services.embedding import EmbeddingBuild
from rag_contracts.services.generation import GenerationBuild
from rag_contracts.services.knowledge_retrieval import KnowledgeRetrievalBuild
from rag_contracts.services.user_auth import UserAuthBuild
from rag_contracts.services.vector_storage import VectorStorageBuild


class RagContracts(ContractsRegistry):
    """Builds, wires and publishes the RAG service graph."""

    name = "RagContracts"

    def default_builds(self) -> Sequence[BuildFactory]:
        return (
            ContractsLibBuild,
            DocumentIngestionBuild,
            DocumentProcessingBuild,
            EmbeddingBuild,
            VectorStorageBuild,
            KnowledgeRetrievalBuild,
            GenerationBuild,
            UserAuthBuild,
        )

    @property
    def contracts_lib(self) -> ContractsLibBuild:
        return cast(ContractsLibBuild, self.get_build(ContractsLibBuild.BUILD_ID))

    @property
    def document_ingestion(self) -> DocumentIngestionBuild:
        return cast(DocumentIngestionBuild, self.get_build(DocumentIngestionBuild.BUILD_ID))

    @property
    def document_processing(self) -> DocumentProcessingBuild:
        return cast(DocumentProcessingBuild, self.get_build(DocumentProcessingBuild.BUILD_ID))

    @property
    def embedding(self) -> EmbeddingBuild:
        return cast(EmbeddingBuild, self.get_build(EmbeddingBuild.BUILD_ID))

    @property
    def vector_storage(self) -> VectorStorageBuild:
        return cast(VectorStorageBuild, self.get_build(VectorStorageBuild.BUILD_ID))

    @property
    def knowledge_retrieval(self) -> KnowledgeRetrievalBuild:
        return cast(KnowledgeRetrievalBuild, self.get_build(KnowledgeRetrievalBuild.BUILD_ID))

    @property
    def generation(self) -> GenerationBuild:
        return cast(GenerationBuild, self.get_build(GenerationBuild.BUILD_ID))

    @property
    def user_auth(self) -> UserAuthBuild:
        return cast(UserAuthBuild, self.get_build(UserAuthBuild.BUILD_ID))
