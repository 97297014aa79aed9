"""The RAG platform's service builds."""

from rag_contracts.services.contracts import RagContracts

__all__ = ["RagContracts"]
