"""RAG Contracts — cross-service contract graph for the RAG platform."""

__version__ = "0.1.0"
