"""
Vector database boundary.

Collaborator contracts for similarity search and an in-memory index.
"""

from knowledge_assistant.boundary.vdb.in_memory_store import InMemoryVectorStore, cosine_similarity
from knowledge_assistant.boundary.vdb.vector_schemas import VectorMatch, VectorMetadata, VectorRecord
from knowledge_assistant.boundary.vdb.vector_store_client import VectorIndex, VectorSearchClient

__all__ = [
    "InMemoryVectorStore",
    "cosine_similarity",
    "VectorMatch",
    "VectorMetadata",
    "VectorRecord",
    "VectorIndex",
    "VectorSearchClient",
]
