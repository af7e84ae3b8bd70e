"""
Vector store collaborator contracts.

The query pipeline only needs similarity search; ingestion additionally
writes and deletes vectors. The isolation key (sector id) is the tenant
boundary and implementations must never return matches across keys.

Dependencies: typing
System role: Narrow interfaces to the external vector index
"""

from typing import Protocol, runtime_checkable

from knowledge_assistant.boundary.vdb.vector_schemas import VectorMatch, VectorRecord


@runtime_checkable
class VectorSearchClient(Protocol):
    """Similarity search scoped to one isolation key."""

    async def search(
        self,
        vector: list[float],
        isolation_key: str,
        limit: int,
        min_score: float | None = None,
    ) -> list[VectorMatch]:
        """Return up to ``limit`` matches ordered by descending score."""
        ...


@runtime_checkable
class VectorIndex(VectorSearchClient, Protocol):
    """Search plus writes, used by the ingestion pipeline."""

    async def upsert(self, isolation_key: str, records: list[VectorRecord]) -> None:
        """Insert or replace records by id."""
        ...

    async def delete_by_source(self, source_id: str, isolation_key: str) -> int:
        """Delete every vector of a source; returns the number removed."""
        ...
