"""
In-memory vector index.

Cosine-similarity index with one namespace per isolation key. Used for
local development and tests in place of a hosted vector database.

Dependencies: math (stdlib)
System role: Reference VectorIndex implementation
"""

import logging
import math

from knowledge_assistant.boundary.vdb.vector_schemas import VectorMatch, VectorRecord
from knowledge_assistant.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / (norm_a * norm_b)


class InMemoryVectorStore:
    """VectorIndex backed by per-namespace dicts."""

    def __init__(self, dimension: int | None = None) -> None:
        """
        Initialize an empty store.

        Args:
            dimension: Expected vector length; inferred from the first upsert if None
        """
        self._dimension = dimension
        self._namespaces: dict[str, dict[str, VectorRecord]] = {}

    def count(self, isolation_key: str | None = None) -> int:
        if isolation_key is not None:
            return len(self._namespaces.get(isolation_key, {}))
        return sum(len(records) for records in self._namespaces.values())

    def get(self, isolation_key: str, record_id: str) -> VectorRecord | None:
        return self._namespaces.get(isolation_key, {}).get(record_id)

    def _check_dimension(self, values: list[float], operation: str) -> None:
        if self._dimension is None:
            self._dimension = len(values)
        if len(values) != self._dimension:
            raise VectorStoreError(
                f"Vector dimension {len(values)} does not match index dimension {self._dimension}",
                operation=operation,
            )

    async def upsert(self, isolation_key: str, records: list[VectorRecord]) -> None:
        for record in records:
            self._check_dimension(record.values, "upsert")
        namespace = self._namespaces.setdefault(isolation_key, {})
        for record in records:
            namespace[record.id] = record
        logger.debug(
            f"{__name__}:upsert - Upserted {len(records)} vectors into namespace {isolation_key}"
        )

    async def search(
        self,
        vector: list[float],
        isolation_key: str,
        limit: int,
        min_score: float | None = None,
    ) -> list[VectorMatch]:
        if limit <= 0:
            return []
        namespace = self._namespaces.get(isolation_key)
        if not namespace:
            return []
        self._check_dimension(vector, "search")

        scored = [
            (cosine_similarity(vector, record.values), record) for record in namespace.values()
        ]
        if min_score is not None:
            scored = [(score, record) for score, record in scored if score >= min_score]
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            VectorMatch(id=record.id, score=score, payload=dict(record.payload))
            for score, record in scored[:limit]
        ]

    async def delete_by_source(self, source_id: str, isolation_key: str) -> int:
        namespace = self._namespaces.get(isolation_key, {})
        doomed = [
            record_id
            for record_id, record in namespace.items()
            if record.payload.get("source_id") == source_id
        ]
        for record_id in doomed:
            del namespace[record_id]
        return len(doomed)
