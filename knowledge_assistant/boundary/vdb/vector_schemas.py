"""
Vector database schemas.

Pydantic models exchanged with the vector index: the payload stored with
each chunk vector, the record written on upsert and the match returned
by similarity search.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from typing import Any

from pydantic import BaseModel, Field


class VectorMetadata(BaseModel):
    """Payload stored alongside each chunk vector."""

    source_id: str = Field(description="Knowledge source the chunk belongs to")
    sector_id: str = Field(description="Sector (isolation key) of the source")
    content: str = Field(description="Chunk text content")
    position: int = Field(description="Chunk position within the source")
    token_count: int = Field(description="Chunk token count")
    start_index: int = Field(description="Start offset in normalized source text")
    end_index: int = Field(description="End offset in normalized source text")


class VectorRecord(BaseModel):
    """Vector written to the index."""

    id: str = Field(description='Deterministic id, "{source_id}:{position}"')
    values: list[float] = Field(description="Embedding vector")
    payload: dict[str, Any] = Field(default_factory=dict)

    @staticmethod
    def make_id(source_id: str, position: int) -> str:
        return f"{source_id}:{position}"


class VectorMatch(BaseModel):
    """Single result from vector search, in collaborator ranking order."""

    id: str = Field(description="Vector identifier")
    score: float = Field(description="Similarity score, passed through unmodified")
    payload: dict[str, Any] = Field(default_factory=dict)
