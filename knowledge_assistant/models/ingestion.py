"""
Ingestion result model.

Dependencies: pydantic
System role: Per-document outcome of the ingestion pipeline
"""

from enum import Enum

from pydantic import BaseModel, Field

from knowledge_assistant.models.chunk import KnowledgeChunk


class IngestionStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class IngestionResult(BaseModel):
    """Outcome of processing one document."""

    document_id: str = Field(description="Source identifier used for vector ids")
    status: IngestionStatus
    chunk_count: int = 0
    content_size: int = Field(default=0, description="Characters of normalized content")
    processing_time_ms: float = 0.0
    error: str | None = None
    error_type: str | None = None
    chunks: list[KnowledgeChunk] = Field(default_factory=list, exclude=True)
    embeddings: list[list[float]] = Field(default_factory=list, exclude=True)

    @property
    def succeeded(self) -> bool:
        return self.status == IngestionStatus.COMPLETED


class IngestionRequest(BaseModel):
    """One document submitted to the ingestion pipeline."""

    data: bytes = Field(repr=False)
    declared_format: str
    sector_id: str
    source_id: str | None = None
