"""
Knowledge chunk domain model.

A bounded span of a document's normalized text, sized for embedding.

Dependencies: pydantic
System role: Chunk data structure passed from chunking to embedding
"""

from pydantic import BaseModel, Field, model_validator


class KnowledgeChunk(BaseModel):
    """Chunk produced by the sliding-window chunker."""

    content: str = Field(description="Space-joined tokens of the window")
    position: int = Field(ge=0, description="0-based sequence number within the source")
    token_count: int = Field(ge=0, description="Whitespace tokens in the window")
    start_index: int = Field(ge=0, description="Start character offset in the normalized text")
    end_index: int = Field(description="End character offset (exclusive)")

    @model_validator(mode="after")
    def _check_span(self) -> "KnowledgeChunk":
        if self.end_index <= self.start_index:
            raise ValueError("end_index must be greater than start_index")
        return self
