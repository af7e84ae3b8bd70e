"""
Document domain models.

Declared source formats and the parser's output.

Dependencies: pydantic
System role: Parsed document data structures for ingestion
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from knowledge_assistant.core.exceptions import UnsupportedFormatError


class SourceFormat(str, Enum):
    """Declared document format."""

    PDF = "pdf"
    MARKDOWN = "markdown"

    @classmethod
    def parse(cls, value: "str | SourceFormat") -> "SourceFormat":
        """
        Resolve a declared format string, case-insensitively.

        Raises:
            UnsupportedFormatError: If no format matches
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower() if value is not None else ""
        for member in cls:
            if member.value == normalized:
                return member
        raise UnsupportedFormatError(
            f"Unsupported document format: {value!r}",
            file_type=str(value),
        )


class DocumentMetadata(BaseModel):
    """Metadata recorded while parsing a document."""

    source_format: SourceFormat
    parsed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    original_size: int = Field(ge=0, description="Size of the raw payload in bytes")
    page_count: int | None = Field(default=None, description="Pages, for page-oriented formats")
    info: dict[str, str] | None = Field(
        default=None,
        description="Allow-listed document info entries (PDF only)",
    )


class ParsedDocument(BaseModel):
    """Normalized plain text plus parse metadata. Transient."""

    content: str
    metadata: DocumentMetadata

    def to_log_context(self) -> dict[str, Any]:
        return {
            "source_format": self.metadata.source_format.value,
            "original_size": self.metadata.original_size,
            "content_size": len(self.content),
            "page_count": self.metadata.page_count,
        }
