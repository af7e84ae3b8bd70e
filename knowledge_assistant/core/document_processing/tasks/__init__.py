"""Ingestion pipeline stages."""

from knowledge_assistant.core.document_processing.tasks.chunking_task import (
    ChunkingConfig,
    ChunkingTask,
)
from knowledge_assistant.core.document_processing.tasks.embedding_task import (
    EmbeddingBatcher,
    EmbeddingFunction,
)
from knowledge_assistant.core.document_processing.tasks.parsing_task import (
    DocumentParser,
    MarkdownDocumentFormat,
    PdfDocumentFormat,
    is_pdf_payload,
    normalize_text,
    strip_markdown,
)

__all__ = [
    "ChunkingConfig",
    "ChunkingTask",
    "EmbeddingBatcher",
    "EmbeddingFunction",
    "DocumentParser",
    "MarkdownDocumentFormat",
    "PdfDocumentFormat",
    "is_pdf_payload",
    "normalize_text",
    "strip_markdown",
]
