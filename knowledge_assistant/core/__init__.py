"""
Core business logic module.

Contains the ingestion pipeline, the RAG query orchestrator, the exception
hierarchy and concurrency helpers. All business rules reside here.
"""

from knowledge_assistant.core.exceptions import (
    KnowledgeAssistantException,
    ValidationError,
    InvalidConfigError,
    EmptyInputError,
    InvalidRoleError,
    NotFoundError,
    ConversationNotFoundError,
    DocumentProcessingError,
    ParsingError,
    UnsupportedFormatError,
    MalformedInputError,
    EmbeddingFailedError,
    GenerationError,
    VectorStoreError,
    PersistenceError,
)

__all__ = [
    "KnowledgeAssistantException",
    "ValidationError",
    "InvalidConfigError",
    "EmptyInputError",
    "InvalidRoleError",
    "NotFoundError",
    "ConversationNotFoundError",
    "DocumentProcessingError",
    "ParsingError",
    "UnsupportedFormatError",
    "MalformedInputError",
    "EmbeddingFailedError",
    "GenerationError",
    "VectorStoreError",
    "PersistenceError",
]
