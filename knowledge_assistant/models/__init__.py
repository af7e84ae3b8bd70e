"""
Domain models.

Pydantic models shared by the ingestion and query pipelines.
"""

from knowledge_assistant.models.chunk import KnowledgeChunk
from knowledge_assistant.models.conversation import Conversation, Message, MessageRole
from knowledge_assistant.models.document import DocumentMetadata, ParsedDocument, SourceFormat
from knowledge_assistant.models.ingestion import IngestionRequest, IngestionResult, IngestionStatus
from knowledge_assistant.models.query import QueryAssistantOutput, UserContext
from knowledge_assistant.models.rag import (
    EvaluationResult,
    EvaluationScore,
    EvaluationStatus,
    GenerationMetadata,
    RagAnswer,
    RagSource,
    ResponseSection,
    ResponseType,
    SearchOptions,
    StructuredResponse,
)

__all__ = [
    "KnowledgeChunk",
    "Conversation",
    "Message",
    "MessageRole",
    "DocumentMetadata",
    "ParsedDocument",
    "SourceFormat",
    "IngestionRequest",
    "IngestionResult",
    "IngestionStatus",
    "QueryAssistantOutput",
    "UserContext",
    "EvaluationResult",
    "EvaluationScore",
    "EvaluationStatus",
    "GenerationMetadata",
    "RagAnswer",
    "RagSource",
    "ResponseSection",
    "ResponseType",
    "SearchOptions",
    "StructuredResponse",
]
