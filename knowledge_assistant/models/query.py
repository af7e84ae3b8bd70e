"""
Query assistant input/output models.

Dependencies: pydantic
System role: Contract of the query assistant entry point
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from knowledge_assistant.models.rag import (
    EvaluationResult,
    RagSource,
    ResponseType,
    StructuredResponse,
)


class UserContext(BaseModel):
    """Caller identity as resolved by the surrounding application."""

    user_id: str = Field(description="Authenticated user identifier")
    sector_id: str = Field(description="Sector (tenant) the question is asked in")


class QueryAssistantOutput(BaseModel):
    """Response returned to the surrounding application."""

    response: str
    response_type: ResponseType
    structured: StructuredResponse | None = None
    conversation_id: uuid.UUID
    sources: list[RagSource] = Field(default_factory=list)
    timestamp: datetime
    evaluation: EvaluationResult | None = None
