"""Application services (use case orchestrators)."""

from knowledge_assistant.application.services.conversation_service import ConversationService
from knowledge_assistant.application.services.query_assistant_service import (
    QueryAssistantService,
)

__all__ = ["ConversationService", "QueryAssistantService"]
