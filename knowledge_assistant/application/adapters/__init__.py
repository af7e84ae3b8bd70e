"""Persistence adapters."""

from knowledge_assistant.application.adapters.conversation_store import (
    ConversationStore,
    SqlAlchemyConversationStore,
)

__all__ = ["ConversationStore", "SqlAlchemyConversationStore"]
