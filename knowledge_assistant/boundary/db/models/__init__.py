"""ORM models registered on Base.metadata."""

from knowledge_assistant.boundary.db.models.conversation_model import ConversationModel
from knowledge_assistant.boundary.db.models.message_model import MessageModel

__all__ = ["ConversationModel", "MessageModel"]
