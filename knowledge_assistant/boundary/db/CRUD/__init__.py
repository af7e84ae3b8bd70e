"""CRUD operations for the conversation store."""

from knowledge_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_assistant.boundary.db.CRUD.conversation_crud import ConversationCRUD, conversation_crud
from knowledge_assistant.boundary.db.CRUD.message_crud import MessageCRUD, message_crud

__all__ = [
    "BaseCRUD",
    "ConversationCRUD",
    "conversation_crud",
    "MessageCRUD",
    "message_crud",
]
