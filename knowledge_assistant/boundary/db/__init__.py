"""
Relational database boundary.

SQLAlchemy async models, CRUD classes and connection factories.
"""

from knowledge_assistant.boundary.db.base import Base
from knowledge_assistant.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from knowledge_assistant.boundary.db.models import ConversationModel, MessageModel

__all__ = [
    "Base",
    "ConversationModel",
    "MessageModel",
    "create_tables",
    "get_async_engine",
    "get_async_session_factory",
]
