"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from knowledge_assistant.configs.conversation import ConversationSettings
from knowledge_assistant.configs.database import DatabaseSettings
from knowledge_assistant.configs.ingestion import IngestionSettings
from knowledge_assistant.configs.rag import RagSettings
from knowledge_assistant.configs.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "DatabaseSettings",
    "IngestionSettings",
    "RagSettings",
    "ConversationSettings",
]
