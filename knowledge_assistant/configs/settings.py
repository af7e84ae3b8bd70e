"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from knowledge_assistant.configs.base import BaseSettings
from knowledge_assistant.configs.conversation import ConversationSettings
from knowledge_assistant.configs.database import DatabaseSettings
from knowledge_assistant.configs.ingestion import IngestionSettings
from knowledge_assistant.configs.rag import RagSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    rag: RagSettings = Field(default_factory=RagSettings)
    conversation: ConversationSettings = Field(default_factory=ConversationSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are loaded once; call get_settings.cache_clear()
    in tests that mutate the environment.

    Returns:
        Settings: Application settings instance

    Usage:
        from knowledge_assistant.configs import get_settings
        settings = get_settings()
    """
    return Settings()
