"""
Conversation configuration.

Dependencies: pydantic, pydantic_settings
System role: Context window, activity window and query timeout settings
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_assistant.configs.base import BaseSettings


class ConversationSettings(BaseSettings):
    """Conversation context settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CONVERSATION_",
        case_sensitive=False,
        extra="ignore",
    )

    context_message_limit: int = Field(
        default=10,
        ge=0,
        description="Prior messages rendered into the contextual query",
    )
    activity_window_hours: float = Field(
        default=24.0,
        gt=0,
        description="A conversation is active if its last message is newer than this",
    )
    collaborator_timeout_seconds: float | None = Field(
        default=60.0,
        gt=0,
        description="Default timeout for embedding/generation calls (None disables)",
    )
