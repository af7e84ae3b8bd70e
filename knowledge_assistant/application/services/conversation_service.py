"""
Conversation service orchestrator.

Read and delete operations on stored conversations.

Dependencies: knowledge_assistant.application.adapters, knowledge_assistant.core
System role: Conversation lifecycle use cases
"""

import logging
import uuid
from datetime import timedelta

from knowledge_assistant.application.adapters.conversation_store import ConversationStore
from knowledge_assistant.configs.conversation import ConversationSettings
from knowledge_assistant.core.concurrency import KeyedLock
from knowledge_assistant.core.exceptions import ConversationNotFoundError, ValidationError
from knowledge_assistant.models.conversation import Conversation, Message

logger = logging.getLogger(__name__)


class ConversationService:
    """Conversation service orchestrator."""

    def __init__(
        self,
        store: ConversationStore,
        settings: ConversationSettings | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        """
        Initialize conversation service.

        Args:
            store: Conversation persistence
            settings: Conversation settings (defaults if None)
            locks: Lock registry shared with QueryAssistantService, so a delete
                never interleaves with an exchange on the same conversation
        """
        self.store = store
        self.settings = settings or ConversationSettings()
        self.locks = locks if locks is not None else KeyedLock()

    async def get_conversation(self, conversation_id: uuid.UUID) -> Conversation:
        """
        Load a conversation with its messages.

        Raises:
            ConversationNotFoundError: Unknown or soft-deleted id
        """
        conversation = await self.store.find_by_id(conversation_id)
        if conversation is None or conversation.is_deleted():
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def get_history(
        self,
        conversation_id: uuid.UUID,
        limit: int | None = None,
    ) -> list[Message]:
        """
        Messages of a conversation in order, optionally only the last ``limit``.

        Raises:
            ValidationError: Negative limit
            ConversationNotFoundError: Unknown or soft-deleted id
        """
        if limit is not None and limit < 0:
            raise ValidationError("History limit must be >= 0", field="limit")

        conversation = await self.get_conversation(conversation_id)
        if limit is None:
            return list(conversation.messages)
        return conversation.get_last_messages(limit)

    async def list_conversations(
        self,
        user_id: str,
        active_only: bool = False,
        limit: int | None = None,
    ) -> list[Conversation]:
        """
        List a user's non-deleted conversations, most recently updated first.

        Args:
            user_id: Owning user
            active_only: Keep only conversations with a message inside the
                activity window (``activity_window_hours``)
            limit: Maximum conversations returned

        Raises:
            ValidationError: Blank user id
        """
        if not user_id or not user_id.strip():
            raise ValidationError("User ID is required", field="user_id")

        conversations = await self.store.find_by_user(user_id, limit=limit)
        if active_only:
            window = timedelta(hours=self.settings.activity_window_hours)
            conversations = [c for c in conversations if c.is_active(window)]
        return conversations

    async def delete_conversation(self, conversation_id: uuid.UUID) -> None:
        """
        Soft-delete a conversation.

        The next question for the same user and sector starts a new conversation.

        Raises:
            ConversationNotFoundError: No conversation has this id
        """
        async with self.locks.hold(("conversation", conversation_id)):
            deleted = await self.store.soft_delete(conversation_id)
        if not deleted:
            raise ConversationNotFoundError(conversation_id)
        logger.info(f"{__name__}:delete_conversation - Deleted conversation {conversation_id}")
