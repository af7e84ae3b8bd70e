"""
Test suite for the Conversation aggregate.

Covers message appends, role validation, monotonic timestamps, context
rendering, activity and soft deletion.

System role: Verification of conversation invariants
"""

import uuid
from datetime import datetime, timedelta, timezone

import pydantic
import pytest

from knowledge_assistant.core.exceptions import InvalidRoleError, ValidationError
from knowledge_assistant.models.conversation import Conversation, Message, MessageRole


@pytest.fixture
def conversation() -> Conversation:
    return Conversation.start("user-1", "sector-1")


def add(conversation: Conversation, role: str, content: str, **kwargs) -> Message:
    return conversation.add_message(Message.create(conversation.id, role, content, **kwargs))


class TestConversationStart:
    def test_start_assigns_id_and_empty_history(self, conversation: Conversation) -> None:
        assert isinstance(conversation.id, uuid.UUID)
        assert conversation.messages == []
        assert not conversation.has_messages()
        assert not conversation.is_deleted()

    @pytest.mark.parametrize("user_id,sector_id", [("", "s"), ("u", "  "), ("  ", "s")])
    def test_blank_ids_rejected(self, user_id: str, sector_id: str) -> None:
        with pytest.raises(ValidationError):
            Conversation.start(user_id, sector_id)


class TestAddMessage:
    """Appending messages."""

    def test_appends_in_order(self, conversation: Conversation) -> None:
        # Act
        add(conversation, "user", "Hello")
        add(conversation, "assistant", "Hi there")

        # Assert
        assert [m.role for m in conversation.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert [m.content for m in conversation.messages] == ["Hello", "Hi there"]
        assert all(m.id is None for m in conversation.messages)

    def test_role_parsing_is_case_insensitive(self, conversation: Conversation) -> None:
        message = add(conversation, "SYSTEM", "Be concise")

        assert message.role == MessageRole.SYSTEM

    def test_invalid_role_rejected(self, conversation: Conversation) -> None:
        with pytest.raises(InvalidRoleError) as exc_info:
            Message.create(conversation.id, "moderator", "text")

        assert exc_info.value.details["role"] == "moderator"

    def test_message_for_other_conversation_rejected(self, conversation: Conversation) -> None:
        stray = Message.create(uuid.uuid4(), "user", "wrong place")

        with pytest.raises(ValidationError):
            conversation.add_message(stray)

        assert conversation.messages == []

    def test_messages_are_immutable(self, conversation: Conversation) -> None:
        message = add(conversation, "user", "Hello")

        with pytest.raises(pydantic.ValidationError):
            message.content = "edited"

    def test_timestamps_clamped_to_be_monotonic(self, conversation: Conversation) -> None:
        # Arrange
        later = datetime(2030, 1, 1, tzinfo=timezone.utc)
        earlier = later - timedelta(hours=1)
        first = Message(conversation_id=conversation.id, role="user", content="a", created_at=later)
        second = Message(
            conversation_id=conversation.id, role="assistant", content="b", created_at=earlier
        )

        # Act
        conversation.add_message(first)
        stored = conversation.add_message(second)

        # Assert
        assert stored.created_at == later
        assert conversation.messages[0].created_at <= conversation.messages[1].created_at

    def test_updated_at_advances(self, conversation: Conversation) -> None:
        before = conversation.updated_at

        add(conversation, "user", "Hello")

        assert conversation.updated_at >= before
        assert conversation.updated_at >= conversation.messages[-1].created_at


class TestContext:
    """History windows and prompt rendering."""

    def test_last_messages(self, conversation: Conversation) -> None:
        for i in range(5):
            add(conversation, "user", f"m{i}")

        assert [m.content for m in conversation.get_last_messages(2)] == ["m3", "m4"]
        assert len(conversation.get_last_messages(10)) == 5
        assert conversation.get_last_messages(0) == []
        assert conversation.get_last_messages(-3) == []

    def test_context_for_prompt(self, conversation: Conversation) -> None:
        # Arrange
        add(conversation, "user", "What is PPE?")
        add(conversation, "assistant", "Personal protective equipment.")
        add(conversation, "user", "Where is it stored?")

        # Act
        context = conversation.get_context_for_prompt(limit=2)

        # Assert
        assert context == "Assistant: Personal protective equipment.\nUser: Where is it stored?"

    def test_empty_context(self, conversation: Conversation) -> None:
        assert conversation.get_context_for_prompt() == ""


class TestActivityAndDeletion:
    def test_empty_conversation_is_active(self, conversation: Conversation) -> None:
        assert conversation.is_active()

    def test_activity_window(self, conversation: Conversation) -> None:
        message = add(conversation, "user", "Hello")

        assert conversation.is_active(now=message.created_at + timedelta(hours=23))
        assert not conversation.is_active(now=message.created_at + timedelta(hours=25))
        assert conversation.is_active(
            window=timedelta(hours=48), now=message.created_at + timedelta(hours=25)
        )

    def test_mark_deleted_is_idempotent(self, conversation: Conversation) -> None:
        # Arrange
        first = datetime(2030, 1, 1, tzinfo=timezone.utc)

        # Act
        conversation.mark_deleted(first)
        conversation.mark_deleted(first + timedelta(days=1))

        # Assert
        assert conversation.is_deleted()
        assert conversation.deleted_at == first
