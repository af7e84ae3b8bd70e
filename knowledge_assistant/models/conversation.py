"""
Conversation aggregate.

Conversation is the aggregate root of a multi-turn exchange between one
user and the assistant inside one sector. Messages are immutable and the
history is append-only. The aggregate performs no I/O; persistence is an
explicit save through the conversation store.

Dependencies: pydantic
System role: In-memory model of conversation state and its invariants
"""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from knowledge_assistant.core.exceptions import InvalidRoleError, ValidationError

DEFAULT_ACTIVITY_WINDOW = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageRole(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    @classmethod
    def parse(cls, value: Any) -> "MessageRole":
        """
        Resolve a role from a member or its string value.

        Raises:
            InvalidRoleError: If value is not user, assistant or system
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidRoleError(value)

    @property
    def label(self) -> str:
        """Prompt label ("User", "Assistant", "System")."""
        return self.value.capitalize()


class Message(BaseModel):
    """A single immutable message. ``id`` is None until the store persists it."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID | None = None
    conversation_id: uuid.UUID
    role: MessageRole
    content: str
    metadata: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def create(
        cls,
        conversation_id: uuid.UUID,
        role: "MessageRole | str",
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> "Message":
        """Build a new, not yet persisted message. Raises InvalidRoleError."""
        return cls(
            conversation_id=conversation_id,
            role=MessageRole.parse(role),
            content=content,
            metadata=metadata,
        )

    def render(self) -> str:
        return f"{self.role.label}: {self.content}"


class Conversation(BaseModel):
    """
    Aggregate root for a user's exchange within a sector.

    Invariants:
        - messages are only ever appended, never removed or reordered
        - messages[i].created_at <= messages[i + 1].created_at
        - updated_at advances on every append
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    user_id: str
    sector_id: str
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @classmethod
    def start(cls, user_id: str, sector_id: str) -> "Conversation":
        """Create a fresh conversation for a (user, sector) pair."""
        if not user_id or not user_id.strip():
            raise ValidationError("user_id cannot be blank", field="user_id")
        if not sector_id or not sector_id.strip():
            raise ValidationError("sector_id cannot be blank", field="sector_id")
        now = utcnow()
        return cls(user_id=user_id, sector_id=sector_id, created_at=now, updated_at=now)

    def add_message(self, message: Message) -> Message:
        """
        Append a message to the history.

        The stored message's created_at is clamped to be no earlier than the
        previous message, so ordering holds even if the clock steps back.

        Args:
            message: Message created for this conversation

        Returns:
            Message: The message as stored in the history

        Raises:
            InvalidRoleError: If the role is not user, assistant or system
            ValidationError: If the message belongs to another conversation
        """
        role = MessageRole.parse(message.role)
        if message.conversation_id != self.id:
            raise ValidationError(
                "Message belongs to a different conversation",
                field="conversation_id",
                details={
                    "conversation_id": str(self.id),
                    "message_conversation_id": str(message.conversation_id),
                },
            )

        created_at = message.created_at
        if self.messages and created_at < self.messages[-1].created_at:
            created_at = self.messages[-1].created_at
        if created_at != message.created_at or role is not message.role:
            message = message.model_copy(update={"created_at": created_at, "role": role})

        self.messages.append(message)
        self.updated_at = max(utcnow(), created_at, self.updated_at)
        return message

    def has_messages(self) -> bool:
        return len(self.messages) > 0

    def get_last_messages(self, n: int) -> list[Message]:
        """Trailing ``n`` messages in chronological order; [] for n <= 0."""
        if n <= 0:
            return []
        return list(self.messages[-n:])

    def get_context_for_prompt(self, limit: int = 10) -> str:
        """Render the last ``limit`` messages as "<Role>: <content>" lines."""
        return "\n".join(message.render() for message in self.get_last_messages(limit))

    def is_active(
        self,
        window: timedelta = DEFAULT_ACTIVITY_WINDOW,
        now: datetime | None = None,
    ) -> bool:
        """
        True when the latest message is within ``window`` of ``now``.

        A conversation without messages counts as active.
        """
        if not self.messages:
            return True
        now = now or utcnow()
        return now - self.messages[-1].created_at <= window

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, now: datetime | None = None) -> None:
        """Soft delete. Idempotent: the first deletion time is kept."""
        if self.deleted_at is not None:
            return
        self.deleted_at = now or utcnow()
        self.updated_at = max(self.deleted_at, self.updated_at)
