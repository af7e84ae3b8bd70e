"""
Message ORM model.

Dependencies: sqlalchemy, knowledge_assistant.boundary.db.base
System role: Message persistence
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_assistant.boundary.db.base import Base, UUIDMixin, utcnow


class MessageModel(Base, UUIDMixin):
    """
    Message ORM model. Rows are written once and never updated.

    Attributes:
        conversation_id: Parent conversation
        sequence: 0-based position within the conversation
        role: user, assistant or system
        content: Message text
        message_metadata: Retrieval/evaluation metadata (column "metadata")
        created_at: Creation timestamp (UTC)
    """

    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant', 'system')", name="ck_messages_role"),
        Index("ix_messages_conversation_sequence", "conversation_id", "sequence", unique=True),
    )

    conversation_id: Mapped[UUID] = mapped_column(
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    message_metadata: Mapped[dict | None] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
        default=None,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    conversation = relationship("ConversationModel", back_populates="messages")
