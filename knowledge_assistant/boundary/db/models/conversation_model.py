"""
Conversation ORM model.

Dependencies: sqlalchemy, knowledge_assistant.boundary.db.base
System role: Conversation persistence
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_assistant.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ConversationModel(Base, UUIDMixin, TimestampMixin):
    """
    Conversation ORM model.

    One row per conversation between a user and the assistant within a
    sector. Rows are soft-deleted by setting deleted_at; the core never
    hard-deletes them.

    Attributes:
        id: UUID primary key (assigned by the aggregate)
        user_id: Owning user
        sector_id: Sector the conversation belongs to
        deleted_at: Soft-delete timestamp, NULL while active
        messages: Messages in insertion order (cascade delete)
    """

    __tablename__ = "conversations"
    __table_args__ = (
        Index("ix_conversations_user_sector", "user_id", "sector_id"),
        Index("ix_conversations_updated_at", "updated_at"),
    )

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sector_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    messages = relationship(
        "MessageModel",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="MessageModel.sequence",
    )
