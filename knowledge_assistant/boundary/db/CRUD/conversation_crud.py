"""
Conversation CRUD operations.

Conversation-specific queries: eager loading of messages, lookup of the
most recent active conversation for a (user, sector) pair, soft delete.

Dependencies: sqlalchemy, knowledge_assistant.boundary.db.models
System role: Conversation persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from knowledge_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_assistant.boundary.db.models.conversation_model import ConversationModel


class ConversationCRUD(BaseCRUD[ConversationModel]):
    """CRUD operations for ConversationModel."""

    def __init__(self) -> None:
        super().__init__(ConversationModel)

    async def get_with_messages(
        self,
        session: AsyncSession,
        id: UUID,
    ) -> ConversationModel | None:
        """
        Retrieve a conversation with eagerly loaded messages.

        Soft-deleted conversations are returned too; callers decide.
        """
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.id == id)
            .options(selectinload(ConversationModel.messages))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_latest_active(
        self,
        session: AsyncSession,
        user_id: str,
        sector_id: str,
    ) -> ConversationModel | None:
        """
        Most recently updated non-deleted conversation for a pair.

        Args:
            session: Async database session
            user_id: Owning user
            sector_id: Sector

        Returns:
            ConversationModel with messages loaded, None if there is none
        """
        stmt = (
            select(ConversationModel)
            .where(
                ConversationModel.user_id == user_id,
                ConversationModel.sector_id == sector_id,
                ConversationModel.deleted_at.is_(None),
            )
            .order_by(ConversationModel.updated_at.desc(), ConversationModel.created_at.desc())
            .limit(1)
            .options(selectinload(ConversationModel.messages))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user(
        self,
        session: AsyncSession,
        user_id: str,
        include_deleted: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ConversationModel]:
        """List a user's conversations, newest activity first."""
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.user_id == user_id)
            .order_by(ConversationModel.updated_at.desc())
            .options(selectinload(ConversationModel.messages))
            .offset(offset)
        )
        if not include_deleted:
            stmt = stmt.where(ConversationModel.deleted_at.is_(None))
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_active_by_user(self, session: AsyncSession, user_id: str) -> int:
        stmt = select(func.count(ConversationModel.id)).where(
            ConversationModel.user_id == user_id,
            ConversationModel.deleted_at.is_(None),
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def soft_delete(self, session: AsyncSession, id: UUID, deleted_at: datetime) -> bool:
        """
        Set deleted_at on an active conversation.

        Returns:
            True if a row changed, False if absent or already deleted
        """
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == id, ConversationModel.deleted_at.is_(None))
            .values(deleted_at=deleted_at, updated_at=deleted_at)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


conversation_crud = ConversationCRUD()
