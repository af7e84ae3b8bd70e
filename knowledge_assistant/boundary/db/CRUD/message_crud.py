"""
Message CRUD operations.

Dependencies: sqlalchemy, knowledge_assistant.boundary.db.models
System role: Message persistence operations
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_assistant.boundary.db.models.message_model import MessageModel


class MessageCRUD(BaseCRUD[MessageModel]):
    """CRUD operations for MessageModel. Messages are insert-only."""

    def __init__(self) -> None:
        super().__init__(MessageModel)

    async def get_ids_for_conversation(
        self,
        session: AsyncSession,
        conversation_id: UUID,
    ) -> set[UUID]:
        stmt = select(MessageModel.id).where(MessageModel.conversation_id == conversation_id)
        result = await session.execute(stmt)
        return set(result.scalars().all())


message_crud = MessageCRUD()
