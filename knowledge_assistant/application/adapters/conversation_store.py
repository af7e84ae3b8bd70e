"""
Conversation store adapter.

Persistence boundary for the Conversation aggregate. The Protocol is what
the query pipeline depends on; SqlAlchemyConversationStore implements it
on SQLAlchemy async sessions, one transaction per operation.

Dependencies: sqlalchemy, knowledge_assistant.boundary.db.CRUD
System role: Maps the aggregate to and from relational rows
"""

import logging
import uuid
from datetime import datetime
from typing import Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.boundary.db.base import as_utc, utcnow
from knowledge_assistant.boundary.db.CRUD.conversation_crud import conversation_crud
from knowledge_assistant.boundary.db.CRUD.message_crud import message_crud
from knowledge_assistant.boundary.db.models.conversation_model import ConversationModel
from knowledge_assistant.boundary.db.models.message_model import MessageModel
from knowledge_assistant.core.exceptions import PersistenceError
from knowledge_assistant.models.conversation import Conversation, Message, MessageRole

logger = logging.getLogger(__name__)


@runtime_checkable
class ConversationStore(Protocol):
    """Persistence contract for conversations."""

    async def save(self, conversation: Conversation) -> Conversation:
        """Persist the conversation and every unsaved message atomically."""
        ...

    async def find_by_id(self, conversation_id: uuid.UUID) -> Conversation | None:
        """Load a conversation (soft-deleted ones included) with its messages."""
        ...

    async def find_by_user_and_sector(self, user_id: str, sector_id: str) -> Conversation | None:
        """Most recent non-deleted conversation for the pair."""
        ...

    async def soft_delete(self, conversation_id: uuid.UUID) -> bool:
        """Mark deleted; False when the conversation does not exist."""
        ...

    async def find_by_user(
        self,
        user_id: str,
        include_deleted: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Conversation]:
        """A user's conversations across sectors, most recently updated first."""
        ...


def to_domain(model: ConversationModel) -> Conversation:
    """Map a ConversationModel with loaded messages to the aggregate."""
    return Conversation(
        id=model.id,
        user_id=model.user_id,
        sector_id=model.sector_id,
        messages=[message_to_domain(row) for row in model.messages],
        created_at=as_utc(model.created_at),
        updated_at=as_utc(model.updated_at),
        deleted_at=as_utc(model.deleted_at),
    )


def message_to_domain(row: MessageModel) -> Message:
    return Message(
        id=row.id,
        conversation_id=row.conversation_id,
        role=MessageRole.parse(row.role),
        content=row.content,
        metadata=row.message_metadata,
        created_at=as_utc(row.created_at),
    )


class SqlAlchemyConversationStore:
    """ConversationStore backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize store.

        Args:
            session_factory: Factory producing one session per operation
        """
        self._session_factory = session_factory

    async def save(self, conversation: Conversation) -> Conversation:
        """
        Upsert the conversation row and insert messages not yet stored.

        Persisted messages are never rewritten. Unsaved messages get their
        id here; the returned aggregate carries those ids.

        Raises:
            PersistenceError: When the transaction fails (nothing is written)
        """
        saved_messages: list[Message] = []
        rows: list[dict] = []
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    exists = await conversation_crud.exists(session, conversation.id)
                    if exists:
                        await conversation_crud.update_by_id(
                            session,
                            conversation.id,
                            updated_at=conversation.updated_at,
                            deleted_at=conversation.deleted_at,
                        )
                        stored_ids = await message_crud.get_ids_for_conversation(
                            session, conversation.id
                        )
                    else:
                        await conversation_crud.create(
                            session,
                            id=conversation.id,
                            user_id=conversation.user_id,
                            sector_id=conversation.sector_id,
                            created_at=conversation.created_at,
                            updated_at=conversation.updated_at,
                            deleted_at=conversation.deleted_at,
                        )
                        stored_ids = set()

                    for sequence, message in enumerate(conversation.messages):
                        if message.id is not None and message.id in stored_ids:
                            saved_messages.append(message)
                            continue
                        message_id = message.id or uuid.uuid4()
                        rows.append(
                            {
                                "id": message_id,
                                "conversation_id": conversation.id,
                                "sequence": sequence,
                                "role": message.role.value,
                                "content": message.content,
                                "message_metadata": message.metadata,
                                "created_at": message.created_at,
                            }
                        )
                        saved_messages.append(message.model_copy(update={"id": message_id}))

                    if rows:
                        await message_crud.create_many(session, rows)
        except SQLAlchemyError as e:
            logger.error(
                f"{__name__}:save - Failed to save conversation {conversation.id}: "
                f"{type(e).__name__}: {e}"
            )
            raise PersistenceError(
                f"Failed to save conversation: {e}",
                operation="save",
                details={"conversation_id": str(conversation.id)},
            ) from e

        logger.debug(
            f"{__name__}:save - Saved conversation {conversation.id} "
            f"({len(rows)} new messages, {len(saved_messages)} total)"
        )
        return conversation.model_copy(update={"messages": saved_messages})

    async def find_by_id(self, conversation_id: uuid.UUID) -> Conversation | None:
        try:
            async with self._session_factory() as session:
                model = await conversation_crud.get_with_messages(session, conversation_id)
                return to_domain(model) if model is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to load conversation: {e}",
                operation="find_by_id",
                details={"conversation_id": str(conversation_id)},
            ) from e

    async def find_by_user_and_sector(self, user_id: str, sector_id: str) -> Conversation | None:
        try:
            async with self._session_factory() as session:
                model = await conversation_crud.get_latest_active(session, user_id, sector_id)
                return to_domain(model) if model is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to look up conversation: {e}",
                operation="find_by_user_and_sector",
                details={"user_id": user_id, "sector_id": sector_id},
            ) from e

    async def find_by_user(
        self,
        user_id: str,
        include_deleted: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Conversation]:
        try:
            async with self._session_factory() as session:
                models = await conversation_crud.get_by_user(
                    session, user_id, include_deleted=include_deleted, limit=limit, offset=offset
                )
                return [to_domain(model) for model in models]
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to list conversations: {e}",
                operation="find_by_user",
                details={"user_id": user_id},
            ) from e

    async def count_active_by_user(self, user_id: str) -> int:
        try:
            async with self._session_factory() as session:
                return await conversation_crud.count_active_by_user(session, user_id)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to count conversations: {e}",
                operation="count_active_by_user",
                details={"user_id": user_id},
            ) from e

    async def soft_delete(
        self,
        conversation_id: uuid.UUID,
        deleted_at: datetime | None = None,
    ) -> bool:
        """
        Soft-delete a conversation. Idempotent for already deleted rows.

        Returns:
            False when no conversation has this id
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    if not await conversation_crud.exists(session, conversation_id):
                        return False
                    await conversation_crud.soft_delete(
                        session, conversation_id, deleted_at or utcnow()
                    )
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to delete conversation: {e}",
                operation="soft_delete",
                details={"conversation_id": str(conversation_id)},
            ) from e
        logger.info(f"{__name__}:soft_delete - Conversation {conversation_id} soft-deleted")
        return True
