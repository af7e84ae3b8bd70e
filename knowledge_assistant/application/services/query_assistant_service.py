"""
Query assistant service.

Owns the lifecycle of one question: resolve the conversation, append the
user message, build the contextual query, run retrieval + generation,
append the assistant message and persist both messages in one save.

Dependencies: knowledge_assistant.core (rag_query, concurrency),
    knowledge_assistant.application.adapters
System role: Entry point of the query pipeline
"""

import logging
import time
import uuid
from typing import Any

from knowledge_assistant.application.adapters.conversation_store import ConversationStore
from knowledge_assistant.configs.conversation import ConversationSettings
from knowledge_assistant.core.concurrency import KeyedLock
from knowledge_assistant.core.exceptions import ConversationNotFoundError, ValidationError
from knowledge_assistant.core.rag_query.rag_query_service import RagQueryService
from knowledge_assistant.models.conversation import Conversation, Message, MessageRole
from knowledge_assistant.models.query import QueryAssistantOutput, UserContext
from knowledge_assistant.models.rag import RagAnswer, SearchOptions

logger = logging.getLogger(__name__)


class QueryAssistantService:
    """
    Multi-turn question answering over a sector's knowledge base.

    Requests for the same conversation are serialized; with no explicit
    conversation id, requests for the same (user, sector) pair are
    serialized too, so at most one active conversation exists per pair.
    """

    def __init__(
        self,
        store: ConversationStore,
        rag_service: RagQueryService,
        settings: ConversationSettings | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        """
        Initialize query assistant service.

        Args:
            store: Conversation persistence
            rag_service: Retrieval + generation orchestrator
            settings: Conversation settings (defaults if None)
            locks: Lock registry, shared by every service instance of a process
        """
        self.store = store
        self.rag_service = rag_service
        self.settings = settings or ConversationSettings()
        self.locks = locks if locks is not None else KeyedLock()

    async def execute(
        self,
        user_context: UserContext,
        query: str,
        conversation_id: uuid.UUID | None = None,
        search_options: SearchOptions | None = None,
        timeout: float | None = None,
    ) -> QueryAssistantOutput:
        """
        Answer a question within the user's conversation.

        Flow:
        1. Resolve conversation (by id, else latest active for the pair, else new)
        2. Append user message and build the contextual query
        3. Run the RAG query orchestrator
        4. Append assistant message with retrieval/evaluation metadata
        5. Persist both messages in one save

        Nothing is persisted if any step before the save fails or is cancelled.

        Args:
            user_context: Caller's user and sector
            query: Question text
            conversation_id: Continue this conversation instead of the pair's latest
            search_options: Retrieval knobs
            timeout: Deadline in seconds for embedding and generation
                (collaborator_timeout_seconds from settings if None)

        Returns:
            QueryAssistantOutput: Answer, sources and the conversation id

        Raises:
            ValidationError: Blank user id, sector id or query
            ConversationNotFoundError: Unknown, deleted or foreign conversation id
            EmbeddingFailedError, VectorStoreError, GenerationError: Collaborator failures
            PersistenceError: Save failed
        """
        self._validate(user_context, query)
        if timeout is None:
            timeout = self.settings.collaborator_timeout_seconds
        start_time = time.perf_counter()

        if conversation_id is not None:
            async with self.locks.hold(("conversation", conversation_id)):
                conversation = await self._load(conversation_id, user_context)
                output = await self._exchange(conversation, query, search_options, timeout)
        else:
            pair_key = ("pair", user_context.user_id, user_context.sector_id)
            async with self.locks.hold(pair_key):
                existing = await self.store.find_by_user_and_sector(
                    user_context.user_id, user_context.sector_id
                )
                conversation = None
                if existing is not None:
                    async with self.locks.hold(("conversation", existing.id)):
                        # Re-read under the conversation lock to see writes made by id.
                        conversation = await self._reload(existing.id, user_context)
                        if conversation is not None:
                            output = await self._exchange(
                                conversation, query, search_options, timeout
                            )
                if conversation is None:
                    # No conversation, or it was deleted after the lookup.
                    conversation = self._start(user_context)
                    async with self.locks.hold(("conversation", conversation.id)):
                        output = await self._exchange(
                            conversation, query, search_options, timeout
                        )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:execute - conversation={output.conversation_id} "
            f"response_type={output.response_type.value} sources={len(output.sources)} "
            f"elapsed_ms={elapsed_ms:.0f}"
        )
        return output

    @staticmethod
    def _validate(user_context: UserContext, query: str) -> None:
        if not user_context.user_id or not user_context.user_id.strip():
            raise ValidationError("User ID is required", field="user_id")
        if not user_context.sector_id or not user_context.sector_id.strip():
            raise ValidationError("Sector ID is required", field="sector_id")
        if not query or not query.strip():
            raise ValidationError("Query is required", field="query")

    async def _reload(
        self, conversation_id: uuid.UUID, user_context: UserContext
    ) -> Conversation | None:
        conversation = await self.store.find_by_id(conversation_id)
        if (
            conversation is None
            or conversation.is_deleted()
            or conversation.user_id != user_context.user_id
            or conversation.sector_id != user_context.sector_id
        ):
            return None
        return conversation

    async def _load(self, conversation_id: uuid.UUID, user_context: UserContext) -> Conversation:
        conversation = await self._reload(conversation_id, user_context)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    @staticmethod
    def _start(user_context: UserContext) -> Conversation:
        conversation = Conversation.start(user_context.user_id, user_context.sector_id)
        logger.info(
            f"{__name__}:execute - Starting conversation {conversation.id} "
            f"for user={user_context.user_id} sector={user_context.sector_id}"
        )
        return conversation

    def build_contextual_query(self, conversation: Conversation, query: str) -> str:
        """
        Prefix the query with rendered history.

        History is the last ``context_message_limit`` messages already in
        the conversation; the raw query is returned when there are none.
        """
        context = conversation.get_context_for_prompt(self.settings.context_message_limit)
        if not context:
            return query
        return f"{context}\nUser: {query}"

    async def _exchange(
        self,
        conversation: Conversation,
        query: str,
        search_options: SearchOptions | None,
        timeout: float | None,
    ) -> QueryAssistantOutput:
        contextual_query = self.build_contextual_query(conversation, query)
        conversation.add_message(Message.create(conversation.id, MessageRole.USER, query))

        rag_answer = await self.rag_service.answer(
            contextual_query,
            conversation.sector_id,
            search_options=search_options,
            timeout=timeout,
        )

        conversation.add_message(
            Message.create(
                conversation.id,
                MessageRole.ASSISTANT,
                rag_answer.response_text,
                metadata=self._assistant_metadata(rag_answer),
            )
        )

        saved = await self.store.save(conversation)

        return QueryAssistantOutput(
            response=rag_answer.response_text,
            response_type=rag_answer.response_type,
            structured=rag_answer.structured,
            conversation_id=saved.id,
            sources=rag_answer.sources,
            timestamp=rag_answer.timestamp,
            evaluation=rag_answer.evaluation,
        )

    @staticmethod
    def _assistant_metadata(rag_answer: RagAnswer) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "source_fragments": [source.fragment_id for source in rag_answer.sources],
            "sources_count": len(rag_answer.sources),
        }
        if rag_answer.evaluation is not None:
            metadata["evaluation"] = rag_answer.evaluation.model_dump(mode="json")
        return metadata
