"""
Test suite for QueryAssistantService.

Tests conversation resolution, contextual query building, assistant
metadata, atomic persistence and per-pair serialization. The RAG service
is mocked; the store is mocked in unit tests and backed by in-memory
SQLite where persistence behaviour matters.

System role: Verification of the query pipeline entry point
"""

import asyncio
import uuid
from unittest.mock import AsyncMock, patch

import pytest

from knowledge_assistant.application.services.conversation_service import ConversationService
from knowledge_assistant.application.services.query_assistant_service import (
    QueryAssistantService,
)
from knowledge_assistant.configs.conversation import ConversationSettings
from knowledge_assistant.core.concurrency import KeyedLock
from knowledge_assistant.core.exceptions import (
    ConversationNotFoundError,
    GenerationError,
    ValidationError,
)
from knowledge_assistant.models.conversation import Conversation, Message, MessageRole
from knowledge_assistant.models.query import UserContext
from knowledge_assistant.models.rag import (
    EvaluationResult,
    EvaluationScore,
    EvaluationStatus,
    RagAnswer,
    RagSource,
    ResponseType,
    SearchOptions,
)


@pytest.fixture
def user_context() -> UserContext:
    return UserContext(user_id="user-1", sector_id="sector-hr")


@pytest.fixture
def rag_answer() -> RagAnswer:
    return RagAnswer(
        response_text="Submit the form in the HR portal.",
        response_type=ResponseType.ANSWER,
        sources=[
            RagSource(fragment_id="doc:0", content="Use the HR portal", source_id="doc", similarity=0.9),
            RagSource(fragment_id="doc:2", content="Forms are online", source_id="doc", similarity=0.8),
        ],
        evaluation=EvaluationResult(
            faithfulness=EvaluationScore(score=0.9, status=EvaluationStatus.PASS),
            relevancy=EvaluationScore(score=0.7, status=EvaluationStatus.PASS),
        ),
    )


@pytest.fixture
def mock_rag_service(rag_answer: RagAnswer) -> AsyncMock:
    rag_service = AsyncMock()
    rag_service.answer = AsyncMock(return_value=rag_answer)
    return rag_service


@pytest.fixture
def mock_store() -> AsyncMock:
    """Store that finds nothing and echoes saved conversations."""
    store = AsyncMock()
    store.find_by_id = AsyncMock(return_value=None)
    store.find_by_user_and_sector = AsyncMock(return_value=None)
    store.save = AsyncMock(side_effect=lambda conversation: conversation)
    return store


@pytest.fixture
def service(mock_store: AsyncMock, mock_rag_service: AsyncMock) -> QueryAssistantService:
    return QueryAssistantService(store=mock_store, rag_service=mock_rag_service)


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "user_id,sector_id,query",
        [("", "s", "q"), ("u", "", "q"), ("u", "s", ""), ("u", "s", "   ")],
    )
    async def test_blank_input_rejected(
        self, service, mock_store, mock_rag_service, user_id, sector_id, query
    ) -> None:
        with pytest.raises(ValidationError):
            await service.execute(UserContext(user_id=user_id, sector_id=sector_id), query)

        mock_rag_service.answer.assert_not_called()
        mock_store.save.assert_not_called()


class TestNewConversation:
    """First question for a (user, sector) pair."""

    @pytest.mark.asyncio
    async def test_starts_conversation_and_saves_both_messages(
        self, service, mock_store, mock_rag_service, user_context, rag_answer
    ) -> None:
        # Act
        output = await service.execute(user_context, "How do I request leave?")

        # Assert
        mock_store.save.assert_awaited_once()
        saved: Conversation = mock_store.save.await_args.args[0]
        assert saved.user_id == "user-1"
        assert saved.sector_id == "sector-hr"
        assert [m.role for m in saved.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
        assert saved.messages[0].content == "How do I request leave?"
        assert saved.messages[1].content == rag_answer.response_text
        assert output.conversation_id == saved.id
        assert output.response == rag_answer.response_text
        assert output.response_type == ResponseType.ANSWER
        assert output.sources == rag_answer.sources
        assert output.evaluation == rag_answer.evaluation

    @pytest.mark.asyncio
    async def test_raw_query_sent_when_no_history(
        self, service, mock_rag_service, user_context
    ) -> None:
        await service.execute(user_context, "How do I request leave?")

        args = mock_rag_service.answer.await_args
        assert args.args == ("How do I request leave?", "sector-hr")

    @pytest.mark.asyncio
    async def test_assistant_metadata(self, service, mock_store, user_context) -> None:
        await service.execute(user_context, "How do I request leave?")

        metadata = mock_store.save.await_args.args[0].messages[1].metadata
        assert metadata["source_fragments"] == ["doc:0", "doc:2"]
        assert metadata["sources_count"] == 2
        assert metadata["evaluation"]["faithfulness"]["status"] == "PASS"

    @pytest.mark.asyncio
    async def test_evaluation_omitted_from_metadata_when_absent(
        self, service, mock_store, mock_rag_service, user_context
    ) -> None:
        mock_rag_service.answer.return_value = RagAnswer(
            response_text="No docs.", response_type=ResponseType.NO_CONTEXT
        )

        output = await service.execute(user_context, "Unknown topic?")

        metadata = mock_store.save.await_args.args[0].messages[1].metadata
        assert metadata == {"source_fragments": [], "sources_count": 0}
        assert output.response_type == ResponseType.NO_CONTEXT

    @pytest.mark.asyncio
    async def test_search_options_and_timeout_forwarded(
        self, service, mock_rag_service, user_context
    ) -> None:
        options = SearchOptions(max_results=3, min_similarity=0.5)

        await service.execute(user_context, "q", search_options=options, timeout=12.5)

        kwargs = mock_rag_service.answer.await_args.kwargs
        assert kwargs["search_options"] == options
        assert kwargs["timeout"] == 12.5


class TestExistingConversation:
    """Follow-up questions."""

    @pytest.fixture
    def existing(self, user_context: UserContext) -> Conversation:
        conversation = Conversation.start(user_context.user_id, user_context.sector_id)
        conversation.add_message(Message.create(conversation.id, "user", "What is PTO?"))
        conversation.add_message(Message.create(conversation.id, "assistant", "Paid time off."))
        return conversation

    @pytest.mark.asyncio
    async def test_contextual_query_includes_prior_messages(
        self, service, mock_store, mock_rag_service, user_context, existing
    ) -> None:
        # Arrange
        mock_store.find_by_user_and_sector.return_value = existing
        mock_store.find_by_id.return_value = existing

        # Act
        output = await service.execute(user_context, "How many days?")

        # Assert
        query = mock_rag_service.answer.await_args.args[0]
        assert query == "User: What is PTO?\nAssistant: Paid time off.\nUser: How many days?"
        assert output.conversation_id == existing.id

    @pytest.mark.asyncio
    async def test_context_limited_to_recent_messages(
        self, mock_store, mock_rag_service, user_context, existing
    ) -> None:
        # Arrange
        mock_store.find_by_user_and_sector.return_value = existing
        mock_store.find_by_id.return_value = existing
        service = QueryAssistantService(
            mock_store, mock_rag_service, settings=ConversationSettings(context_message_limit=1)
        )

        # Act
        await service.execute(user_context, "How many days?")

        # Assert
        query = mock_rag_service.answer.await_args.args[0]
        assert query == "Assistant: Paid time off.\nUser: How many days?"

    @pytest.mark.asyncio
    async def test_explicit_conversation_id(
        self, service, mock_store, user_context, existing
    ) -> None:
        mock_store.find_by_id.return_value = existing

        output = await service.execute(user_context, "And sick days?", conversation_id=existing.id)

        assert output.conversation_id == existing.id
        mock_store.find_by_user_and_sector.assert_not_called()
        assert len(mock_store.save.await_args.args[0].messages) == 4

    @pytest.mark.asyncio
    async def test_unknown_conversation_id(self, service, mock_store, user_context) -> None:
        with pytest.raises(ConversationNotFoundError):
            await service.execute(user_context, "q", conversation_id=uuid.uuid4())

        mock_store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_deleted_conversation_id(
        self, service, mock_store, user_context, existing
    ) -> None:
        existing.mark_deleted()
        mock_store.find_by_id.return_value = existing

        with pytest.raises(ConversationNotFoundError):
            await service.execute(user_context, "q", conversation_id=existing.id)

    @pytest.mark.asyncio
    async def test_conversation_of_other_user(self, service, mock_store, existing) -> None:
        mock_store.find_by_id.return_value = existing

        with pytest.raises(ConversationNotFoundError):
            await service.execute(
                UserContext(user_id="intruder", sector_id="sector-hr"),
                "q",
                conversation_id=existing.id,
            )


class TestAtomicity:
    @pytest.mark.asyncio
    async def test_rag_failure_persists_nothing(
        self, service, mock_store, mock_rag_service, user_context
    ) -> None:
        mock_rag_service.answer.side_effect = GenerationError("model offline", stage="answer")

        with pytest.raises(GenerationError):
            await service.execute(user_context, "q")

        mock_store.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancellation_persists_nothing(
        self, service, mock_store, mock_rag_service, user_context
    ) -> None:
        # Arrange
        started = asyncio.Event()

        async def slow_answer(*args, **kwargs):
            started.set()
            await asyncio.sleep(5)

        mock_rag_service.answer.side_effect = slow_answer
        task = asyncio.create_task(service.execute(user_context, "q"))
        await started.wait()

        # Act
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        # Assert
        mock_store.save.assert_not_called()
        assert len(service.locks) == 0


class TestWithSqlStore:
    """End-to-end through SqlAlchemyConversationStore on SQLite."""

    @pytest.mark.asyncio
    async def test_conversation_id_stable_across_turns(
        self, conversation_store, mock_rag_service, user_context
    ) -> None:
        # Arrange
        service = QueryAssistantService(conversation_store, mock_rag_service)

        # Act
        first = await service.execute(user_context, "What is PTO?")
        second = await service.execute(user_context, "How many days?")
        third = await service.execute(user_context, "Who approves it?")

        # Assert
        assert first.conversation_id == second.conversation_id == third.conversation_id
        stored = await conversation_store.find_by_id(first.conversation_id)
        assert len(stored.messages) == 6
        assert all(m.id is not None for m in stored.messages)
        assert [m.role for m in stored.messages] == [MessageRole.USER, MessageRole.ASSISTANT] * 3

    @pytest.mark.asyncio
    async def test_concurrent_first_questions_share_one_conversation(
        self, conversation_store, mock_rag_service, rag_answer, user_context
    ) -> None:
        # Arrange
        async def slow_answer(*args, **kwargs):
            await asyncio.sleep(0.01)
            return rag_answer

        mock_rag_service.answer.side_effect = slow_answer
        service = QueryAssistantService(conversation_store, mock_rag_service)

        # Act
        outputs = await asyncio.gather(
            *(service.execute(user_context, f"question {i}") for i in range(4))
        )

        # Assert
        assert len({output.conversation_id for output in outputs}) == 1
        stored = await conversation_store.find_by_id(outputs[0].conversation_id)
        assert len(stored.messages) == 8
        user_turns = [m.content for m in stored.messages if m.role == MessageRole.USER]
        assert sorted(user_turns) == [f"question {i}" for i in range(4)]

    @pytest.mark.asyncio
    async def test_deleted_conversation_replaced(
        self, conversation_store, mock_rag_service, user_context
    ) -> None:
        service = QueryAssistantService(conversation_store, mock_rag_service)
        first = await service.execute(user_context, "hello")

        await conversation_store.soft_delete(first.conversation_id)
        second = await service.execute(user_context, "hello again")

        assert second.conversation_id != first.conversation_id

    @pytest.mark.asyncio
    async def test_services_sharing_locks_serialize_first_questions(
        self, conversation_store, mock_rag_service, rag_answer, user_context
    ) -> None:
        # Arrange
        async def slow_answer(*args, **kwargs):
            await asyncio.sleep(0.01)
            return rag_answer

        mock_rag_service.answer.side_effect = slow_answer
        locks = KeyedLock()
        services = [
            QueryAssistantService(conversation_store, mock_rag_service, locks=locks)
            for _ in range(3)
        ]

        # Act
        outputs = await asyncio.gather(
            *(svc.execute(user_context, f"question {i}") for i, svc in enumerate(services))
        )

        # Assert
        assert all(svc.locks is locks for svc in services)
        assert len({output.conversation_id for output in outputs}) == 1
        active = await conversation_store.find_by_user(user_context.user_id)
        assert len(active) == 1
        assert len(active[0].messages) == 6

    @pytest.mark.asyncio
    async def test_delete_after_lookup_starts_new_conversation(
        self, conversation_store, mock_rag_service, user_context
    ) -> None:
        # Arrange
        locks = KeyedLock()
        service = QueryAssistantService(conversation_store, mock_rag_service, locks=locks)
        conversations = ConversationService(conversation_store, locks=locks)
        first = await service.execute(user_context, "hello")
        lookup = conversation_store.find_by_user_and_sector

        async def lookup_then_delete(user_id: str, sector_id: str):
            found = await lookup(user_id, sector_id)
            await conversations.delete_conversation(found.id)
            return found

        # Act
        with patch.object(
            conversation_store, "find_by_user_and_sector", side_effect=lookup_then_delete
        ):
            second = await service.execute(user_context, "hello again")

        # Assert
        assert second.conversation_id != first.conversation_id
        stored = await conversation_store.find_by_id(second.conversation_id)
        assert [m.content for m in stored.messages][0] == "hello again"
        assert len(stored.messages) == 2
        assert len(locks) == 0
