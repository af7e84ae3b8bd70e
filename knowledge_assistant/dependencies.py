"""
Dependency injection container.

Factory functions that wire the production object graph from settings.
Process-wide singletons (engine, session factory, locks, vector index,
embedding batcher) are cached; services are cheap and built per call.

Dependencies: knowledge_assistant.configs, knowledge_assistant.application,
    knowledge_assistant.core, knowledge_assistant.boundary
System role: DI container for service construction
"""

import logging
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from knowledge_assistant.application.adapters import SqlAlchemyConversationStore
from knowledge_assistant.application.services import (
    ConversationService,
    QueryAssistantService,
)
from knowledge_assistant.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from knowledge_assistant.boundary.llm import GeminiTextGenerator
from knowledge_assistant.boundary.vdb import InMemoryVectorStore
from knowledge_assistant.configs import Settings, get_settings
from knowledge_assistant.core.concurrency import KeyedLock
from knowledge_assistant.core.document_processing import DocumentPipeline
from knowledge_assistant.core.document_processing.tasks import (
    ChunkingTask,
    DocumentParser,
    EmbeddingBatcher,
)
from knowledge_assistant.core.rag_query import RagEvaluator, RagQueryService
from knowledge_assistant.observability import configure_logging

logger = logging.getLogger(__name__)


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


@lru_cache
def get_engine() -> AsyncEngine:
    return get_async_engine(get_settings_dependency().database)


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the configured database."""
    return get_async_session_factory(get_engine())


@lru_cache
def get_conversation_locks() -> KeyedLock:
    """Lock registry shared by every conversation-touching service."""
    return KeyedLock()


@lru_cache
def get_vector_store() -> InMemoryVectorStore:
    """
    Get the vector index.

    Development default; a deployment swaps in any VectorIndex implementation.
    """
    return InMemoryVectorStore(dimension=get_settings_dependency().ingestion.embedding_dimension)


@lru_cache
def get_embedding_batcher() -> EmbeddingBatcher:
    """Embedding batcher shared by ingestion and query embedding."""
    return EmbeddingBatcher.from_settings(get_settings_dependency().ingestion)


def get_conversation_store() -> SqlAlchemyConversationStore:
    return SqlAlchemyConversationStore(get_session_factory())


def get_document_pipeline() -> DocumentPipeline:
    """
    Get ingestion pipeline instance.

    Returns:
        DocumentPipeline: Parser, chunker and batcher upserting into the vector store
    """
    settings = get_settings_dependency()
    return DocumentPipeline(
        parser=DocumentParser(),
        chunker=ChunkingTask.from_settings(settings.ingestion),
        batcher=get_embedding_batcher(),
        vector_index=get_vector_store(),
    )


def get_rag_query_service() -> RagQueryService:
    """
    Get RAG query orchestrator instance.

    Returns:
        RagQueryService: Evaluator attached only when evaluation is enabled
    """
    rag_settings = get_settings_dependency().rag
    generator = GeminiTextGenerator.from_settings(rag_settings)
    evaluator = (
        RagEvaluator.from_settings(generator, rag_settings)
        if rag_settings.enable_evaluation
        else None
    )
    return RagQueryService(
        batcher=get_embedding_batcher(),
        vector_search=get_vector_store(),
        generator=generator,
        evaluator=evaluator,
        settings=rag_settings,
    )


def get_query_assistant_service() -> QueryAssistantService:
    """
    Get query assistant service instance.

    Returns:
        QueryAssistantService: Service wired to the shared conversation locks
    """
    return QueryAssistantService(
        store=get_conversation_store(),
        rag_service=get_rag_query_service(),
        settings=get_settings_dependency().conversation,
        locks=get_conversation_locks(),
    )


def get_conversation_service() -> ConversationService:
    return ConversationService(
        get_conversation_store(),
        settings=get_settings_dependency().conversation,
        locks=get_conversation_locks(),
    )


async def startup(create_schema: bool = False) -> None:
    """
    Process startup hook for the embedding application.

    Configures logging from settings and optionally creates the
    conversation tables (local development against SQLite).
    """
    settings = get_settings_dependency()
    configure_logging(settings.log_level)
    if create_schema:
        await create_tables(get_engine())
    logger.info(
        f"{__name__}:startup - Knowledge assistant ready (environment={settings.environment})"
    )


async def shutdown() -> None:
    """Dispose the engine and drop cached singletons."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
    for factory in (
        get_session_factory,
        get_engine,
        get_embedding_batcher,
        get_vector_store,
        get_conversation_locks,
    ):
        factory.cache_clear()
    logger.info(f"{__name__}:shutdown - Resources released")
