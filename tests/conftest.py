"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory SQLite session factory, conversation store,
    deterministic embedding function, mocked text generator
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

from unittest.mock import AsyncMock

import pytest

EMBEDDING_DIMENSION = 8


def keyword_vector(text: str, dimension: int = EMBEDDING_DIMENSION) -> list[float]:
    """Bag-of-words vector: each word adds 1.0 to bucket sum(ord) % dimension."""
    vector = [0.0] * dimension
    for word in text.lower().split():
        word = word.strip(".,;:!?()")
        if word:
            vector[sum(ord(ch) for ch in word) % dimension] += 1.0
    return vector


@pytest.fixture
def embed_fn() -> AsyncMock:
    """Async embedding function returning keyword vectors."""

    async def _embed(text: str) -> list[float]:
        return keyword_vector(text)

    return AsyncMock(side_effect=_embed)


@pytest.fixture
def batcher(embed_fn: AsyncMock):
    """EmbeddingBatcher over the keyword embedding function."""
    from knowledge_assistant.core.document_processing.tasks.embedding_task import (
        EmbeddingBatcher,
    )

    return EmbeddingBatcher(embed_fn, EMBEDDING_DIMENSION, batch_size=4)


@pytest.fixture
def mock_generator() -> AsyncMock:
    """
    Create mock TextGenerator.

    Returns:
        AsyncMock: generate / generate_structured are async, attributes plain
    """
    generator = AsyncMock()
    generator.model_name = "test-model"
    generator.temperature = 0.3
    generator.generate = AsyncMock(return_value="Generated text")
    generator.generate_structured = AsyncMock(return_value=None)
    return generator


@pytest.fixture
async def session_factory():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        async_sessionmaker: Factory bound to a fresh schema (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from knowledge_assistant.boundary.db import models  # noqa: F401  (registers tables)
    from knowledge_assistant.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def conversation_store(session_factory):
    """SqlAlchemyConversationStore over the in-memory database."""
    from knowledge_assistant.application.adapters.conversation_store import (
        SqlAlchemyConversationStore,
    )

    return SqlAlchemyConversationStore(session_factory)
