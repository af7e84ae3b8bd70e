"""
Database connection management.

Provides the async SQLAlchemy engine and session factory used by the
conversation store.

Dependencies: sqlalchemy, knowledge_assistant.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from knowledge_assistant.configs import get_settings
from knowledge_assistant.configs.database import DatabaseSettings
from knowledge_assistant.boundary.db.base import Base


def get_async_engine(db_config: DatabaseSettings | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    Pool sizing applies to server databases only; SQLite URLs use the
    driver's default pool.

    Args:
        db_config: Database settings (application settings if None)

    Returns:
        AsyncEngine: Configured async engine

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = db_config or get_settings().database
    url = db_config.async_database_url

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=db_config.echo_sql)

    return create_async_engine(
        url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory with explicit transaction control.

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            async with session.begin():
                session.add(obj)
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables registered on Base (development and tests)."""
    import knowledge_assistant.boundary.db.models  # noqa: F401  registers models

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
