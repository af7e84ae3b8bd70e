"""
SQLAlchemy declarative base and common mixins.

Provides the base class for all ORM models plus UUID primary key and
timestamp mixins. Column types are dialect-neutral so the same models run
on PostgreSQL (asyncpg) and SQLite (aiosqlite).

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from drivers that drop tzinfo."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for ORM model registration."""

    pass


class UUIDMixin:
    """
    Mixin providing a UUID primary key.

    Attributes:
        id: UUID v4 primary key, generated on insert unless supplied
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )


class TimestampMixin:
    """
    Mixin providing created/updated timestamps (UTC).

    Attributes:
        created_at: Row creation timestamp
        updated_at: Last modification timestamp, refreshed on update
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
