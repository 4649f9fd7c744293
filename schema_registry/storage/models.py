"""
SQLAlchemy Models for Schema Storage

Async-compatible SQLAlchemy 2.0 ORM model for the ``schema`` collection.

Designed to work with:
- SQLite (via aiosqlite)
- PostgreSQL (via asyncpg)
- MySQL (via aiomysql)

Collation handling:
- event_type compares by code point on every backend so that lookups are
  case-sensitive and ORDER BY is plain lexicographic.
- SQLite: BINARY (the default)
- PostgreSQL: "C"
- MySQL: utf8mb4_bin
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    String,
    Text,
    Boolean,
    DateTime,
    Index,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.types import TypeDecorator


# =============================================================================
# Custom Types
# =============================================================================

class UUIDType(TypeDecorator):
    """
    Platform-agnostic UUID column.

    Uses native UUID on PostgreSQL, String(36) on SQLite/MySQL.
    """
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, UUID):
            return value
        return UUID(value)


EventTypeString = (
    String(255)
    .with_variant(String(255, collation="C"), "postgresql")
    .with_variant(String(255, collation="utf8mb4_bin"), "mysql", "mariadb")
)


# =============================================================================
# Base
# =============================================================================

class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# =============================================================================
# Schema Model
# =============================================================================

class SchemaModel(Base):
    """
    Published schema document.

    Rows are inserted once and never updated.
    """
    __tablename__ = "schema"

    # Primary key
    id: Mapped[UUID] = mapped_column(
        UUIDType(),
        primary_key=True,
        default=uuid4
    )

    # Store scope
    project: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False
    )

    event_type: Mapped[str] = mapped_column(EventTypeString, nullable=False)
    source: Mapped[str] = mapped_column(Text, nullable=False)

    # Opaque, never queried
    schema_body: Mapped[str] = mapped_column(Text, nullable=False)

    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Indexes
    __table_args__ = (
        Index("ix_schema_project_type", "project", "event_type", "created_at"),
        Index("ix_schema_project_public_type", "project", "is_public", "event_type"),
    )
