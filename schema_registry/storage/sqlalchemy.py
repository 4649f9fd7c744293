"""
SQLAlchemy Storage Adapter

Async SQLAlchemy 2.0 implementation for production persistence.
Uses async engine and session for all operations.

Compatible with:
- SQLite (aiosqlite)
- PostgreSQL (asyncpg)
- MySQL (aiomysql)

All operations are async. No sync DB calls.
Each operation opens its own session from the shared sessionmaker and
closes it on exit, so connections return to the pool on error paths too.
"""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    async_sessionmaker,
)

from schema_registry.storage.ports import (
    SchemaStore,
    SchemaRecord,
    StoreUnavailableError,
)
from schema_registry.storage.models import SchemaModel

logger = logging.getLogger(__name__)


# =============================================================================
# Converters
# =============================================================================

def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they were written as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def schema_model_to_record(model: SchemaModel) -> SchemaRecord:
    """Convert SQLAlchemy model to port record."""
    return SchemaRecord(
        id=model.id,
        created_at=_as_utc(model.created_at),
        event_type=model.event_type,
        source=model.source,
        schema_body=model.schema_body,
        is_public=model.is_public,
    )


def schema_record_to_model(record: SchemaRecord, project: str) -> SchemaModel:
    """Convert port record to SQLAlchemy model."""
    return SchemaModel(
        id=record.id,
        project=project,
        created_at=record.created_at,
        event_type=record.event_type,
        source=record.source,
        schema_body=record.schema_body,
        is_public=record.is_public,
    )


# =============================================================================
# SQLAlchemy Schema Store
# =============================================================================

class SqlAlchemySchemaStore(SchemaStore):
    """
    SQLAlchemy implementation of schema storage.

    All queries are scoped to one project.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        project: str,
        engine: AsyncEngine | None = None,
    ):
        super().__init__()
        self._session_factory = session_factory
        self._project = project
        self._engine = engine

    async def create(
        self,
        event_type: str,
        source: str,
        schema_body: str
    ) -> SchemaRecord:
        record = SchemaRecord(
            id=uuid4(),
            created_at=self._stamp(),
            event_type=event_type,
            source=source,
            schema_body=schema_body,
            is_public=False,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(schema_record_to_model(record, self._project))
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"Unable to write schema for type {event_type}: {exc}")
            raise StoreUnavailableError("Unable to write to database") from exc

        return record

    async def find_one_by_type(self, event_type: str) -> SchemaRecord | None:
        query = (
            select(SchemaModel)
            .where(
                SchemaModel.project == self._project,
                SchemaModel.event_type == event_type,
            )
            .order_by(SchemaModel.created_at, SchemaModel.id)
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                model = result.scalars().first()
                if model is None:
                    return None
                return schema_model_to_record(model)
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"Query error for type {event_type}: {exc}")
            raise StoreUnavailableError("Query failed") from exc

    async def list_public_ordered_by_type(self) -> list[SchemaRecord]:
        query = (
            select(SchemaModel)
            .where(
                SchemaModel.project == self._project,
                SchemaModel.is_public.is_(True),
            )
            .order_by(SchemaModel.event_type, SchemaModel.created_at, SchemaModel.id)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [schema_model_to_record(m) for m in result.scalars().all()]
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"Query error listing public schemas: {exc}")
            raise StoreUnavailableError("Query failed") from exc

    async def close(self) -> None:
        """Dispose the engine and its connection pool."""
        if self._engine:
            await self._engine.dispose()
