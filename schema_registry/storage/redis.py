"""
Redis Storage Adapter

Redis-based implementation of SchemaStore.

Uses redis.asyncio for async operations.

Key patterns (all under ``{key_prefix}:{project}``):
- schema:{id} -> JSON-encoded SchemaRecord
- schema:type:{event_type} -> ZSET of ids scored by creation time
- schema:public -> ZSET of "{event_type}\\x00{utc stamp}\\x00{id}" members,
  all scored 0, read back with lexicographic ordering

Nothing in the publish path writes to schema:public. Records become
public only when curated directly in Redis: the document's is_public is
set and the member is added to schema:public. Members whose document is
missing or not public are skipped.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .ports import (
    SchemaStore,
    SchemaRecord,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)

PUBLIC_MEMBER_SEPARATOR = "\x00"
PUBLIC_STAMP_FORMAT = "%Y%m%dT%H%M%S.%f"


# =============================================================================
# Serialization Helpers
# =============================================================================

def _serialize_record(record: SchemaRecord) -> str:
    """Serialize SchemaRecord to JSON."""
    return json.dumps({
        "id": str(record.id),
        "created_at": record.created_at.isoformat(),
        "event_type": record.event_type,
        "source": record.source,
        "schema_body": record.schema_body,
        "is_public": record.is_public,
    })


def _deserialize_record(data: str | bytes) -> SchemaRecord:
    """Deserialize JSON to SchemaRecord."""
    d: dict[str, Any] = json.loads(data)
    return SchemaRecord(
        id=UUID(d["id"]),
        created_at=datetime.fromisoformat(d["created_at"]),
        event_type=d["event_type"],
        source=d["source"],
        schema_body=d["schema_body"],
        is_public=bool(d.get("is_public", False)),
    )


def _decode(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode()
    return value


def public_member(record: SchemaRecord) -> str:
    """
    Member of the public index for a record.

    A fixed-width UTC stamp sits between type and id so that equal types
    sort by creation time.
    """
    stamp = record.created_at.astimezone(timezone.utc).strftime(PUBLIC_STAMP_FORMAT)
    return PUBLIC_MEMBER_SEPARATOR.join((record.event_type, stamp, str(record.id)))


def _load_record(data: str | bytes) -> SchemaRecord:
    """Deserialize a stored document, treating a corrupt one as a query failure."""
    try:
        return _deserialize_record(data)
    except (ValueError, KeyError, TypeError) as exc:
        logger.error(f"Corrupt schema document: {exc!r}")
        raise StoreUnavailableError("Corrupt schema document") from exc


# =============================================================================
# Redis Schema Store
# =============================================================================

class RedisSchemaStore(SchemaStore):
    """
    Redis-based schema store.

    Create runs as a MULTI/EXEC transaction so the record and its type
    index are written together or not at all.
    """

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "schema-registry",
        project: str = "default",
    ) -> None:
        """
        Initialize Redis schema store.

        Args:
            redis: Redis async client
            key_prefix: Prefix for all keys
            project: Store scope, appended to the prefix
        """
        super().__init__()
        self._redis = redis
        self._prefix = f"{key_prefix}:{project}"

    def _record_key(self, record_id: UUID | str) -> str:
        """Key for schema record."""
        return f"{self._prefix}:schema:{record_id}"

    def _type_index_key(self, event_type: str) -> str:
        """Key for a type's id index."""
        return f"{self._prefix}:schema:type:{event_type}"

    def _public_index_key(self) -> str:
        """Key for the public index."""
        return f"{self._prefix}:schema:public"

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
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(self._record_key(record.id), _serialize_record(record))
                pipe.zadd(
                    self._type_index_key(event_type),
                    {str(record.id): record.created_at.timestamp()},
                )
                await pipe.execute()
        except (RedisError, OSError) as exc:
            logger.error(f"Unable to write schema for type {event_type}: {exc}")
            raise StoreUnavailableError("Unable to write to redis") from exc

        return record

    async def find_one_by_type(self, event_type: str) -> SchemaRecord | None:
        try:
            # Lowest score first; equal scores fall back to member order
            ids = await self._redis.zrange(self._type_index_key(event_type), 0, 0)
            if not ids:
                return None
            data = await self._redis.get(self._record_key(_decode(ids[0])))
        except (RedisError, OSError) as exc:
            logger.error(f"Query error for type {event_type}: {exc}")
            raise StoreUnavailableError("Query failed") from exc

        if data is None:
            return None
        return _load_record(data)

    async def list_public_ordered_by_type(self) -> list[SchemaRecord]:
        try:
            members = await self._redis.zrange(self._public_index_key(), 0, -1)
            if not members:
                return []

            pipe = self._redis.pipeline()
            for member in members:
                record_id = _decode(member).rsplit(PUBLIC_MEMBER_SEPARATOR, 1)[-1]
                pipe.get(self._record_key(record_id))
            values = await pipe.execute()
        except (RedisError, OSError) as exc:
            logger.error(f"Query error listing public schemas: {exc}")
            raise StoreUnavailableError("Query failed") from exc

        records = []
        for data in values:
            if data is None:
                continue
            record = _load_record(data)
            if record.is_public:
                records.append(record)
        return records

    async def close(self) -> None:
        """Close the Redis client."""
        await self._redis.aclose()
