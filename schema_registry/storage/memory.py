"""
In-Memory Storage Adapter

Implementation for development and testing.
Uses an asyncio lock for concurrent async safety.

Records are kept in insertion order and are lost on restart.
Use for:
- Local development
- Unit/integration testing
"""

import asyncio
from uuid import uuid4

from schema_registry.storage.ports import SchemaStore, SchemaRecord


class InMemorySchemaStore(SchemaStore):
    """
    In-memory schema storage.

    Uses a list with asyncio.Lock for safety. Lookups scan in insertion
    order, so the first match is also the earliest created one.
    """

    def __init__(self):
        super().__init__()
        self._records: list[SchemaRecord] = []
        self._lock = asyncio.Lock()

    async def create(
        self,
        event_type: str,
        source: str,
        schema_body: str
    ) -> SchemaRecord:
        return await self.seed(event_type, source, schema_body)

    async def seed(
        self,
        event_type: str,
        source: str,
        schema_body: str,
        is_public: bool = False
    ) -> SchemaRecord:
        """
        Insert a record directly, optionally public.

        Stands in for out-of-band curation of the store; publish never
        goes through here with is_public=True.
        """
        async with self._lock:
            record = SchemaRecord(
                id=uuid4(),
                created_at=self._stamp(),
                event_type=event_type,
                source=source,
                schema_body=schema_body,
                is_public=is_public,
            )
            self._records.append(record)
            return record

    async def find_one_by_type(self, event_type: str) -> SchemaRecord | None:
        async with self._lock:
            for record in self._records:
                if record.event_type == event_type:
                    return record
            return None

    async def list_public_ordered_by_type(self) -> list[SchemaRecord]:
        async with self._lock:
            public = [r for r in self._records if r.is_public]
        # sorted() is stable: equal types keep insertion order
        return sorted(public, key=lambda r: r.event_type)

    def record_count(self) -> int:
        """Total number of stored records."""
        return len(self._records)
