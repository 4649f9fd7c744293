"""
Storage Port Interfaces

Abstract base class defining the schema storage contract for the registry.
All persistence APIs are async. No sync DB calls allowed.

These ports follow the hexagonal architecture pattern:
- Service and transport code depend only on these interfaces
- Adapters (in-memory, SQLAlchemy, Redis) implement these interfaces
- Storage is injected via dependency inversion

Records are immutable once created. The contract has no update or delete.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID


# =============================================================================
# Schema Store
# =============================================================================

@dataclass(frozen=True)
class SchemaRecord:
    """
    Stored schema document.

    The schema body is opaque text and is never parsed by the registry.
    """
    id: UUID
    created_at: datetime
    event_type: str
    source: str
    schema_body: str
    is_public: bool = False


class SchemaStore(ABC):
    """
    Storage interface for the ``schema`` collection.

    Every operation acquires its connection/session for the duration of the
    call and releases it on all exit paths.
    """

    def __init__(self) -> None:
        self._last_created_at: datetime | None = None

    def _stamp(self) -> datetime:
        """
        Creation timestamp for a new record.

        Never earlier than the previous stamp issued by this store, so
        created_at is non-decreasing with insertion order even if the
        wall clock steps back.
        """
        now = datetime.now(timezone.utc)
        if self._last_created_at is not None and now < self._last_created_at:
            now = self._last_created_at
        self._last_created_at = now
        return now

    @abstractmethod
    async def create(
        self,
        event_type: str,
        source: str,
        schema_body: str
    ) -> SchemaRecord:
        """
        Create and persist a new, non-public schema record.

        The write is atomic: either the full record exists afterwards
        or nothing was stored.

        Args:
            event_type: Event type the schema describes
            source: Originating producer
            schema_body: Opaque schema text

        Returns:
            The created record with its store-assigned id

        Raises:
            StoreUnavailableError: If the store can't be reached or the
                write can't be committed
        """
        ...

    @abstractmethod
    async def find_one_by_type(self, event_type: str) -> SchemaRecord | None:
        """
        Find one record by exact (case-sensitive) event type.

        When several records share the type, the earliest created one is
        returned (ties broken by id), so repeated calls are stable.

        Args:
            event_type: Event type to match

        Returns:
            Matching record or None if the store has no match

        Raises:
            StoreUnavailableError: If the query fails
        """
        ...

    @abstractmethod
    async def list_public_ordered_by_type(self) -> list[SchemaRecord]:
        """
        List all public records ordered by event type ascending.

        Ordering is lexicographic by code point and done by the store.

        Returns:
            Public records, possibly empty

        Raises:
            StoreUnavailableError: If the query fails
        """
        ...

    async def close(self) -> None:
        """
        Release engine/client resources.

        Called during shutdown.
        """
        pass


# =============================================================================
# Exceptions
# =============================================================================

class StorageError(Exception):
    """Base exception for storage errors."""
    pass


class StoreUnavailableError(StorageError):
    """Store unreachable, or a query/write failed."""
    pass
