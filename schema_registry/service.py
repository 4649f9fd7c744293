"""
Registry Service

Mediates between HTTP requests and the schema store.
Every operation performs exactly one store call and converts storage
outcomes into registry errors:
- StoreUnavailableError -> BackendUnavailableError
- no matching record -> SchemaNotFoundError (with the normalized type)
"""

import logging

from pydantic import BaseModel, Field, StrictStr, ValidationError

from schema_registry.errors import (
    BackendUnavailableError,
    MalformedRequestError,
    SchemaNotFoundError,
)
from schema_registry.rendering import TemplateRenderer
from schema_registry.storage import SchemaRecord, SchemaStore, StoreUnavailableError

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"


class PublishRequest(BaseModel):
    """Body of POST /publish."""
    type: StrictStr
    source: StrictStr
    schema_body: StrictStr = Field(alias="schema")


def normalize_type(event_type: str) -> str:
    """
    Strip ``.json`` from a requested type.

    Truncates at the last occurrence of the substring anywhere in the
    string, not only at the end, and only when it isn't at index 0:
    "a.jsonb" -> "a", ".json" -> ".json".
    """
    idx = event_type.rfind(JSON_SUFFIX)
    if idx > 0:
        return event_type[:idx]
    return event_type


class RegistryService:
    """
    Request-handling layer over a SchemaStore.

    Holds no per-request state; safe to share across concurrent requests.
    """

    def __init__(self, store: SchemaStore, renderer: TemplateRenderer):
        self.store = store
        self.renderer = renderer

    async def publish(self, payload: bytes | str) -> SchemaRecord:
        """
        Parse a publish payload and store it as a new record.

        Raises:
            MalformedRequestError: Payload isn't {type, source, schema} strings
            BackendUnavailableError: The store write failed
        """
        try:
            msg = PublishRequest.model_validate_json(payload)
        except ValidationError as exc:
            logger.info(f"Rejected publish payload: {exc.error_count()} error(s)")
            raise MalformedRequestError() from exc

        try:
            record = await self.store.create(
                event_type=msg.type,
                source=msg.source,
                schema_body=msg.schema_body,
            )
        except StoreUnavailableError as exc:
            raise BackendUnavailableError("Unable to connect to database") from exc

        logger.info(f"Accepted schema for type {msg.type}")
        return record

    async def find_schema(self, requested_type: str) -> SchemaRecord:
        """
        Look up one record for a requested (not yet normalized) type.

        Raises:
            SchemaNotFoundError: No record for the normalized type
            BackendUnavailableError: The store query failed
        """
        event_type = normalize_type(requested_type)
        try:
            record = await self.store.find_one_by_type(event_type)
        except StoreUnavailableError as exc:
            raise BackendUnavailableError() from exc

        if record is None:
            raise SchemaNotFoundError(event_type)
        return record

    async def download_schema(self, requested_type: str) -> str:
        """Raw schema body for a requested type."""
        record = await self.find_schema(requested_type)
        return record.schema_body

    async def render_schema(self, requested_type: str) -> str:
        """HTML page for a requested type."""
        record = await self.find_schema(requested_type)
        return self.renderer.render("get", {"schema": record})

    async def render_index(self) -> str:
        """HTML index of public schemas, ordered by type."""
        try:
            schemas = await self.store.list_public_ordered_by_type()
        except StoreUnavailableError as exc:
            raise BackendUnavailableError() from exc

        return self.renderer.render("index", {"schemas": schemas})
