# Storage Layer
# Pluggable persistence for the schema registry
#
# This module provides:
# - Port interface (ABC) defining the schema storage contract
# - In-memory implementation for development/testing
# - SQLAlchemy implementation for production persistence
# - Redis implementation
# - Factory for configuration-based adapter selection

from .ports import (
    SchemaStore,
    SchemaRecord,
    StorageError,
    StoreUnavailableError,
)
from .memory import InMemorySchemaStore
from .factory import (
    StorageSettings,
    StorageBackend,
    create_store,
    create_sqlite_store,
    settings_from_env,
)

__all__ = [
    # Ports
    "SchemaStore",
    "SchemaRecord",
    "StorageError",
    "StoreUnavailableError",
    "InMemorySchemaStore",
    # Factory
    "StorageSettings",
    "StorageBackend",
    "create_store",
    "create_sqlite_store",
    "settings_from_env",
]
