# Schema Registry
# Accepts event-type schema documents from producers and serves them to consumers

__version__ = "0.1.0"

# Re-export commonly used components for convenience
from schema_registry.storage import (
    SchemaRecord,
    SchemaStore,
    StoreUnavailableError,
    create_store,
)
from schema_registry.service import RegistryService, normalize_type

__all__ = [
    "__version__",
    # Storage
    "SchemaRecord",
    "SchemaStore",
    "StoreUnavailableError",
    "create_store",
    # Service
    "RegistryService",
    "normalize_type",
]
