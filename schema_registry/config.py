"""
Process Configuration

Settings read once at startup and passed explicitly into the store
factory, the renderer and the HTTP application.

Environment variables:
- GCP_PROJECT / SCHEMA_REGISTRY_PROJECT: store scope (required)
- SCHEMA_REGISTRY_TEMPLATE_DIR: directory holding get.html and index.html
- KO_DATA_PATH: data directory; templates are read from its templates/
  subdirectory when no template dir is given
- SCHEMA_REGISTRY_HOST / SCHEMA_REGISTRY_PORT: bind address
- SCHEMA_REGISTRY_LOG_LEVEL: root log level
- SCHEMA_REGISTRY_* storage variables, see storage.factory

Environment variables can be loaded from a .env file in the project root.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from schema_registry.storage import StorageSettings
from schema_registry.storage import settings_from_env as storage_settings_from_env

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigurationError(Exception):
    """Required configuration is missing or invalid."""
    pass


@dataclass
class RegistrySettings:
    """
    Configuration for the registry process.

    Attributes:
        project: Store scope the registry reads and writes
        template_dir: Directory with the HTML templates
        host: Bind host for the HTTP server
        port: Bind port for the HTTP server
        log_level: Root log level name
        storage: Storage backend settings
    """
    project: str
    template_dir: Path = DEFAULT_TEMPLATE_DIR
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    storage: StorageSettings = field(default_factory=StorageSettings)

    def __post_init__(self) -> None:
        # Storage always follows the process-level project
        self.storage.project = self.project


def _template_dir_from_env() -> Path:
    explicit = os.getenv("SCHEMA_REGISTRY_TEMPLATE_DIR")
    if explicit:
        return Path(explicit)
    data_path = os.getenv("KO_DATA_PATH")
    if data_path:
        return Path(data_path) / "templates"
    return DEFAULT_TEMPLATE_DIR


def settings_from_env() -> RegistrySettings:
    """
    Create RegistrySettings from environment variables.

    Raises:
        ConfigurationError: If the project is not configured or a value
            can't be parsed
    """
    project = os.getenv("SCHEMA_REGISTRY_PROJECT") or os.getenv("GCP_PROJECT")
    if not project:
        raise ConfigurationError(
            "Missing GCP_PROJECT (or SCHEMA_REGISTRY_PROJECT) environment variable"
        )

    try:
        port = int(os.getenv("SCHEMA_REGISTRY_PORT", "8080"))
        storage = storage_settings_from_env(project=project)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    log_level = os.getenv("SCHEMA_REGISTRY_LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"Invalid log level: {log_level}")

    return RegistrySettings(
        project=project,
        template_dir=_template_dir_from_env(),
        host=os.getenv("SCHEMA_REGISTRY_HOST", "0.0.0.0"),
        port=port,
        log_level=log_level,
        storage=storage,
    )
