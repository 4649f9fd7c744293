"""
Run the registry with uvicorn.

    python -m schema_registry
"""

import logging
import sys

import uvicorn

from schema_registry.config import ConfigurationError, settings_from_env
from schema_registry.transport.app import create_app

logger = logging.getLogger("schema_registry")


def main() -> int:
    try:
        settings = settings_from_env()
    except ConfigurationError as exc:
        logger.critical(f"Invalid configuration: {exc}")
        return 1

    logging.getLogger().setLevel(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
