# Transport Layer
# HTTP surface of the registry
# Separated from service logic to allow alternative transports in the future

from schema_registry.transport.app import app, create_app

__all__ = ["app", "create_app"]
