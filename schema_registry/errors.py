"""
Registry Errors

Failures the registry service signals to the HTTP boundary.
Each one maps to a single status code and a short plain-text body.
"""


class RegistryError(Exception):
    """Base exception for registry request failures."""
    status_code = 500
    message = "Internal error."

    def __str__(self) -> str:
        return self.message


class MalformedRequestError(RegistryError):
    """Publish payload is not a {type, source, schema} object of strings."""
    status_code = 400
    message = "Unable to parse message"


class BackendUnavailableError(RegistryError):
    """Store unreachable, or a query/write failed."""
    status_code = 500

    def __init__(self, message: str = "Internal error."):
        super().__init__(message)
        self.message = message


class SchemaNotFoundError(RegistryError):
    """Store reachable, no record for the requested type."""
    status_code = 404

    def __init__(self, event_type: str):
        super().__init__(event_type)
        self.event_type = event_type
        self.message = f"Schema not found for type: {event_type}"


class RenderError(RegistryError):
    """Template missing or failed to render."""
    status_code = 500

    def __init__(self, template: str):
        super().__init__(template)
        self.template = template
        self.message = "Unable to render page"
