"""
Schema Registry Application

FastAPI application exposing the registry over HTTP.
This is the main entry point for running the registry.

Routes:
- POST /publish: store a {type, source, schema} document
- GET /download/{type}: raw schema body as application/json
- GET /schema/{type}: HTML page for one schema
- GET /: HTML index of public schemas
- GET /health: liveness check

Configuration is read once at startup (see schema_registry.config) unless
settings are passed to create_app(). A missing project aborts startup.

Environment variables can be loaded from a .env file in the project root.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

# Load environment variables from .env file
load_dotenv()

from schema_registry import __version__
from schema_registry.config import RegistrySettings, settings_from_env
from schema_registry.errors import RegistryError
from schema_registry.rendering import TemplateRenderer
from schema_registry.service import RegistryService
from schema_registry.storage import SchemaStore, create_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(
    settings: RegistrySettings | None = None,
    store: SchemaStore | None = None,
) -> FastAPI:
    """
    Build the registry application.

    Args:
        settings: Process configuration; read from the environment at
            startup when omitted
        store: Pre-built store; created from settings.storage when omitted.
            A store passed in is not closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Builds the store, renderer and service, and tears the store down.
        """
        logger.info("Starting Schema Registry...")

        resolved = settings or settings_from_env()
        owns_store = store is None
        schema_store = store if store is not None else await create_store(resolved.storage)
        logger.info(
            f"Storage initialized: {type(schema_store).__name__} "
            f"(project {resolved.project})"
        )

        renderer = TemplateRenderer(resolved.template_dir)
        app.state.settings = resolved
        app.state.service = RegistryService(schema_store, renderer)

        logger.info("Schema Registry started")

        yield

        logger.info("Shutting down Schema Registry...")
        if owns_store:
            await schema_store.close()
        logger.info("Schema Registry stopped")

    app = FastAPI(
        title="Schema Registry",
        description="Publish and look up event-type schemas",
        version=__version__,
        lifespan=lifespan
    )

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.__cause__ or exc}")
        else:
            logger.warning(f"{request.method} {request.url.path}: {exc}")
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    _register_routes(app)
    return app


def get_service(request: Request) -> RegistryService:
    """Service built by the lifespan handler."""
    return request.app.state.service


def _register_routes(app: FastAPI) -> None:

    @app.post("/publish")
    async def publish(request: Request, service: RegistryService = Depends(get_service)):
        """
        Publish a schema.

        Body is read raw so that any parse failure becomes a plain-text 400.
        """
        await service.publish(await request.body())
        return Response(status_code=200)

    @app.get("/download/{event_type}")
    async def download_schema(event_type: str, service: RegistryService = Depends(get_service)):
        """Raw schema body for a type, looked up after normalization."""
        body = await service.download_schema(event_type)
        return Response(content=body, media_type="application/json")

    @app.get("/schema/{event_type}", response_class=HTMLResponse)
    async def get_schema(event_type: str, service: RegistryService = Depends(get_service)):
        """HTML page for one schema."""
        return HTMLResponse(await service.render_schema(event_type))

    @app.get("/", response_class=HTMLResponse)
    async def index(service: RegistryService = Depends(get_service)):
        """HTML index of public schemas."""
        return HTMLResponse(await service.render_index())

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        service: RegistryService | None = getattr(request.app.state, "service", None)
        return {
            "status": "healthy",
            "backend": type(service.store).__name__ if service else None,
        }


app = create_app()
