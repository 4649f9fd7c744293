"""
Storage Factory

Environment-based configuration and factory for storage adapters.
Returns a SchemaStore with the appropriate implementation based on settings.

Supported backends:
- memory: In-memory storage (development/testing)
- sqlite: SQLite with aiosqlite (single-node production)
- postgresql: PostgreSQL with asyncpg (distributed production)
- mysql: MySQL with aiomysql (distributed production)
- redis: Redis with redis.asyncio

Usage:
    # From environment
    store = await create_store(settings_from_env(project="my-project"))

    # From settings
    settings = StorageSettings(
        database_url="postgresql+asyncpg://...",
        backend=StorageBackend.POSTGRESQL,
        project="my-project",
    )
    store = await create_store(settings)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from .ports import SchemaStore
from .memory import InMemorySchemaStore
from .sqlalchemy import SqlAlchemySchemaStore
from .models import Base


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    REDIS = "redis"


@dataclass
class StorageSettings:
    """
    Configuration for storage layer.

    Attributes:
        backend: Storage backend type
        project: Store scope; records of other projects are invisible
        database_url: SQLAlchemy async connection URL (for SQL backends)
        redis_url: Redis connection URL (for the redis backend)
        pool_size: Connection pool size for SQL
        pool_max_overflow: Max overflow for connection pool
        echo_sql: Whether to log SQL queries
        create_tables: Whether to auto-create tables on startup
        key_prefix: Prefix for Redis keys
    """
    backend: StorageBackend = StorageBackend.MEMORY
    project: str = "default"
    database_url: str | None = None
    redis_url: str | None = None
    pool_size: int = 5
    pool_max_overflow: int = 10
    echo_sql: bool = False
    create_tables: bool = True
    key_prefix: str = "schema-registry"


def _parse_database_url(url: str) -> StorageBackend:
    """Determine backend from database URL."""
    if url.startswith("sqlite"):
        return StorageBackend.SQLITE
    elif url.startswith("postgresql") or url.startswith("postgres"):
        return StorageBackend.POSTGRESQL
    elif url.startswith("mysql"):
        return StorageBackend.MYSQL
    else:
        raise ValueError(f"Unsupported database URL scheme: {url}")


def _async_driver_url(backend: StorageBackend, url: str) -> str:
    """Ensure async driver is in URL."""
    if backend == StorageBackend.SQLITE:
        if "+aiosqlite" not in url:
            url = url.replace("sqlite://", "sqlite+aiosqlite://")
    elif backend == StorageBackend.POSTGRESQL:
        if "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://")
            url = url.replace("postgres://", "postgresql+asyncpg://")
    elif backend == StorageBackend.MYSQL:
        if "+aiomysql" not in url:
            url = url.replace("mysql://", "mysql+aiomysql://")
    return url


def settings_from_env(project: str = "default") -> StorageSettings:
    """
    Create StorageSettings from environment variables.

    Environment variables:
        SCHEMA_REGISTRY_STORAGE_BACKEND: "memory", "sqlite", "postgresql", "mysql", "redis"
        SCHEMA_REGISTRY_DATABASE_URL: SQLAlchemy async connection URL
        SCHEMA_REGISTRY_REDIS_URL: Redis connection URL
        SCHEMA_REGISTRY_POOL_SIZE: Connection pool size
        SCHEMA_REGISTRY_POOL_MAX_OVERFLOW: Max pool overflow
        SCHEMA_REGISTRY_ECHO_SQL: "true" to log SQL
        SCHEMA_REGISTRY_CREATE_TABLES: "false" to disable table creation
        SCHEMA_REGISTRY_KEY_PREFIX: Redis key prefix

    Args:
        project: Store scope supplied by the process configuration
    """
    database_url = os.getenv("SCHEMA_REGISTRY_DATABASE_URL")
    backend_str = os.getenv("SCHEMA_REGISTRY_STORAGE_BACKEND", "memory")

    # Auto-detect backend from URL if provided
    if database_url and backend_str == "memory":
        backend = _parse_database_url(database_url)
    else:
        backend = StorageBackend(backend_str)

    return StorageSettings(
        backend=backend,
        project=project,
        database_url=database_url,
        redis_url=os.getenv("SCHEMA_REGISTRY_REDIS_URL"),
        pool_size=int(os.getenv("SCHEMA_REGISTRY_POOL_SIZE", "5")),
        pool_max_overflow=int(os.getenv("SCHEMA_REGISTRY_POOL_MAX_OVERFLOW", "10")),
        echo_sql=os.getenv("SCHEMA_REGISTRY_ECHO_SQL", "").lower() == "true",
        create_tables=os.getenv("SCHEMA_REGISTRY_CREATE_TABLES", "true").lower() != "false",
        key_prefix=os.getenv("SCHEMA_REGISTRY_KEY_PREFIX", "schema-registry"),
    )


async def create_store(settings: StorageSettings) -> SchemaStore:
    """
    Create schema store from settings.

    Args:
        settings: Storage configuration

    Returns:
        Configured SchemaStore

    Raises:
        ValueError: If settings are invalid
    """
    if settings.backend == StorageBackend.MEMORY:
        return InMemorySchemaStore()

    if settings.backend == StorageBackend.REDIS:
        if not settings.redis_url:
            raise ValueError("redis_url required for backend redis")

        from redis.asyncio import Redis
        from .redis import RedisSchemaStore

        redis_client = Redis.from_url(
            settings.redis_url,
            decode_responses=False,
        )
        return RedisSchemaStore(
            redis=redis_client,
            key_prefix=settings.key_prefix,
            project=settings.project,
        )

    if not settings.database_url:
        raise ValueError(
            f"database_url required for backend {settings.backend.value}"
        )

    url = _async_driver_url(settings.backend, settings.database_url)

    engine_kwargs: dict = {"echo": settings.echo_sql}
    if settings.backend != StorageBackend.SQLITE:
        # In-memory SQLite gets a StaticPool, which takes no sizing arguments
        engine_kwargs["pool_size"] = settings.pool_size
        engine_kwargs["max_overflow"] = settings.pool_max_overflow

    engine = create_async_engine(url, **engine_kwargs)

    # Create tables if requested
    if settings.create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return SqlAlchemySchemaStore(session_factory, project=settings.project, engine=engine)



async def create_sqlite_store(
    path: str = ":memory:",
    project: str = "default",
    create_tables: bool = True,
) -> SchemaStore:
    """Create SQLite schema store."""
    url = f"sqlite+aiosqlite:///{path}"
    return await create_store(StorageSettings(
        backend=StorageBackend.SQLITE,
        project=project,
        database_url=url,
        create_tables=create_tables,
    ))
