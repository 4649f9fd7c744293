"""Global fixtures for pytest."""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from schema_registry.config import DEFAULT_TEMPLATE_DIR, RegistrySettings
from schema_registry.rendering import TemplateRenderer
from schema_registry.storage import (
    InMemorySchemaStore,
    SchemaRecord,
    SchemaStore,
    StorageBackend,
    StorageSettings,
    StoreUnavailableError,
    create_sqlite_store,
)


class UnreachableSchemaStore(SchemaStore):
    """Store double whose backend is down for every call."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    async def create(self, event_type, source, schema_body) -> SchemaRecord:
        self.calls += 1
        raise StoreUnavailableError("connection refused")

    async def find_one_by_type(self, event_type):
        self.calls += 1
        raise StoreUnavailableError("connection refused")

    async def list_public_ordered_by_type(self):
        self.calls += 1
        raise StoreUnavailableError("connection refused")


class FlakySchemaStore(InMemorySchemaStore):
    """In-memory store that fails the next operation when asked to."""

    def __init__(self):
        super().__init__()
        self.fail_next = False

    def _maybe_fail(self):
        if self.fail_next:
            self.fail_next = False
            raise StoreUnavailableError("transient outage")

    async def create(self, event_type, source, schema_body):
        self._maybe_fail()
        return await super().create(event_type, source, schema_body)

    async def find_one_by_type(self, event_type):
        self._maybe_fail()
        return await super().find_one_by_type(event_type)

    async def list_public_ordered_by_type(self):
        self._maybe_fail()
        return await super().list_public_ordered_by_type()


class FakeRedisPipeline:
    """Queues commands and applies them together on execute()."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self._ops.clear()

    def set(self, key, value):
        self._ops.append(("set", key, value))
        return self

    def get(self, key):
        self._ops.append(("get", key))
        return self

    def zadd(self, key, mapping):
        self._ops.append(("zadd", key, mapping))
        return self

    async def execute(self):
        if self._redis.fail:
            self._ops.clear()
            raise RedisConnectionError("Error connecting to redis")
        ops, self._ops = self._ops, []
        return [await getattr(self._redis, name)(*args) for name, *args in ops]


class FakeRedis:
    """
    Minimal in-process stand-in for redis.asyncio.Redis.

    Covers the commands RedisSchemaStore uses and returns bytes the way a
    client created with decode_responses=False does.
    """

    def __init__(self):
        self.values: dict[str, bytes] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.fail = False
        self.closed = False

    def _check(self):
        if self.fail:
            raise RedisConnectionError("Error connecting to redis")

    def pipeline(self, transaction=True):
        return FakeRedisPipeline(self)

    async def set(self, key, value):
        self._check()
        self.values[key] = value.encode() if isinstance(value, str) else value
        return True

    async def get(self, key):
        self._check()
        return self.values.get(key)

    async def zadd(self, key, mapping):
        self._check()
        zset = self.zsets.setdefault(key, {})
        added = len([m for m in mapping if m not in zset])
        zset.update(mapping)
        return added

    async def zrange(self, key, start, end):
        self._check()
        items = sorted(
            self.zsets.get(key, {}).items(),
            key=lambda item: (item[1], item[0].encode()),
        )
        members = [member.encode() for member, _ in items]
        stop = None if end == -1 else end + 1
        return members[start:stop]

    async def aclose(self):
        self.closed = True


@pytest.fixture
def memory_store():
    """Fresh in-memory store."""
    return InMemorySchemaStore()


@pytest.fixture
async def sqlite_store(tmp_path):
    """SQLite store backed by a temporary file."""
    store = await create_sqlite_store(str(tmp_path / "registry.db"), project="test-project")
    yield store
    await store.close()


@pytest.fixture
def unreachable_store():
    return UnreachableSchemaStore()


@pytest.fixture
def flaky_store():
    return FlakySchemaStore()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def renderer():
    """Renderer over the bundled templates."""
    return TemplateRenderer(DEFAULT_TEMPLATE_DIR)


@pytest.fixture
def registry_settings():
    """Settings with the in-memory backend."""
    return RegistrySettings(
        project="test-project",
        storage=StorageSettings(backend=StorageBackend.MEMORY),
    )
