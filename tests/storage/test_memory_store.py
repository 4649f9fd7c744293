"""Tests for the in-memory schema store."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from schema_registry.storage import InMemorySchemaStore, ports

pytestmark = pytest.mark.asyncio


async def test_create_assigns_id_and_defaults_private(memory_store):
    record = await memory_store.create("order.created", "svc-a", '{"x":1}')

    assert record.id is not None
    assert str(record.id)
    assert record.is_public is False
    assert record.created_at.tzinfo is not None
    assert memory_store.record_count() == 1


async def test_find_one_by_type_returns_published_record(memory_store):
    created = await memory_store.create("order.created", "svc-a", '{"x":1}')

    found = await memory_store.find_one_by_type("order.created")

    assert found == created
    assert found.source == "svc-a"
    assert found.schema_body == '{"x":1}'


async def test_find_one_by_type_is_exact_and_case_sensitive(memory_store):
    await memory_store.create("Order.Created", "svc-a", "{}")

    assert await memory_store.find_one_by_type("order.created") is None
    assert await memory_store.find_one_by_type("Order") is None
    assert await memory_store.find_one_by_type("Order.Created") is not None


async def test_find_one_by_type_is_stable_with_duplicates(memory_store):
    first = await memory_store.create("dup", "svc-a", "1")
    await memory_store.create("dup", "svc-b", "2")

    results = {(await memory_store.find_one_by_type("dup")).id for _ in range(5)}

    assert results == {first.id}


async def test_list_public_ordered_by_type(memory_store):
    for event_type in ["zeta", "alpha", "mid"]:
        await memory_store.seed(event_type, "svc", "{}", is_public=True)
    await memory_store.create("aaa-private", "svc", "{}")

    listed = await memory_store.list_public_ordered_by_type()

    assert [r.event_type for r in listed] == ["alpha", "mid", "zeta"]


async def test_list_public_is_case_sensitive_lexicographic(memory_store):
    for event_type in ["beta", "Zulu", "alpha"]:
        await memory_store.seed(event_type, "svc", "{}", is_public=True)

    listed = await memory_store.list_public_ordered_by_type()

    assert [r.event_type for r in listed] == ["Zulu", "alpha", "beta"]


async def test_list_public_empty(memory_store):
    await memory_store.create("private", "svc", "{}")

    assert await memory_store.list_public_ordered_by_type() == []


async def test_created_at_non_decreasing():
    store = InMemorySchemaStore()
    await asyncio.gather(
        *(store.create(f"type-{i}", "svc", "{}") for i in range(20))
    )
    stamps = [r.created_at for r in store._records]

    assert stamps == sorted(stamps)


async def test_created_at_clamped_when_clock_steps_back(monkeypatch):
    later = datetime(2024, 5, 1, 12, 0, 5, tzinfo=timezone.utc)
    earlier = later - timedelta(seconds=5)
    readings = iter([later, earlier])

    class SteppingClock(datetime):
        @classmethod
        def now(cls, tz=None):
            return next(readings)

    monkeypatch.setattr(ports, "datetime", SteppingClock)
    store = InMemorySchemaStore()

    first = await store.create("type-a", "svc", "{}")
    second = await store.create("type-b", "svc", "{}")

    assert first.created_at == later
    assert second.created_at == later
