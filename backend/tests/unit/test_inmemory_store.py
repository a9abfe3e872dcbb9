from __future__ import annotations

import pytest

from employee_records.stores.base import DuplicateKeyError, StoreUnavailableError
from employee_records.stores.inmemory import InMemoryEmployeeStore


@pytest.mark.anyio
async def test_insert_assigns_id_and_copies(store):
    document = {"email": "a@x.com", "name": "Alice"}
    stored = await store.insert(document)

    assert stored["id"]
    assert "id" not in document

    stored["name"] = "Mutated"
    assert (await store.find_by_id(stored["id"]))["name"] == "Alice"


@pytest.mark.anyio
async def test_insert_duplicate_email_raises(store):
    await store.insert({"email": "a@x.com"})
    with pytest.raises(DuplicateKeyError) as exc_info:
        await store.insert({"email": "a@x.com"})
    assert exc_info.value.field == "email"


@pytest.mark.anyio
async def test_update_by_id_enforces_uniqueness_against_others(store):
    first = await store.insert({"email": "a@x.com"})
    second = await store.insert({"email": "b@x.com"})

    with pytest.raises(DuplicateKeyError):
        await store.update_by_id(second["id"], {"email": "a@x.com"})

    replaced = await store.update_by_id(first["id"], {"email": "a@x.com", "name": "Same"})
    assert replaced == {"id": first["id"], "email": "a@x.com", "name": "Same"}


@pytest.mark.anyio
async def test_update_and_delete_missing_ids(store):
    assert await store.update_by_id("missing", {"email": "a@x.com"}) is None
    assert await store.delete_by_id("missing") is False
    assert await store.find_by_id("missing") is None


@pytest.mark.anyio
async def test_find_one_matches_all_filter_items(store):
    await store.insert({"email": "a@x.com", "name": "Alice"})
    assert (await store.find_one({"email": "a@x.com", "name": "Alice"}))["name"] == "Alice"
    assert await store.find_one({"email": "a@x.com", "name": "Bob"}) is None


@pytest.mark.anyio
async def test_find_all_sorts_and_projects(store):
    await store.insert({"email": "a@x.com", "joiningDate": "2021-01-01", "history": [1]})
    await store.insert({"email": "b@x.com", "joiningDate": "2023-01-01", "history": [2]})

    results = await store.find_all(order_by="joiningDate", descending=True, fields=["email"])
    assert results == [{"email": "b@x.com"}, {"email": "a@x.com"}]


@pytest.mark.anyio
async def test_operations_require_connect():
    store = InMemoryEmployeeStore()
    assert store.connected is False
    assert await store.check_connection() is False
    with pytest.raises(StoreUnavailableError):
        await store.find_by_id("x")
