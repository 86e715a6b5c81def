import pytest

from socless.exceptions import ConditionCheckFailed, RecordNotFound
from socless.persistence import InMemoryRecordStore, SQLiteRecordStore


@pytest.fixture(params=["inmemory", "sqlite"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteRecordStore(tmp_path / "socless.db")
    return InMemoryRecordStore()


@pytest.mark.asyncio
async def test_record_store_crud(store):
    assert await store.get_item("events", "missing") is None

    await store.put_item("events", "evt-1", {"id": "evt-1", "status": "open"})
    await store.put_item("results", "evt-1", {"id": "other-table"})

    assert await store.get_item("events", "evt-1") == {"id": "evt-1", "status": "open"}
    assert await store.get_item("results", "evt-1") == {"id": "other-table"}

    await store.put_item("events", "evt-1", {"id": "evt-1", "status": "closed"})
    assert (await store.get_item("events", "evt-1"))["status"] == "closed"


@pytest.mark.asyncio
async def test_update_item_sets_nested_paths(store):
    await store.put_item(
        "results", "exec-1", {"results": {"results": {"Step_A": {"x": 1}}, "errors": {}}}
    )

    updated = await store.update_item(
        "results",
        "exec-1",
        {
            ("results", "results", "Step_B"): {"y": 2},
            ("results", "errors", "Step_B"): {"Error": "boom"},
            ("new", "branch", "leaf"): True,
        },
    )

    expected = {
        "results": {
            "results": {"Step_A": {"x": 1}, "Step_B": {"y": 2}},
            "errors": {"Step_B": {"Error": "boom"}},
        },
        "new": {"branch": {"leaf": True}},
    }
    assert updated == expected
    assert await store.get_item("results", "exec-1") == expected


@pytest.mark.asyncio
async def test_update_item_missing_key(store):
    with pytest.raises(RecordNotFound) as exc_info:
        await store.update_item("results", "missing", {("a",): 1})
    assert exc_info.value.table == "results"
    assert exc_info.value.key == "missing"
    assert await store.get_item("results", "missing") is None


@pytest.mark.asyncio
async def test_conditional_update(store):
    await store.put_item("responses", "msg-1", {"fulfilled": False})

    await store.update_item(
        "responses", "msg-1", {("fulfilled",): True}, condition={"fulfilled": False}
    )
    with pytest.raises(ConditionCheckFailed):
        await store.update_item(
            "responses", "msg-1", {("response_payload",): "late"}, condition={"fulfilled": False}
        )

    assert await store.get_item("responses", "msg-1") == {"fulfilled": True}


@pytest.mark.asyncio
async def test_stored_items_are_copies(store):
    item = {"nested": {"value": 1}}
    await store.put_item("events", "evt-1", item)
    item["nested"]["value"] = 2

    fetched = await store.get_item("events", "evt-1")
    fetched["nested"]["value"] = 3
    assert await store.get_item("events", "evt-1") == {"nested": {"value": 1}}


@pytest.mark.asyncio
async def test_sqlite_store_persists_across_instances(tmp_path):
    db_path = tmp_path / "socless.db"
    await SQLiteRecordStore(db_path).put_item("events", "evt-1", {"id": "evt-1"})

    assert await SQLiteRecordStore(db_path).get_item("events", "evt-1") == {"id": "evt-1"}
