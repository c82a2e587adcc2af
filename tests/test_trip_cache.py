import asyncio
import json

import pytest

from planit.services.storage import StorageKeys
from planit.services.trip_cache import TripCache


async def test_save_and_get(cache, make_session):
    await cache.save(make_session("a"))

    session = await cache.get("a")
    assert session is not None
    assert session.messages[0].id == "user_a_0"
    assert await cache.get("missing") is None


async def test_new_sessions_go_first(cache, make_session):
    await cache.save(make_session("a"))
    await cache.save(make_session("b"))

    assert [s.id for s in await cache.list_sessions()] == ["b", "a"]


async def test_upsert_replaces_in_place(cache, make_session):
    await cache.save(make_session("a"))
    await cache.save(make_session("b"))
    await cache.save(make_session("a", title="Renamed"))

    sessions = await cache.list_sessions()
    assert [s.id for s in sessions] == ["b", "a"]
    assert sessions[1].title == "Renamed"


async def test_cap_keeps_newest(storage, make_session):
    cache = TripCache(storage, max_trips=3)
    for i in range(5):
        await cache.save(make_session(f"s{i}"))

    assert [s.id for s in await cache.list_sessions()] == ["s4", "s3", "s2"]


async def test_provisional_sessions_are_rejected(cache, make_session):
    with pytest.raises(ValueError):
        await cache.save(make_session("local_1700000000000"))
    assert await cache.list_sessions() == []


async def test_delete(cache, make_session):
    await cache.save(make_session("a"))

    assert await cache.delete("a") is True
    assert await cache.delete("a") is False
    assert await cache.list_sessions() == []


async def test_corrupt_json_reads_as_empty(cache, storage):
    await storage.set_item(StorageKeys.CHAT_HISTORY, "{not json")
    assert await cache.list_sessions() == []


async def test_invalid_entries_are_skipped(cache, storage, make_session):
    entries = [make_session("a").to_wire(), {"id": 1}]
    await storage.set_item(StorageKeys.CHAT_HISTORY, json.dumps(entries))

    assert [s.id for s in await cache.list_sessions()] == ["a"]


async def test_history_items_and_stats(cache, make_session):
    await cache.save(make_session("a", updated_at="2024-03-01T12:00:00"))

    items = await cache.list_history_items()
    assert items[0].id == "a"
    assert items[0].last_updated == "2024-03-01T12:00:00"

    stats = await cache.stats()
    assert stats["chat_count"] == 1
    assert stats["total_size_kb"] > 0


async def test_clear(cache, make_session):
    await cache.save(make_session("a"))
    await cache.clear()
    assert await cache.list_sessions() == []


async def test_concurrent_saves_keep_both(cache, make_session):
    await asyncio.gather(cache.save(make_session("a")), cache.save(make_session("b")))

    assert sorted(s.id for s in await cache.list_sessions()) == ["a", "b"]


async def test_delete_racing_save_stays_deleted(cache, make_session):
    await cache.save(make_session("old"))

    await asyncio.gather(cache.delete("old"), cache.save(make_session("new")))

    assert [s.id for s in await cache.list_sessions()] == ["new"]


async def test_many_concurrent_saves_respect_cap(storage, make_session):
    cache = TripCache(storage, max_trips=3)

    await asyncio.gather(*(cache.save(make_session(f"s{i}")) for i in range(6)))

    assert len(await cache.list_sessions()) == 3
