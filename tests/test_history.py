import asyncio

import httpx

from planit.models.schemas import TripPlanHistoryItem
from planit.services.history import HistoryService, merge_trips, sort_by_last_updated


def item(trip_id: str, last_updated: str, title: str = "") -> TripPlanHistoryItem:
    return TripPlanHistoryItem(id=trip_id, title=title or trip_id, last_updated=last_updated)


def history_response(*items: TripPlanHistoryItem) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "trips": [i.to_wire() for i in items]})


class TestMergeTrips:
    def test_server_wins_on_collision(self):
        server = [item("a", "2024-05-02T00:00:00", title="server")]
        local = [item("a", "2024-05-03T00:00:00", title="local")]

        merged = merge_trips(server, local)
        assert len(merged) == 1
        assert merged[0].title == "server"

    def test_local_only_trips_are_kept(self):
        server = [item("a", "2024-05-02T00:00:00")]
        local = [item("b", "2024-05-01T00:00:00")]

        assert [t.id for t in merge_trips(server, local)] == ["a", "b"]

    def test_sorted_newest_first(self):
        server = [item("old", "2024-01-01T00:00:00"), item("new", "2024-06-01T00:00:00Z")]
        local = [item("mid", "2024-03-01T00:00:00")]

        assert [t.id for t in merge_trips(server, local)] == ["new", "mid", "old"]

    def test_idempotent(self):
        trips = [item("a", "2024-01-01T00:00:00"), item("b", "2024-02-01T00:00:00")]

        once = merge_trips(trips, trips)
        assert [t.id for t in once] == ["b", "a"]
        assert merge_trips(once, once) == once

    def test_unparseable_timestamps_sort_last(self):
        trips = [item("bad", "yesterday"), item("good", "2024-01-01T00:00:00")]
        assert [t.id for t in sort_by_last_updated(trips)] == ["good", "bad"]


async def test_load_history_merges(cache, make_client, make_session):
    await cache.save(make_session("local-only", updated_at="2024-05-01T00:00:00"))
    client = make_client(lambda request: history_response(item("remote", "2024-06-01T00:00:00")))

    result = await HistoryService(cache, client).load_history()

    assert result.source == "merged"
    assert result.error is None
    assert [t.id for t in result.trips] == ["remote", "local-only"]


async def test_load_history_falls_back_to_local(cache, make_client, make_session):
    await cache.save(make_session("a", updated_at="2024-01-01T00:00:00"))
    await cache.save(make_session("b", updated_at="2024-02-01T00:00:00"))
    client = make_client(lambda request: httpx.Response(500, json={"success": False, "error": "db down"}))

    result = await HistoryService(cache, client).load_history()

    assert result.source == "local"
    assert result.error == "db down"
    assert [t.id for t in result.trips] == ["b", "a"]


async def test_delete_is_local_first_while_remote_is_slow(cache, make_client, make_session):
    await cache.save(make_session("a"))
    release = asyncio.Event()
    seen = []

    async def handler(request):
        seen.append((request.method, request.url.path))
        await release.wait()
        return httpx.Response(200, json={"success": True})

    service = HistoryService(cache, make_client(handler))
    task = await service.delete_trip("a")

    assert await cache.get("a") is None
    assert not task.done()

    release.set()
    assert await task is True
    assert seen == [("DELETE", "/api/chat/a")]


async def test_remote_delete_failure_keeps_local_removal(cache, make_client, make_session):
    await cache.save(make_session("a"))
    client = make_client(lambda request: httpx.Response(500, json={"success": False, "error": "nope"}))
    service = HistoryService(cache, client)

    task = await service.delete_trip("a")

    assert await task is False
    assert await cache.get("a") is None


async def test_remote_delete_of_missing_chat_counts_as_done(cache, make_client):
    client = make_client(lambda request: httpx.Response(404, json={"success": False}))
    service = HistoryService(cache, client)

    task = await service.delete_trip("gone")
    await service.wait_for_pending()

    assert task.result() is True
