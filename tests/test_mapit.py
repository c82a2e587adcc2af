import json

import httpx
import pytest

from planit.models.schemas import Message, PlaceEntry, SearchFilters
from planit.services.mapit import collect_locations, default_travel_mode, open_in_maps


@pytest.fixture
def itinerary(make_session):
    session = make_session("trip-1")
    session.add_message(
        Message(
            id="ai_trip-1_2",
            type="ai",
            content="More",
            locations=[PlaceEntry(name="Distillery District"), PlaceEntry(name="St. Lawrence Market")],
        )
    )
    session.messages[1].locations = [PlaceEntry(name="CN Tower")]
    return session


def test_collect_locations_in_order(itinerary):
    assert [p.name for p in collect_locations(itinerary)] == [
        "CN Tower",
        "Distillery District",
        "St. Lawrence Market",
    ]


def test_default_travel_mode():
    assert default_travel_mode(SearchFilters(plan_transit=True)) == "transit"
    assert default_travel_mode(SearchFilters()) == "walking"


async def test_open_in_maps(make_client, itinerary):
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"mapUrl": "https://maps.example/r"})

    url = await open_in_maps(make_client(handler), itinerary)

    assert url == "https://maps.example/r"
    assert seen[0]["travelMode"] == "walking"
    assert len(seen[0]["locations"]) == 3


async def test_open_in_maps_explicit_mode(make_client, itinerary):
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"mapUrl": "https://maps.example/r"})

    await open_in_maps(make_client(handler), itinerary, travel_mode="driving")
    assert seen[0]["travelMode"] == "driving"


async def test_open_in_maps_without_locations(make_client, make_session):
    client = make_client(lambda request: httpx.Response(500))

    with pytest.raises(ValueError):
        await open_in_maps(client, make_session("empty"))
