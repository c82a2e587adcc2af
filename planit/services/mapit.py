"""MapIT: hand the whole itinerary to an external maps app."""
from typing import List, Optional

from planit.logging_config import get_logger
from planit.models.schemas import PlaceEntry, SearchFilters, TravelMode, TripSession
from planit.services.api_client import PlanitClient

logger = get_logger(__name__)


def collect_locations(session: TripSession) -> List[PlaceEntry]:
    """Every location of every AI message, in itinerary order"""
    locations: List[PlaceEntry] = []
    for message in session.messages:
        if message.type == "ai" and message.locations:
            locations.extend(message.locations)
    return locations


def default_travel_mode(filters: SearchFilters) -> TravelMode:
    return "transit" if filters.plan_transit else "walking"


async def open_in_maps(
    client: PlanitClient,
    session: TripSession,
    travel_mode: Optional[TravelMode] = None,
) -> str:
    locations = collect_locations(session)
    if not locations:
        raise ValueError("This itinerary has no locations to map")

    mode = travel_mode or default_travel_mode(session.search_data.filters)
    map_url = await client.mapit(locations, mode)
    logger.info("mapit_url_created", chat_id=session.id, location_count=len(locations), travel_mode=mode)
    return map_url
