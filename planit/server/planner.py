"""Deterministic stand-in for the AI planner.

Keeps the plan endpoint answering with the documented shape so clients can
be exercised without a model behind it. It does not plan anything.
"""
from typing import Any, Dict, List
from urllib.parse import urlencode

from planit.models.schemas import PRICE_RANGE_MAP, PlaceEntry, SearchData, TravelMode
from planit.services.location_extractor import UNKNOWN_LOCATION, extract_location, generate_chat_title

GOOGLE_MAPS_DIR_URL = "https://www.google.com/maps/dir/"


def build_plan(search_data: SearchData, user_message: str) -> Dict[str, Any]:
    filters = search_data.filters
    location = extract_location(user_message)
    place = location if location != UNKNOWN_LOCATION else "your area"

    lines = [f"Here is a starting point for {place}."]
    if filters.time_of_day:
        lines.append(f"Planned for the {' and '.join(filters.time_of_day)}.")
    if filters.plan_food:
        budget = PRICE_RANGE_MAP.get(filters.price_range, "any budget") if filters.price_range else "any budget"
        lines.append(f"Food stops are included ({budget}).")
    if filters.plan_transit:
        lines.append("Transit directions are included between stops.")

    tips: List[str] = []
    if filters.environment == "outdoor":
        tips.append("Check the weather before heading out.")
    if filters.group_size == "group":
        tips.append("Book ahead for larger groups.")

    return {
        "response": " ".join(lines),
        "city": location,
        "locations": [],
        "practical_tips": tips or None,
        "title": generate_chat_title(user_message),
        "location": location,
    }


def build_map_url(locations: List[PlaceEntry], travel_mode: TravelMode) -> str:
    stops = [loc.address or loc.name for loc in locations]
    params = {
        "api": "1",
        "origin": stops[0],
        "destination": stops[-1],
        "travelmode": travel_mode,
    }
    if len(stops) > 2:
        params["waypoints"] = "|".join(stops[1:-1])
    return f"{GOOGLE_MAPS_DIR_URL}?{urlencode(params)}"
