"""Pydantic schemas shared by the client core and the development server.

Attributes are snake_case in Python; the backend and the device cache use the
camelCase form, so every model serialises ``by_alias``.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


PROVISIONAL_ID_PREFIX = "local_"
FALLBACK_AI_RESPONSE = "I found some great options for you!"

TimeOfDay = Literal["morning", "afternoon", "evening"]
Environment = Literal["indoor", "outdoor", "mixed"]
GroupSize = Literal["solo", "duo", "group"]
PriceRange = Literal[1, 2, 3, 4]
SpecialOption = Literal["auto", "casual", "tourist", "wander", "date", "family"]
MessageType = Literal["user", "ai"]
TravelMode = Literal["driving", "walking", "transit", "bicycling"]
ThemePreference = Literal["light", "dark", "system"]
MapProvider = Literal["apple", "google"]

PRICE_RANGE_MAP: Dict[int, str] = {
    1: "$",
    2: "$$",
    3: "$$$",
    4: "$$$+",
}


def now_iso() -> str:
    return datetime.now().isoformat()


def is_provisional_id(session_id: str) -> bool:
    return session_id.startswith(PROVISIONAL_ID_PREFIX)


def user_message_id(session_id: str) -> str:
    return f"user_{session_id}_0"


def ai_message_id(session_id: str) -> str:
    return f"ai_{session_id}_1"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Search input ---

class SearchFilters(CamelModel):
    """Filter set collected on the search screen"""
    model_config = ConfigDict(frozen=True)

    time_of_day: List[TimeOfDay] = Field(default_factory=list)
    environment: Environment = "indoor"
    plan_transit: bool = False
    group_size: GroupSize = "solo"
    plan_food: bool = False
    price_range: Optional[PriceRange] = None
    special_option: SpecialOption = "auto"

    @model_validator(mode="before")
    @classmethod
    def _drop_price_without_food(cls, data: Any) -> Any:
        # a price tier only means something when food planning is on
        if isinstance(data, dict):
            plan_food = data.get("plan_food", data.get("planFood", False))
            if not plan_food:
                data = {k: v for k, v in data.items() if k not in ("price_range", "priceRange")}
        return data

    def describe(self) -> str:
        parts: List[str] = []
        if self.time_of_day:
            parts.append(f"Time: {', '.join(self.time_of_day)}")
        if self.environment:
            parts.append(f"Environment: {self.environment}")
        if self.group_size:
            parts.append(f"Group: {self.group_size}")
        if self.plan_transit:
            parts.append("Transit planned")
        if self.plan_food:
            price = PRICE_RANGE_MAP.get(self.price_range, "unknown") if self.price_range else "included"
            parts.append(f"Food: {price}")
        if self.special_option and self.special_option != "auto":
            parts.append(f"Style: {self.special_option}")
        return " • ".join(parts)


class SearchData(CamelModel):
    """Query text plus filters; immutable once a session is created from it"""
    model_config = ConfigDict(frozen=True)

    search_query: str
    filters: SearchFilters = Field(default_factory=SearchFilters)
    timestamp: str = Field(default_factory=now_iso)


# --- Chat ---

class PlaceEntry(CamelModel):
    name: str
    address: Optional[str] = None
    category: Optional[str] = None
    time: Optional[str] = None
    price: Optional[str] = None
    rating: Optional[float] = None
    hours: Optional[str] = None


class Message(CamelModel):
    """One chat bubble"""
    id: str
    type: MessageType
    content: str
    timestamp: str = Field(default_factory=now_iso)
    # AI only
    locations: Optional[List[PlaceEntry]] = None
    city: Optional[str] = None
    practical_tips: Optional[Any] = None


class ImageData(CamelModel):
    id: str
    url: str
    thumbnail: Optional[str] = None
    alt_description: Optional[str] = None
    photographer: Optional[Dict[str, Any]] = None
    unsplash_url: Optional[str] = None
    location: Optional[str] = None


class TripPlanHistoryItem(CamelModel):
    """Row of the history list"""
    id: str
    title: str
    location: str = ""
    last_updated: str = ""
    search_data: Optional[SearchData] = None
    image: Optional[ImageData] = None


class TripSession(CamelModel):
    """A user query and its generated itinerary (a "chat")"""
    id: str
    title: str
    location: str = ""
    search_data: SearchData
    messages: List[Message] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)
    image: Optional[ImageData] = None

    @property
    def is_provisional(self) -> bool:
        return is_provisional_id(self.id)

    def add_message(self, message: Message) -> None:
        self.messages.append(message)
        self.touch()

    def touch(self) -> None:
        self.updated_at = now_iso()

    def to_history_item(self) -> TripPlanHistoryItem:
        return TripPlanHistoryItem(
            id=self.id,
            title=self.title,
            location=self.location,
            last_updated=self.updated_at or self.created_at,
            search_data=self.search_data,
            image=self.image,
        )


# --- Backend contract ---

class HistoryResponse(CamelModel):
    success: bool
    trips: List[TripPlanHistoryItem] = Field(default_factory=list)
    pagination: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class ChatResponse(CamelModel):
    success: bool
    chat: Optional[TripSession] = None
    error: Optional[str] = None


class PlanRequest(CamelModel):
    search_data: SearchData
    user_message: str


class PlanResponse(CamelModel):
    success: bool
    response: Optional[str] = None
    city: Optional[str] = None
    locations: List[PlaceEntry] = Field(default_factory=list)
    practical_tips: Optional[Any] = None
    chat_id: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    error: Optional[str] = None


class MapItRequest(CamelModel):
    locations: List[PlaceEntry]
    travel_mode: TravelMode = "walking"


class MapItResponse(CamelModel):
    map_url: str


# --- Account ---

class User(CamelModel):
    id: str
    email: str
    name: str
    profile_image_url: Optional[str] = None
    adventures_count: int = 0
    places_visited_count: int = 0
    member_since: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class LoginRequest(CamelModel):
    email: str
    password: str


class SignupRequest(CamelModel):
    email: str
    password: str
    name: str


class AuthResponse(CamelModel):
    success: bool
    token: Optional[str] = None
    user: Optional[User] = None
    message: Optional[str] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    profile_image_url: Optional[str] = None


class AccountData(CamelModel):
    """Name/email kept on the device for signed-out use"""
    name: str = ""
    email: str = ""
