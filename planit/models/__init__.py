from .schemas import (
    SearchFilters,
    SearchData,
    PlaceEntry,
    Message,
    TripSession,
    TripPlanHistoryItem,
    HistoryResponse,
    PlanRequest,
    PlanResponse,
    MapItRequest,
    MapItResponse,
    User,
    AuthResponse,
    ProfileUpdate,
    AccountData,
)
from .database import Base, StorageEntry

__all__ = [
    "SearchFilters",
    "SearchData",
    "PlaceEntry",
    "Message",
    "TripSession",
    "TripPlanHistoryItem",
    "HistoryResponse",
    "PlanRequest",
    "PlanResponse",
    "MapItRequest",
    "MapItResponse",
    "User",
    "AuthResponse",
    "ProfileUpdate",
    "AccountData",
    "Base",
    "StorageEntry",
]
