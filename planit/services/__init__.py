from .api_client import PlanitAPIError, PlanitClient
from .app_state import AppState
from .auth import AuthResult, AuthState
from .chat_session import (
    ChatSessionController,
    Drafting,
    Failed,
    MissingSearchDataError,
    Pending,
    Reconciled,
    ReconciliationError,
    SessionNotFoundError,
)
from .history import HistoryResult, HistoryService, merge_trips
from .location_extractor import extract_location, generate_chat_title
from .storage import DeviceStorage, StorageKeys
from .trip_cache import TripCache

__all__ = [
    "PlanitAPIError",
    "PlanitClient",
    "AppState",
    "AuthResult",
    "AuthState",
    "ChatSessionController",
    "Drafting",
    "Failed",
    "MissingSearchDataError",
    "Pending",
    "Reconciled",
    "ReconciliationError",
    "SessionNotFoundError",
    "HistoryResult",
    "HistoryService",
    "merge_trips",
    "extract_location",
    "generate_chat_title",
    "DeviceStorage",
    "StorageKeys",
    "TripCache",
]
