"""Trip history: server/local merge and deletion."""
import asyncio
from datetime import datetime
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel

from planit.logging_config import get_logger
from planit.models.schemas import TripPlanHistoryItem
from planit.services.api_client import PlanitAPIError, PlanitClient
from planit.services.trip_cache import TripCache

logger = get_logger(__name__)


def _timestamp(value: str) -> float:
    if not value:
        return float("-inf")
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return float("-inf")


def sort_by_last_updated(trips: List[TripPlanHistoryItem]) -> List[TripPlanHistoryItem]:
    """Newest first; ties keep their input order"""
    return sorted(trips, key=lambda t: _timestamp(t.last_updated), reverse=True)


def merge_trips(
    server_trips: List[TripPlanHistoryItem],
    local_trips: List[TripPlanHistoryItem],
) -> List[TripPlanHistoryItem]:
    """Deduplicate by id with the server copy winning, keep local-only trips.

    Only call this with a server list that was actually fetched. When the
    fetch failed, fall back to ``sort_by_last_updated(local_trips)``.
    """
    merged: Dict[str, TripPlanHistoryItem] = {}
    for trip in server_trips:
        merged.setdefault(trip.id, trip)
    for trip in local_trips:
        merged.setdefault(trip.id, trip)

    result = sort_by_last_updated(list(merged.values()))
    logger.debug(
        "history_merged",
        server_count=len(server_trips),
        local_count=len(local_trips),
        merged_count=len(result),
    )
    return result


class HistoryResult(BaseModel):
    trips: List[TripPlanHistoryItem]
    source: Literal["merged", "local"]
    error: Optional[str] = None


class HistoryService:
    """History list for display, backed by the cache and the backend"""

    def __init__(self, cache: TripCache, client: PlanitClient) -> None:
        self._cache = cache
        self._client = client
        self._pending_deletes: Set[asyncio.Task] = set()

    async def load_history(self) -> HistoryResult:
        local_trips, server_trips = await asyncio.gather(
            self._cache.list_history_items(),
            self._client.get_history(),
            return_exceptions=True,
        )
        if isinstance(local_trips, BaseException):
            # the cache already logs and swallows storage errors
            raise local_trips

        if isinstance(server_trips, PlanitAPIError):
            logger.warning(
                "history_fetch_failed_using_local",
                error=server_trips.message,
                local_count=len(local_trips),
            )
            return HistoryResult(
                trips=sort_by_last_updated(local_trips),
                source="local",
                error=server_trips.message,
            )
        if isinstance(server_trips, BaseException):
            raise server_trips

        return HistoryResult(trips=merge_trips(server_trips, local_trips), source="merged")

    async def delete_trip(self, trip_id: str) -> asyncio.Task:
        """Remove locally, then delete remotely in the background.

        The local removal is authoritative; the returned task only logs the
        remote outcome.
        """
        await self._cache.delete(trip_id)

        task = asyncio.create_task(self._delete_remote(trip_id))
        self._pending_deletes.add(task)
        task.add_done_callback(self._pending_deletes.discard)
        return task

    async def wait_for_pending(self) -> None:
        if self._pending_deletes:
            await asyncio.gather(*self._pending_deletes)

    async def _delete_remote(self, trip_id: str) -> bool:
        try:
            await self._client.delete_chat(trip_id)
        except PlanitAPIError as e:
            logger.warning(
                "remote_delete_failed_local_kept",
                trip_id=trip_id,
                error=e.message,
                status_code=e.status_code,
            )
            return False
        return True
