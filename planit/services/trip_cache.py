"""Local trip session cache."""
import asyncio
import json
from typing import Dict, List, Optional

from pydantic import ValidationError

from planit.logging_config import get_logger
from planit.models.schemas import TripPlanHistoryItem, TripSession
from planit.services.storage import DeviceStorage, StorageKeys

logger = get_logger(__name__)

DEFAULT_MAX_TRIPS = 50


class TripCache:
    """Trip sessions keyed by id, newest first, stored as one JSON array"""

    def __init__(self, storage: DeviceStorage, max_trips: int = DEFAULT_MAX_TRIPS) -> None:
        self._storage = storage
        self._max_trips = max_trips
        # serialises read-modify-write of the single JSON array
        self._write_lock = asyncio.Lock()

    async def list_sessions(self) -> List[TripSession]:
        raw = await self._storage.get_item(StorageKeys.CHAT_HISTORY)
        if not raw:
            return []

        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("trip_cache_corrupt", error=str(e))
            return []

        sessions: List[TripSession] = []
        for entry in entries if isinstance(entries, list) else []:
            try:
                sessions.append(TripSession.model_validate(entry))
            except ValidationError as e:
                # skip the broken entry, keep the rest
                logger.warning("trip_cache_entry_invalid", error_count=e.error_count())
        logger.debug("trip_cache_loaded", count=len(sessions))
        return sessions

    async def list_history_items(self) -> List[TripPlanHistoryItem]:
        return [s.to_history_item() for s in await self.list_sessions()]

    async def get(self, session_id: str) -> Optional[TripSession]:
        for session in await self.list_sessions():
            if session.id == session_id:
                return session
        return None

    async def save(self, session: TripSession) -> bool:
        """Insert or replace a reconciled session"""
        if session.is_provisional:
            raise ValueError(f"refusing to cache provisional session id {session.id!r}")

        async with self._write_lock:
            sessions = await self.list_sessions()
            index = next((i for i, s in enumerate(sessions) if s.id == session.id), None)
            if index is not None:
                sessions[index] = session
                logger.debug("trip_cache_entry_replaced", session_id=session.id)
            else:
                sessions.insert(0, session)
                logger.debug("trip_cache_entry_added", session_id=session.id)

            dropped = len(sessions) - self._max_trips
            if dropped > 0:
                logger.info("trip_cache_trimmed", dropped=dropped, max_trips=self._max_trips)
            return await self._write(sessions[: self._max_trips])

    async def delete(self, session_id: str) -> bool:
        async with self._write_lock:
            sessions = await self.list_sessions()
            remaining = [s for s in sessions if s.id != session_id]
            if len(remaining) == len(sessions):
                logger.debug("trip_cache_delete_miss", session_id=session_id)
                return False

            await self._write(remaining)
        logger.info("trip_cache_entry_deleted", session_id=session_id, remaining=len(remaining))
        return True

    async def clear(self) -> bool:
        async with self._write_lock:
            logger.info("trip_cache_cleared")
            return await self._storage.remove_item(StorageKeys.CHAT_HISTORY)

    async def stats(self) -> Dict[str, float]:
        raw = await self._storage.get_item(StorageKeys.CHAT_HISTORY) or ""
        sessions = await self.list_sessions()
        return {
            "chat_count": len(sessions),
            "total_size_kb": len(raw) / 1024,
        }

    async def _write(self, sessions: List[TripSession]) -> bool:
        payload = json.dumps([s.to_wire() for s in sessions], ensure_ascii=False)
        return await self._storage.set_item(StorageKeys.CHAT_HISTORY, payload)
