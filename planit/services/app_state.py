"""Application state container."""
from typing import Optional

import httpx

from planit.config import Settings, get_settings
from planit.logging_config import get_logger
from planit.models.schemas import SearchData
from planit.services.api_client import PlanitClient
from planit.services.auth import AuthState
from planit.services.chat_session import ChatSessionController, StateListener
from planit.services.history import HistoryService
from planit.services.preferences import Preferences
from planit.services.storage import DeviceStorage
from planit.services.trip_cache import TripCache

logger = get_logger(__name__)


class AppState:
    """Owns every long-lived service; create one per running app.

    ``startup`` restores persisted state and ``shutdown`` releases the HTTP
    client and the storage engine.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.storage = DeviceStorage(self.settings.storage_url)
        self.cache = TripCache(self.storage, max_trips=self.settings.max_cached_trips)
        self.client = PlanitClient(
            self.settings.api_base_url,
            timeout=self.settings.request_timeout,
            token_provider=self._current_token,
            transport=transport,
        )
        self.auth = AuthState(self.storage, self.client)
        self.preferences = Preferences(self.storage)
        self.history = HistoryService(self.cache, self.client)
        self._started = False

    async def startup(self) -> None:
        await self.storage.init()
        await self.auth.initialize()
        await self.preferences.load_theme()
        self._started = True
        logger.info(
            "app_state_started",
            env=self.settings.app_env,
            api_base_url=self.settings.api_base_url,
            authenticated=self.auth.is_authenticated,
            theme=self.preferences.theme,
        )

    async def shutdown(self) -> None:
        await self.history.wait_for_pending()
        await self.client.aclose()
        await self.storage.close()
        self._started = False
        logger.info("app_state_stopped")

    async def __aenter__(self) -> "AppState":
        await self.startup()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.shutdown()

    def new_chat(
        self,
        search_data: Optional[SearchData],
        on_change: Optional[StateListener] = None,
    ) -> ChatSessionController:
        return ChatSessionController.start(self.client, self.cache, search_data, on_change)

    async def open_chat(
        self,
        chat_id: str,
        on_change: Optional[StateListener] = None,
    ) -> ChatSessionController:
        return await ChatSessionController.open_existing(self.client, self.cache, chat_id, on_change)

    def _current_token(self) -> Optional[str]:
        return self.auth.token if self.auth.is_authenticated else None
