"""Device preferences: theme, map provider, profile image."""
from typing import Optional, get_args

from planit.logging_config import get_logger
from planit.models.schemas import MapProvider, ThemePreference
from planit.services.storage import DeviceStorage, StorageKeys

logger = get_logger(__name__)

DEFAULT_THEME: ThemePreference = "system"
DEFAULT_MAP_PROVIDER: MapProvider = "apple"


class Preferences:
    def __init__(self, storage: DeviceStorage) -> None:
        self._storage = storage
        self.theme: ThemePreference = DEFAULT_THEME

    async def load_theme(self) -> ThemePreference:
        stored = await self._storage.get_item(StorageKeys.THEME_PREFERENCE)
        if stored in get_args(ThemePreference):
            self.theme = stored
        else:
            if stored is not None:
                logger.warning("theme_preference_invalid", stored=stored)
            self.theme = DEFAULT_THEME
        return self.theme

    async def set_theme(self, theme: ThemePreference) -> bool:
        if theme not in get_args(ThemePreference):
            raise ValueError(f"Unknown theme: {theme}")
        saved = await self._storage.set_item(StorageKeys.THEME_PREFERENCE, theme)
        if saved:
            self.theme = theme
            logger.info("theme_preference_saved", theme=theme)
        return saved

    async def get_map_provider(self) -> MapProvider:
        stored = await self._storage.get_item(StorageKeys.MAP_PROVIDER)
        if stored in get_args(MapProvider):
            return stored
        return DEFAULT_MAP_PROVIDER

    async def set_map_provider(self, provider: MapProvider) -> bool:
        if provider not in get_args(MapProvider):
            raise ValueError(f"Unknown map provider: {provider}")
        return await self._storage.set_item(StorageKeys.MAP_PROVIDER, provider)

    async def get_profile_image(self) -> Optional[str]:
        return await self._storage.get_item(StorageKeys.PROFILE_IMAGE)

    async def set_profile_image(self, uri: Optional[str]) -> bool:
        if uri is None:
            return await self._storage.remove_item(StorageKeys.PROFILE_IMAGE)
        return await self._storage.set_item(StorageKeys.PROFILE_IMAGE, uri)
