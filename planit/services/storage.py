"""Device key/value storage backed by SQLite."""
from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from planit.logging_config import get_logger
from planit.models.database import StorageEntry, create_engine_for, create_sessionmaker, init_db

logger = get_logger(__name__)


class StorageKeys:
    CHAT_HISTORY = "chatHistory"
    AUTH_TOKEN = "@planit_auth_token"
    USER_DATA = "@planit_user_data"
    ACCOUNT_DATA = "@planit_account_data"
    THEME_PREFERENCE = "@planit_theme_preference"
    MAP_PROVIDER = "MAP_PROVIDER_PREFERENCE"
    PROFILE_IMAGE = "@planit_profile_image"


class DeviceStorage:
    """String key/value store persisted across restarts.

    Failures never propagate: reads come back as ``None`` and writes as
    ``False`` after the error is logged.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self._engine: AsyncEngine = create_engine_for(url, echo=echo)
        self._sessionmaker = create_sessionmaker(self._engine)

    async def init(self) -> None:
        await init_db(self._engine)
        logger.info("device_storage_initialized", url=str(self._engine.url))

    async def close(self) -> None:
        await self._engine.dispose()

    async def get_item(self, key: str) -> Optional[str]:
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(
                    select(StorageEntry.value).where(StorageEntry.key == key)
                )
                value = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("storage_read_failed", key=key, error=str(e), error_type=type(e).__name__)
            return None

        logger.debug("storage_read", key=key, hit=value is not None)
        return value

    async def set_item(self, key: str, value: str) -> bool:
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    await session.merge(StorageEntry(key=key, value=value))
        except SQLAlchemyError as e:
            logger.error("storage_write_failed", key=key, error=str(e), error_type=type(e).__name__)
            return False

        logger.debug("storage_write", key=key, size=len(value))
        return True

    async def remove_item(self, key: str) -> bool:
        return await self.multi_remove([key])

    async def multi_remove(self, keys: Iterable[str]) -> bool:
        keys = list(keys)
        try:
            async with self._sessionmaker() as session:
                async with session.begin():
                    await session.execute(delete(StorageEntry).where(StorageEntry.key.in_(keys)))
        except SQLAlchemyError as e:
            logger.error("storage_remove_failed", keys=keys, error=str(e), error_type=type(e).__name__)
            return False

        logger.debug("storage_remove", keys=keys)
        return True
