"""Application settings."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Planning backend
    api_base_url: str = "http://localhost:3000/api"
    request_timeout: float = 30.0  # seconds

    # Device storage
    storage_url: str = "sqlite+aiosqlite:///./planit_device.db"
    max_cached_trips: int = 50

    # App Settings
    debug: bool = True
    log_level: str = "DEBUG"
    app_env: str = "development"

    # Development server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "http://localhost:8081,http://localhost:19006"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Return the cached settings singleton"""
    return Settings()
