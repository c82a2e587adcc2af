"""Device storage database."""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class StorageEntry(Base):
    """One key of the device key/value store"""
    __tablename__ = "device_storage"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, echo=echo, future=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create tables if missing"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
