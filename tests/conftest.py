from typing import Callable, Optional

import httpx
import pytest

from planit.config import Settings
from planit.models.schemas import Message, SearchData, SearchFilters, TripSession
from planit.services.api_client import PlanitClient
from planit.services.storage import DeviceStorage
from planit.services.trip_cache import TripCache

API_BASE_URL = "http://testserver/api"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        api_base_url=API_BASE_URL,
        storage_url=f"sqlite+aiosqlite:///{tmp_path / 'device.db'}",
        debug=True,
        log_level="DEBUG",
        app_env="test",
    )


@pytest.fixture
async def storage(settings):
    store = DeviceStorage(settings.storage_url)
    await store.init()
    yield store
    await store.close()


@pytest.fixture
def cache(storage) -> TripCache:
    return TripCache(storage)


@pytest.fixture
def search_data() -> SearchData:
    return SearchData(
        search_query="After work friends hangout and food in downtown Toronto",
        filters=SearchFilters(
            time_of_day=["evening"],
            environment="mixed",
            group_size="group",
            plan_food=True,
            price_range=2,
        ),
    )


@pytest.fixture
def make_session(search_data) -> Callable[..., TripSession]:
    def factory(
        session_id: str,
        updated_at: str = "2024-05-01T10:00:00",
        title: Optional[str] = None,
    ) -> TripSession:
        return TripSession(
            id=session_id,
            title=title or f"Trip {session_id}",
            location="Toronto",
            search_data=search_data,
            messages=[
                Message(id=f"user_{session_id}_0", type="user", content=search_data.search_query),
                Message(id=f"ai_{session_id}_1", type="ai", content="Here you go"),
            ],
            created_at=updated_at,
            updated_at=updated_at,
        )

    return factory


@pytest.fixture
async def make_client():
    """Build PlanitClient instances routed to an in-process handler"""
    clients = []

    def factory(handler, token_provider=None) -> PlanitClient:
        client = PlanitClient(
            API_BASE_URL,
            token_provider=token_provider,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.aclose()
