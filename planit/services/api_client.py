"""HTTP client for the planning backend."""
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from planit.logging_config import get_logger
from planit.models.schemas import (
    AuthResponse,
    ChatResponse,
    HistoryResponse,
    LoginRequest,
    MapItRequest,
    MapItResponse,
    PlaceEntry,
    PlanRequest,
    PlanResponse,
    ProfileUpdate,
    SearchData,
    SignupRequest,
    TravelMode,
    TripPlanHistoryItem,
    TripSession,
)

logger = get_logger(__name__)

TokenProvider = Callable[[], Optional[str]]


class PlanitAPIError(Exception):
    """A backend call failed (transport, HTTP status or ``success: false``)"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PlanitClient:
    """Async JSON client for the PlanIT backend"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token_provider = token_provider
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "PlanitClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- trips ---

    async def get_history(self) -> List[TripPlanHistoryItem]:
        data = await self._request("GET", "/history")
        result = self._parse(HistoryResponse, data)
        if not result.success:
            raise PlanitAPIError(result.error or "Failed to fetch trip plan history")
        logger.info("history_fetched", trip_count=len(result.trips))
        return result.trips

    async def get_chat(self, chat_id: str) -> TripSession:
        data = await self._request("GET", f"/chat/{chat_id}")
        result = self._parse(ChatResponse, data)
        if not result.success or result.chat is None:
            raise PlanitAPIError(result.error or f"Chat {chat_id} not found")
        return result.chat

    async def delete_chat(self, chat_id: str) -> None:
        try:
            await self._request("DELETE", f"/chat/{chat_id}")
        except PlanitAPIError as e:
            if e.status_code == 404:
                # already gone
                logger.debug("chat_delete_not_found", chat_id=chat_id)
                return
            raise
        logger.info("chat_deleted_remote", chat_id=chat_id)

    async def create_plan(self, search_data: SearchData, user_message: str) -> PlanResponse:
        body = PlanRequest(search_data=search_data, user_message=user_message)
        data = await self._request("POST", "/plan", json=body.to_wire())
        result = self._parse(PlanResponse, data)
        if not result.success:
            raise PlanitAPIError(result.error or "Plan generation failed")
        logger.info(
            "plan_created",
            chat_id=result.chat_id,
            location_count=len(result.locations),
            response_length=len(result.response or ""),
        )
        return result

    async def mapit(self, locations: List[PlaceEntry], travel_mode: TravelMode) -> str:
        body = MapItRequest(locations=locations, travel_mode=travel_mode)
        data = await self._request("POST", "/plan/mapit", json=body.to_wire())
        return self._parse(MapItResponse, data).map_url

    # --- auth ---

    async def login(self, email: str, password: str) -> AuthResponse:
        body = LoginRequest(email=email, password=password)
        data = await self._request("POST", "/auth/login", json=body.to_wire(), allow_failure_body=True)
        return self._parse(AuthResponse, data)

    async def signup(self, email: str, password: str, name: str) -> AuthResponse:
        body = SignupRequest(email=email, password=password, name=name)
        data = await self._request("POST", "/auth/signup", json=body.to_wire(), allow_failure_body=True)
        return self._parse(AuthResponse, data)

    async def get_profile(self, token: Optional[str] = None) -> AuthResponse:
        data = await self._request("GET", "/auth/profile", token=token, allow_failure_body=True)
        return self._parse(AuthResponse, data)

    async def update_profile(self, update: ProfileUpdate) -> AuthResponse:
        data = await self._request("PUT", "/auth/profile", json=update.to_wire(), allow_failure_body=True)
        return self._parse(AuthResponse, data)

    # --- plumbing ---

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        allow_failure_body: bool = False,
    ) -> Dict[str, Any]:
        headers = {}
        token = token or (self._token_provider() if self._token_provider else None)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("api_request_started", method=method, path=path, authenticated=bool(token))
        try:
            response = await self._http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error("api_request_failed", method=method, path=path, error=str(e), error_type=type(e).__name__)
            raise PlanitAPIError(f"Unable to connect to server: {e}") from e

        logger.debug("api_response_received", method=method, path=path, status_code=response.status_code)

        body = self._json_or_none(response)
        if response.is_success or (allow_failure_body and isinstance(body, dict) and "success" in body):
            return body if isinstance(body, dict) else {}

        message = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("message")
        message = message or f"HTTP error! status: {response.status_code}"
        logger.error("api_http_error", method=method, path=path, status_code=response.status_code, error=message)
        raise PlanitAPIError(message, status_code=response.status_code)

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _parse(model, data: Dict[str, Any]):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("api_response_invalid", model=model.__name__, error_count=e.error_count())
            raise PlanitAPIError(f"Malformed response from server ({model.__name__})") from e
