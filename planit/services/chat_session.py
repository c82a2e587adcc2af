"""Chat session lifecycle: provisional draft to server-confirmed session.

A search becomes a ``Drafting`` session with a ``local_`` id the moment it is
submitted. ``submit`` moves it to ``Pending`` while ``POST /plan`` is in
flight, then to ``Reconciled`` (ids rewritten to the backend ``chatId`` and
the session cached) or ``Failed`` (nothing cached, retry allowed).
"""
import time
from typing import Annotated, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from planit.logging_config import get_logger
from planit.models.schemas import (
    FALLBACK_AI_RESPONSE,
    PROVISIONAL_ID_PREFIX,
    Message,
    PlanResponse,
    SearchData,
    TripSession,
    ai_message_id,
    is_provisional_id,
    now_iso,
    user_message_id,
)
from planit.services.api_client import PlanitAPIError, PlanitClient
from planit.services.location_extractor import extract_location, generate_chat_title
from planit.services.trip_cache import TripCache

logger = get_logger(__name__)


class MissingSearchDataError(ValueError):
    """The chat was opened without a usable query"""


class ReconciliationError(Exception):
    """The backend answered without a canonical chat id"""


class SessionNotFoundError(LookupError):
    """Neither the cache nor the backend knows this chat id"""


class _State(BaseModel):
    model_config = ConfigDict(frozen=True)

    session: TripSession


class Drafting(_State):
    kind: Literal["drafting"] = "drafting"


class Pending(_State):
    kind: Literal["pending"] = "pending"


class Reconciled(_State):
    kind: Literal["reconciled"] = "reconciled"


class Failed(_State):
    kind: Literal["failed"] = "failed"
    error: str


ChatState = Annotated[
    Union[Drafting, Pending, Reconciled, Failed],
    Field(discriminator="kind"),
]

StateListener = Callable[[ChatState], None]


def _millis() -> int:
    return int(time.time() * 1000)


def draft_session(search_data: Optional[SearchData]) -> TripSession:
    """Provisional session holding only the user's message"""
    if search_data is None or not search_data.search_query.strip():
        raise MissingSearchDataError("No search data found. Please start a new search.")

    stamp = _millis()
    query = search_data.search_query
    session = TripSession(
        id=f"{PROVISIONAL_ID_PREFIX}{stamp}",
        title=generate_chat_title(query),
        location=extract_location(query),
        search_data=search_data,
    )
    session.add_message(Message(id=f"user_{stamp}", type="user", content=query))
    return session


def reconcile_session(draft: TripSession, response: PlanResponse) -> TripSession:
    """Rewrite a provisional session with the backend's identity and answer"""
    if not response.chat_id:
        raise ReconciliationError("Backend response did not include a chat id")
    if is_provisional_id(response.chat_id):
        raise ReconciliationError(f"Backend returned a provisional chat id: {response.chat_id}")

    chat_id = response.chat_id
    user_message = draft.messages[0].model_copy(update={"id": user_message_id(chat_id)})
    ai_message = Message(
        id=ai_message_id(chat_id),
        type="ai",
        content=response.response or FALLBACK_AI_RESPONSE,
        locations=response.locations or None,
        city=response.city,
        practical_tips=response.practical_tips,
    )

    now = now_iso()
    return draft.model_copy(
        update={
            "id": chat_id,
            "title": response.title or draft.title,
            "location": response.location or response.city or draft.location,
            "messages": [user_message, ai_message],
            "created_at": now,
            "updated_at": now,
        }
    )


class ChatSessionController:
    """Drives one chat screen through the session state machine"""

    def __init__(
        self,
        client: PlanitClient,
        cache: TripCache,
        state: ChatState,
        on_change: Optional[StateListener] = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._state = state
        self._on_change = on_change
        self._closed = False

    @classmethod
    def start(
        cls,
        client: PlanitClient,
        cache: TripCache,
        search_data: Optional[SearchData],
        on_change: Optional[StateListener] = None,
    ) -> "ChatSessionController":
        session = draft_session(search_data)
        logger.info("chat_drafted", provisional_id=session.id, title=session.title, location=session.location)
        controller = cls(client, cache, Drafting(session=session), on_change)
        controller._emit()
        return controller

    @classmethod
    async def open_existing(
        cls,
        client: PlanitClient,
        cache: TripCache,
        chat_id: str,
        on_change: Optional[StateListener] = None,
    ) -> "ChatSessionController":
        """Hydrate a confirmed session, from the cache when possible"""
        session = await cache.get(chat_id)
        if session is None:
            logger.info("chat_cache_miss_fetching", chat_id=chat_id)
            try:
                session = await client.get_chat(chat_id)
            except PlanitAPIError as e:
                raise SessionNotFoundError(f"Chat {chat_id} could not be loaded: {e.message}") from e
            await cache.save(session)

        logger.info("chat_opened", chat_id=chat_id, message_count=len(session.messages))
        controller = cls(client, cache, Reconciled(session=session), on_change)
        controller._emit()
        return controller

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def session(self) -> TripSession:
        return self._state.session

    @property
    def closed(self) -> bool:
        return self._closed

    async def submit(self) -> ChatState:
        """Send the draft to the backend; a no-op unless Drafting or Failed"""
        if not isinstance(self._state, (Drafting, Failed)):
            logger.debug("chat_submit_ignored", state=self._state.kind, session_id=self.session.id)
            return self._state

        draft = self._state.session
        self._set_state(Pending(session=draft))
        logger.info("chat_submit_started", provisional_id=draft.id)

        try:
            response = await self._client.create_plan(draft.search_data, draft.messages[0].content)
            session = reconcile_session(draft, response)
        except (PlanitAPIError, ReconciliationError) as e:
            message = e.message if isinstance(e, PlanitAPIError) else str(e)
            logger.error("chat_submit_failed", provisional_id=draft.id, error=message)
            self._set_state(Failed(session=draft, error=message))
            return self._state

        await self._cache.save(session)
        logger.info(
            "chat_reconciled",
            provisional_id=draft.id,
            chat_id=session.id,
            title=session.title,
            location=session.location,
        )
        self._set_state(Reconciled(session=session))
        return self._state

    async def retry(self) -> ChatState:
        if not isinstance(self._state, Failed):
            return self._state
        logger.info("chat_retry", provisional_id=self.session.id)
        return await self.submit()

    def abandon(self) -> None:
        logger.info("chat_abandoned", session_id=self.session.id, state=self._state.kind)
        self.close()

    def close(self) -> None:
        self._closed = True

    def _set_state(self, state: ChatState) -> None:
        self._state = state
        self._emit()

    def _emit(self) -> None:
        if self._closed:
            logger.debug("chat_state_update_discarded", state=self._state.kind, session_id=self.session.id)
            return
        if self._on_change:
            self._on_change(self._state)
