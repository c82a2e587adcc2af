"""In-memory trip and account store (development use)."""
import hashlib
import secrets
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from planit.logging_config import get_logger
from planit.models.schemas import (
    Message,
    PlaceEntry,
    SearchData,
    TripSession,
    User,
    ai_message_id,
    user_message_id,
)

logger = get_logger(__name__)


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


class SessionManager:
    """Trip sessions plus the accounts that own them"""

    def __init__(self) -> None:
        self._sessions: Dict[str, TripSession] = {}
        self._owners: Dict[str, Optional[str]] = {}
        self._users: Dict[str, User] = {}
        self._passwords: Dict[str, str] = {}
        self._tokens: Dict[str, str] = {}
        logger.info("session_manager_initialized")

    def stats(self) -> Dict[str, int]:
        return {
            "trips": len(self._sessions),
            "accounts": len(self._users),
            "active_tokens": len(self._tokens),
        }

    def clear(self) -> None:
        self._sessions.clear()
        self._owners.clear()
        self._users.clear()
        self._passwords.clear()
        self._tokens.clear()

    # --- trips ---

    def create_session(
        self,
        search_data: SearchData,
        user_message: str,
        title: str,
        location: str,
        response: str,
        locations: List[PlaceEntry],
        city: Optional[str],
        owner_id: Optional[str] = None,
    ) -> TripSession:
        session_id = str(uuid.uuid4())
        now = datetime.now().isoformat()

        session = TripSession(
            id=session_id,
            title=title,
            location=location,
            search_data=search_data,
            messages=[
                Message(id=user_message_id(session_id), type="user", content=user_message, timestamp=now),
                Message(
                    id=ai_message_id(session_id),
                    type="ai",
                    content=response,
                    timestamp=now,
                    locations=locations or None,
                    city=city,
                ),
            ],
            created_at=now,
            updated_at=now,
        )
        self._sessions[session_id] = session
        self._owners[session_id] = owner_id

        logger.info(
            "session_created",
            session_id=session_id,
            owner_id=owner_id,
            total_sessions=len(self._sessions),
        )
        return session

    def get_session(self, session_id: str) -> Optional[TripSession]:
        session = self._sessions.get(session_id)
        logger.debug("session_get_hit" if session else "session_get_miss", session_id=session_id)
        return session

    def list_sessions(self, owner_id: Optional[str] = None) -> List[TripSession]:
        sessions = [s for sid, s in self._sessions.items() if self._owners.get(sid) == owner_id]
        return sorted(sessions, key=lambda s: s.updated_at, reverse=True)

    def delete_session(self, session_id: str) -> bool:
        if session_id in self._sessions:
            del self._sessions[session_id]
            self._owners.pop(session_id, None)
            logger.info("session_deleted", session_id=session_id, remaining_sessions=len(self._sessions))
            return True

        logger.warning("session_delete_not_found", session_id=session_id)
        return False

    # --- accounts ---

    def create_user(self, email: str, password: str, name: str) -> Optional[User]:
        email = email.strip().lower()
        if any(u.email == email for u in self._users.values()):
            logger.warning("user_create_duplicate_email", email=email)
            return None

        now = datetime.now().isoformat()
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            name=name.strip(),
            member_since=now,
            created_at=now,
            updated_at=now,
        )
        self._users[user.id] = user
        self._passwords[user.id] = _hash_password(password, user.id)
        logger.info("user_created", user_id=user.id)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        email = email.strip().lower()
        for user in self._users.values():
            if user.email == email and self._passwords[user.id] == _hash_password(password, user.id):
                return user
        return None

    def issue_token(self, user: User) -> str:
        token = secrets.token_urlsafe(32)
        self._tokens[token] = user.id
        return token

    def user_for_token(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        user_id = self._tokens.get(token)
        return self._users.get(user_id) if user_id else None

    def update_user(self, user_id: str, **changes) -> Optional[User]:
        user = self._users.get(user_id)
        if not user:
            return None
        changes = {k: v for k, v in changes.items() if v is not None}
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
        user = user.model_copy(update={**changes, "updated_at": datetime.now().isoformat()})
        self._users[user_id] = user
        logger.info("user_updated", user_id=user_id, fields=sorted(changes))
        return user


session_manager = SessionManager()
