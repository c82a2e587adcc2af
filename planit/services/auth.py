"""Authentication state and account data."""
import asyncio
from typing import Optional

from pydantic import BaseModel, ValidationError

from planit.logging_config import get_logger
from planit.models.schemas import AccountData, AuthResponse, ProfileUpdate, User
from planit.services.api_client import PlanitAPIError, PlanitClient
from planit.services.storage import DeviceStorage, StorageKeys

logger = get_logger(__name__)


class AuthResult(BaseModel):
    success: bool
    message: Optional[str] = None


class AuthState:
    """Signed-in user and token, persisted on the device.

    Constructed once by ``AppState`` and handed to whoever needs it.
    """

    def __init__(self, storage: DeviceStorage, client: PlanitClient) -> None:
        self._storage = storage
        self._client = client
        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.is_loading = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user and self.token)

    async def initialize(self) -> None:
        """Restore a stored login and refresh the profile"""
        self.is_loading = True
        try:
            stored_token, stored_user = await asyncio.gather(
                self._storage.get_item(StorageKeys.AUTH_TOKEN),
                self._storage.get_item(StorageKeys.USER_DATA),
            )
            if not (stored_token and stored_user):
                logger.info("auth_no_stored_credentials")
                return

            try:
                user = User.model_validate_json(stored_user)
            except ValidationError:
                logger.warning("auth_stored_user_invalid")
                await self._clear()
                return

            self.token = stored_token
            self.user = user
            logger.info("auth_restored", email=user.email)
            await self.refresh_profile()
        finally:
            self.is_loading = False

    async def login(self, email: str, password: str) -> AuthResult:
        logger.info("login_attempt", email=email)
        try:
            result = await self._client.login(email, password)
        except PlanitAPIError as e:
            logger.error("login_error", email=email, error=e.message)
            return AuthResult(success=False, message="Unable to connect to server. Please try again.")
        return await self._accept(result, failure_message="Invalid credentials")

    async def signup(self, email: str, password: str, name: str) -> AuthResult:
        logger.info("signup_attempt", email=email)
        try:
            result = await self._client.signup(email, password, name)
        except PlanitAPIError as e:
            logger.error("signup_error", email=email, error=e.message)
            return AuthResult(success=False, message="Unable to connect to server. Please try again.")
        return await self._accept(result, failure_message="Unable to create account")

    async def logout(self) -> None:
        await self._clear()
        logger.info("logout_complete")

    async def update_profile(self, update: ProfileUpdate) -> AuthResult:
        if not self.token:
            logger.warning("profile_update_without_token")
            return AuthResult(success=False, message="Not signed in")

        try:
            result = await self._client.update_profile(update)
        except PlanitAPIError as e:
            logger.error("profile_update_error", error=e.message)
            return AuthResult(success=False, message="Unable to connect to server. Please try again.")

        if result.success and result.user:
            await self._set_user(result.user)
            logger.info("profile_updated", user_id=result.user.id)
            return AuthResult(success=True)

        logger.warning("profile_update_rejected", message=result.message)
        return AuthResult(success=False, message=result.message or "Unable to update profile")

    async def refresh_profile(self) -> None:
        if not self.token:
            return
        try:
            result = await self._client.get_profile(token=self.token)
        except PlanitAPIError as e:
            # keep the session on network errors
            logger.warning("profile_refresh_error", error=e.message)
            return

        if result.success and result.user:
            await self._set_user(result.user)
            logger.debug("profile_refreshed", user_id=result.user.id)
        else:
            logger.warning("profile_refresh_rejected_clearing_auth", message=result.message)
            await self._clear()

    # --- account data ---

    async def load_account_data(self) -> AccountData:
        if self.is_authenticated:
            return AccountData(name=self.user.name or "", email=self.user.email or "")

        raw = await self._storage.get_item(StorageKeys.ACCOUNT_DATA)
        if not raw:
            return AccountData()
        try:
            return AccountData.model_validate_json(raw)
        except ValidationError:
            logger.warning("account_data_invalid")
            return AccountData()

    async def save_account_data(self, name: str, email: str) -> AuthResult:
        name, email = name.strip(), email.strip()
        if not name:
            return AuthResult(success=False, message="Name is required")

        if self.is_authenticated:
            return await self.update_profile(ProfileUpdate(name=name, email=email))

        data = AccountData(name=name, email=email)
        saved = await self._storage.set_item(StorageKeys.ACCOUNT_DATA, data.model_dump_json(by_alias=True))
        logger.info("account_data_saved_locally", saved=saved)
        if not saved:
            return AuthResult(success=False, message="Failed to save account information")
        return AuthResult(success=True)

    # --- helpers ---

    async def _accept(self, result: AuthResponse, failure_message: str) -> AuthResult:
        if result.success and result.token and result.user:
            await self._storage.set_item(StorageKeys.AUTH_TOKEN, result.token)
            await self._storage.set_item(StorageKeys.USER_DATA, result.user.model_dump_json(by_alias=True))
            self.token = result.token
            self.user = result.user
            logger.info("auth_success", user_id=result.user.id)
            return AuthResult(success=True)

        logger.warning("auth_rejected", message=result.message)
        return AuthResult(success=False, message=result.message or failure_message)

    async def _set_user(self, user: User) -> None:
        await self._storage.set_item(StorageKeys.USER_DATA, user.model_dump_json(by_alias=True))
        self.user = user

    async def _clear(self) -> None:
        await self._storage.multi_remove([StorageKeys.AUTH_TOKEN, StorageKeys.USER_DATA])
        self.token = None
        self.user = None
