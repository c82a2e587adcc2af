"""Account API endpoints.

Failures answer with ``{"success": false, "message": ...}`` and a matching
status code so clients can show the message as is.
"""
from typing import Optional

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from planit.logging_config import get_logger
from planit.models.schemas import AuthResponse, LoginRequest, ProfileUpdate, SignupRequest
from planit.server.session_manager import session_manager

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return None


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=AuthResponse(success=False, message=message).to_wire(),
    )


@router.post("/login")
async def login(request: LoginRequest):
    user = session_manager.authenticate(request.email, request.password)
    if user is None:
        logger.warning("login_rejected", email=request.email)
        return _failure(401, "Invalid email or password")

    token = session_manager.issue_token(user)
    logger.info("login_succeeded", user_id=user.id)
    return AuthResponse(success=True, token=token, user=user).to_wire()


@router.post("/signup")
async def signup(request: SignupRequest):
    if not request.email.strip() or not request.password or not request.name.strip():
        return _failure(400, "Email, password and name are required")

    user = session_manager.create_user(request.email, request.password, request.name)
    if user is None:
        return _failure(409, "An account with this email already exists")

    token = session_manager.issue_token(user)
    return AuthResponse(success=True, token=token, user=user).to_wire()


@router.get("/profile")
async def get_profile(authorization: Optional[str] = Header(None)):
    user = session_manager.user_for_token(bearer_token(authorization))
    if user is None:
        return _failure(401, "Invalid or expired token")
    return AuthResponse(success=True, user=user).to_wire()


@router.put("/profile")
async def update_profile(update: ProfileUpdate, authorization: Optional[str] = Header(None)):
    user = session_manager.user_for_token(bearer_token(authorization))
    if user is None:
        return _failure(401, "Invalid or expired token")

    updated = session_manager.update_user(
        user.id,
        name=update.name,
        email=update.email,
        profile_image_url=update.profile_image_url,
    )
    return AuthResponse(success=True, user=updated).to_wire()
