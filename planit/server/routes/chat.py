"""Trip history and chat API endpoints."""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from planit.logging_config import get_logger
from planit.models.schemas import ChatResponse, HistoryResponse
from planit.server.routes.auth import bearer_token
from planit.server.session_manager import session_manager

router = APIRouter(prefix="/api", tags=["chat"])
logger = get_logger(__name__)


def _not_found(chat_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content=ChatResponse(success=False, error=f"Chat {chat_id} not found").to_wire(),
    )


@router.get("/history")
async def get_history(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    """Trip sessions of the caller, newest first"""
    owner = session_manager.user_for_token(bearer_token(authorization))
    sessions = session_manager.list_sessions(owner.id if owner else None)
    trips = [s.to_history_item() for s in sessions]

    logger.info("history_listed", owner_id=owner.id if owner else None, trip_count=len(trips))
    return HistoryResponse(
        success=True,
        trips=trips,
        pagination={"page": 1, "limit": len(trips), "total": len(trips), "hasMore": False},
        metadata={"source": "memory"},
    ).to_wire()


@router.get("/chat/{chat_id}")
async def get_chat(chat_id: str):
    session = session_manager.get_session(chat_id)
    if session is None:
        return _not_found(chat_id)
    return ChatResponse(success=True, chat=session).to_wire()


@router.delete("/chat/{chat_id}")
async def delete_chat(chat_id: str):
    if not session_manager.delete_session(chat_id):
        return _not_found(chat_id)
    return {"success": True, "message": "Chat deleted"}
