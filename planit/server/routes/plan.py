"""Plan API endpoints."""
import time
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from planit.logging_config import get_logger
from planit.models.schemas import MapItRequest, MapItResponse, PlanRequest, PlanResponse
from planit.server.planner import build_map_url, build_plan
from planit.server.routes.auth import bearer_token
from planit.server.session_manager import session_manager

router = APIRouter(prefix="/api/plan", tags=["plan"])
logger = get_logger(__name__)


@router.post("", response_model=PlanResponse, response_model_by_alias=True)
async def create_plan(
    request: PlanRequest,
    authorization: Optional[str] = Header(None),
) -> PlanResponse:
    """Create a trip session and answer with its canonical id"""
    start_time = time.time()
    query = request.user_message or request.search_data.search_query

    logger.info(
        "plan_request_received",
        message_length=len(query),
        filters=request.search_data.filters.describe(),
    )

    if not query.strip():
        raise HTTPException(status_code=400, detail="userMessage is required")

    try:
        owner = session_manager.user_for_token(bearer_token(authorization))
        plan = build_plan(request.search_data, query)
        session = session_manager.create_session(
            search_data=request.search_data,
            user_message=query,
            title=plan["title"],
            location=plan["location"],
            response=plan["response"],
            locations=plan["locations"],
            city=plan["city"],
            owner_id=owner.id if owner else None,
        )
    except Exception as e:
        logger.error("plan_processing_error", error=str(e), error_type=type(e).__name__)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(
        "plan_response_sent",
        chat_id=session.id,
        duration_ms=round((time.time() - start_time) * 1000, 2),
    )
    return PlanResponse(
        success=True,
        response=plan["response"],
        city=plan["city"],
        locations=plan["locations"],
        practical_tips=plan["practical_tips"],
        chat_id=session.id,
        title=session.title,
        location=session.location,
    )


@router.post("/mapit", response_model=MapItResponse, response_model_by_alias=True)
async def mapit(request: MapItRequest) -> MapItResponse:
    """Build a maps route covering every itinerary stop"""
    if not request.locations:
        raise HTTPException(status_code=400, detail="locations must not be empty")

    map_url = build_map_url(request.locations, request.travel_mode)
    logger.info("mapit_created", location_count=len(request.locations), travel_mode=request.travel_mode)
    return MapItResponse(map_url=map_url)
