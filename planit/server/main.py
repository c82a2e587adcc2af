"""PlanIT development backend."""
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import structlog

from planit import __version__
from planit.config import get_settings
from planit.logging_config import setup_logging, get_logger
from planit.server.routes import auth_router, chat_router, plan_router
from planit.server.session_manager import session_manager

settings = get_settings()

setup_logging()
logger = get_logger(__name__)

ENDPOINTS = [
    "POST /api/plan",
    "POST /api/plan/mapit",
    "GET /api/history",
    "GET /api/chat/{chat_id}",
    "DELETE /api/chat/{chat_id}",
    "POST /api/auth/login",
    "POST /api/auth/signup",
    "GET /api/auth/profile",
    "PUT /api/auth/profile",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "planit_server_startup",
        env=settings.app_env,
        debug=settings.debug,
        host=settings.host,
        port=settings.port,
        cors_origins=settings.cors_origins_list,
        planner="deterministic",
    )
    yield
    # the store is in memory; whatever it held is gone after this
    logger.info("planit_server_shutdown", **session_manager.stats())


app = FastAPI(
    title="PlanIT",
    description="In-memory backend for the PlanIT trip planner: plans, trip history, chats and accounts.",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Bind a request id and log each API call with its outcome"""
    request_id = uuid.uuid4().hex[:8]
    start_time = time.time()

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, path=request.url.path)

    chat_id = request.url.path.rsplit("/", 1)[-1] if request.url.path.startswith("/api/chat/") else None
    logger.debug(
        "api_call_started",
        method=request.method,
        chat_id=chat_id,
        authenticated=request.headers.get("authorization", "").startswith("Bearer "),
        client_host=request.client.host if request.client else None,
    )

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            "api_call_crashed",
            method=request.method,
            chat_id=chat_id,
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        raise

    log = logger.warning if response.status_code >= 400 else logger.info
    log(
        "api_call_completed",
        method=request.method,
        chat_id=chat_id,
        status_code=response.status_code,
        duration_ms=round((time.time() - start_time) * 1000, 2),
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(plan_router)
app.include_router(chat_router)
app.include_router(auth_router)


@app.get("/")
async def root():
    return {
        "service": "PlanIT",
        "version": __version__,
        "env": settings.app_env,
        "planner": "deterministic",
        "endpoints": ENDPOINTS,
    }


@app.get("/health")
async def health():
    stats = session_manager.stats()
    logger.debug("health_check", **stats)
    return {"status": "healthy", "version": __version__, **stats}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "planit.server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
