from .auth import router as auth_router
from .chat import router as chat_router
from .plan import router as plan_router

__all__ = ["auth_router", "chat_router", "plan_router"]
