"""API v1 package."""

from .messages import router as messages_router
from .conversations import router as conversations_router
from .users import router as users_router

__all__ = ["messages_router", "conversations_router", "users_router"]
