"""Database models (Data Objects) - map to database tables."""

from .message import MessageDO
from .user import UserDO

__all__ = ["MessageDO", "UserDO"]
