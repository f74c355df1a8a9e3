"""Repository layer for data access."""

from .message import MessageRepository
from .user import UserRepository

__all__ = ["MessageRepository", "UserRepository"]
