"""Database package - connection, models, and repositories."""

from .connection import DatabaseConnection
from .repositories.message import MessageRepository
from .repositories.user import UserRepository

__all__ = [
    "DatabaseConnection",
    "MessageRepository",
    "UserRepository",
]
