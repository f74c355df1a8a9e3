"""Shared dependencies for v1 routers."""

from fastapi import HTTPException

from ...db import DatabaseConnection, MessageRepository, UserRepository
from ...services.message_store import RepositoryMessageStore

# Database connection (set by main.py)
db_conn: DatabaseConnection = None


def get_db() -> DatabaseConnection:
    """Dependency to get the database connection."""
    if db_conn is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return db_conn


def get_message_repo() -> MessageRepository:
    """Dependency to get message repository."""
    return MessageRepository(get_db().conn)


def get_user_repo() -> UserRepository:
    """Dependency to get user repository."""
    return UserRepository(get_db().conn)


def get_message_store() -> RepositoryMessageStore:
    """Dependency to get the message store used by the routes."""
    return RepositoryMessageStore(get_message_repo())
