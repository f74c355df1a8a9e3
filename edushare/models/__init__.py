"""Pydantic models for API request/response."""

from .message import MessageResponse, CreateMessageRequest, UpdateMessageRequest
from .conversation import (
    ConversationSummary,
    ConversationListResponse,
    ConversationThreadResponse,
    ConversationKeyResponse,
    MarkReadResponse,
)
from .user import UserResponse, UpsertUserRequest

__all__ = [
    "MessageResponse",
    "CreateMessageRequest",
    "UpdateMessageRequest",
    "ConversationSummary",
    "ConversationListResponse",
    "ConversationThreadResponse",
    "ConversationKeyResponse",
    "MarkReadResponse",
    "UserResponse",
    "UpsertUserRequest",
]
