"""Conversation API models."""

from typing import List, Optional
from pydantic import BaseModel, Field

from .message import MessageResponse


class ConversationSummary(BaseModel):
    """One entry of a viewer's conversation list."""

    id: str = Field(description="Conversation key")
    counterpart_email: Optional[str] = Field(None, description="The other participant")
    counterpart_name: str = Field(description="Display name of the other participant")
    unread_count: int = Field(description="Unread messages addressed to the viewer")
    message_count: int = Field(description="Messages in the conversation")
    last_message: MessageResponse = Field(description="Most recent message")


class ConversationListResponse(BaseModel):
    """Response model for listing conversations."""

    conversations: List[ConversationSummary] = Field(description="Conversations, most recent first")
    total: int = Field(description="Number of conversations returned")
    total_unread: int = Field(description="Unread messages across returned conversations")


class ConversationThreadResponse(BaseModel):
    """Messages of one conversation, oldest first."""

    conversation_id: str = Field(description="Conversation key")
    counterpart_email: Optional[str] = Field(None, description="The other participant")
    messages: List[MessageResponse] = Field(description="Messages, oldest first")
    total: int = Field(description="Number of messages")


class MarkReadResponse(BaseModel):
    """Result of marking a conversation read."""

    conversation_id: str = Field(description="Conversation key")
    marked: int = Field(description="Messages switched to read")
    failed: List[int] = Field(default_factory=list, description="Ids that could not be marked read")


class ConversationKeyResponse(BaseModel):
    """Conversation key for a pair of participants."""

    conversation_id: str = Field(description="Conversation key")
