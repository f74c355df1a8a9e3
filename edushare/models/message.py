"""Message API models."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..db.database_models.message import MessageDO


class MessageResponse(BaseModel):
    """Response model for a single message."""

    id: int = Field(description="Message ID")
    conversation_id: str = Field(description="Conversation key shared by both participants")
    sender_email: str = Field(description="Sender identity")
    receiver_email: str = Field(description="Receiver identity")
    body: str = Field(description="Message text")
    item_id: Optional[str] = Field(None, description="Marketplace item the thread is about")
    read: bool = Field(default=False, description="Whether the receiver has seen it")
    flagged: bool = Field(default=False, description="Moderation flag")
    created_at: datetime = Field(description="Creation timestamp (UTC)")

    @classmethod
    def from_do(cls, message: MessageDO) -> "MessageResponse":
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            sender_email=message.sender_email,
            receiver_email=message.receiver_email,
            body=message.body,
            item_id=message.item_id,
            read=message.read,
            flagged=message.flagged,
            created_at=message.created_at,
        )


class CreateMessageRequest(BaseModel):
    """Request model for sending a message."""

    sender_email: str = Field(description="Sender identity", min_length=1)
    receiver_email: str = Field(description="Receiver identity", min_length=1)
    body: str = Field(description="Message text", min_length=1)
    conversation_id: Optional[str] = Field(None, description="Conversation key; derived when omitted")
    item_id: Optional[str] = Field(None, description="Marketplace item reference")

    @field_validator('body')
    @classmethod
    def validate_body(cls, v):
        """Reject whitespace-only messages."""
        if not v.strip():
            raise ValueError("Message body cannot be empty")
        return v


class UpdateMessageRequest(BaseModel):
    """Partial update of a message's mutable flags."""

    read: Optional[bool] = Field(None, description="New read state")
    flagged: Optional[bool] = Field(None, description="New moderation flag")
