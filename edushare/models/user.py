"""User API models."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Response model for a directory entry."""

    email: str
    full_name: Optional[str] = None
    verified: bool = False
    created_at: datetime


class UpsertUserRequest(BaseModel):
    """Request model for creating or updating a user."""

    email: str = Field(description="User identity", min_length=1)
    full_name: Optional[str] = Field(None, description="Display name", max_length=200)
    verified: bool = Field(default=False, description="Verified member badge")
