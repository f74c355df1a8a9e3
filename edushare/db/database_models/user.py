"""User database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...utils.timeutil import utcnow


@dataclass
class UserDO:
    """User data object - maps to users table."""

    email: str
    full_name: Optional[str] = None
    verified: bool = False
    created_at: datetime = field(default_factory=utcnow)
