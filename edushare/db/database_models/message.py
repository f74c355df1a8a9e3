"""Message database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ...utils.timeutil import parse_timestamp, utcnow


_TRUE_STRINGS = {"true", "1", "yes", "y", "t"}


def _as_bool(value: Any) -> bool:
    """Loose boolean: ``"false"``, ``"0"`` and empty strings are False."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


@dataclass
class MessageDO:
    """Message data object - maps to messages table.

    ``read`` and ``flagged`` default to False. ``id`` and ``created_at`` are
    assigned by the store; records built from loose input may lack them.
    """

    conversation_id: Optional[str]
    sender_email: Optional[str]
    receiver_email: Optional[str]
    body: str = ""
    item_id: Optional[str] = None
    read: bool = False
    flagged: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = field(default_factory=utcnow)

    def involves(self, email: str) -> bool:
        """Whether ``email`` is the sender or the receiver."""
        return email is not None and email in (self.sender_email, self.receiver_email)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "MessageDO":
        """Build from a loosely typed record (JSON payload, fixture).

        Missing fields are treated as absent, never as an error.
        """
        raw_id = record.get("id")
        try:
            message_id = int(raw_id) if raw_id is not None else None
        except (TypeError, ValueError):
            message_id = None

        return cls(
            id=message_id,
            conversation_id=record.get("conversation_id") or None,
            sender_email=record.get("sender_email") or None,
            receiver_email=record.get("receiver_email") or None,
            body=record.get("body") or "",
            item_id=record.get("item_id") or None,
            read=_as_bool(record.get("read", False)),
            flagged=_as_bool(record.get("flagged", False)),
            created_at=parse_timestamp(record.get("created_at")),
        )
