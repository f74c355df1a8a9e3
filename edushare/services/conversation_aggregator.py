"""Derive two-party conversations from the flat message log.

Everything here is a pure function of its inputs. Conversations are rebuilt
from scratch on every refresh and are never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from ..db.database_models.message import MessageDO
from ..utils.timeutil import as_utc


KEY_DELIMITER = "_"

# Messages without a timestamp sort before everything else
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

DisplayNameResolver = Callable[[str], Optional[str]]


@dataclass
class Conversation:
    """A two-party thread as seen by one viewer."""

    id: str
    counterpart_email: Optional[str]
    last_message: MessageDO
    messages: List[MessageDO] = field(default_factory=list)
    unread_count: int = 0


def conversation_key(a: str, b: str) -> str:
    """
    Key shared by both participants of a thread.

    The two identities are sorted and joined, so either party can compute
    it before the first message exists.

    Raises:
        ValueError: if either identity is blank or contains the delimiter
    """
    if not a or not b or not a.strip() or not b.strip():
        raise ValueError("Both participant identities are required")
    for identity in (a, b):
        if KEY_DELIMITER in identity:
            raise ValueError(f"Identity may not contain {KEY_DELIMITER!r}: {identity}")
    return KEY_DELIMITER.join(sorted([a, b]))


def counterpart_from_key(conversation_id: str, viewer_email: str) -> Optional[str]:
    """Recover the other participant from a conversation key, if the viewer is in it."""
    if not conversation_id or not viewer_email:
        return None
    prefix = viewer_email + KEY_DELIMITER
    suffix = KEY_DELIMITER + viewer_email
    if conversation_id.startswith(prefix) and len(conversation_id) > len(prefix):
        return conversation_id[len(prefix):]
    if conversation_id.endswith(suffix) and len(conversation_id) > len(suffix):
        return conversation_id[:-len(suffix)]
    return None


def _created(message: MessageDO) -> datetime:
    if not isinstance(message.created_at, datetime):
        return _OLDEST
    return as_utc(message.created_at)


def _partition_key(message: MessageDO) -> str:
    if message.conversation_id:
        return message.conversation_id
    try:
        return conversation_key(message.sender_email, message.receiver_email)
    except ValueError:
        return ""


def _counterpart(message: MessageDO, viewer_email: str) -> Optional[str]:
    if message.sender_email == viewer_email:
        return message.receiver_email
    return message.sender_email


def _is_unread_for(message: MessageDO, viewer_email: str) -> bool:
    return message.receiver_email == viewer_email and not message.read


def aggregate(messages: Iterable[MessageDO], viewer_email: str) -> List[Conversation]:
    """
    Group the viewer's messages into conversations, most recent first.

    Messages that do not involve the viewer are dropped. Within a
    conversation the latest message (earliest in input order on a tie)
    decides the counterpart, so corrupted threads with more than two
    participants still resolve to one.

    Args:
        messages: Message snapshot in any order
        viewer_email: Identity the view is built for

    Returns:
        One Conversation per conversation id
    """
    grouped: Dict[str, Conversation] = {}

    for message in messages:
        if not message.involves(viewer_email):
            continue

        key = _partition_key(message)
        conversation = grouped.get(key)
        if conversation is None:
            conversation = Conversation(id=key, counterpart_email=None, last_message=message)
            grouped[key] = conversation

        conversation.messages.append(message)
        if _is_unread_for(message, viewer_email):
            conversation.unread_count += 1
        if _created(message) > _created(conversation.last_message):
            conversation.last_message = message

    for conversation in grouped.values():
        conversation.counterpart_email = _counterpart(conversation.last_message, viewer_email)

    # sorted() is stable with reverse=True: ties keep first-appearance order
    return sorted(grouped.values(), key=lambda c: _created(c.last_message), reverse=True)


def ordered_messages(conversation: Conversation) -> List[MessageDO]:
    """Messages of a conversation oldest first, for rendering the thread."""
    return sorted(conversation.messages, key=_created)


def unread_in(conversation: Conversation, viewer_email: str) -> List[MessageDO]:
    """Messages addressed to the viewer that are still unread."""
    return [m for m in conversation.messages if _is_unread_for(m, viewer_email)]


def _resolve(resolve_display_name: Optional[DisplayNameResolver], email: Optional[str]) -> str:
    if resolve_display_name is None or not email:
        return ""
    try:
        return resolve_display_name(email) or ""
    except LookupError:
        return ""


def filter_conversations(
    conversations: List[Conversation],
    query: Optional[str],
    resolve_display_name: Optional[DisplayNameResolver] = None,
) -> List[Conversation]:
    """
    Case-insensitive search over counterpart name and last message body.

    A blank query returns the input unchanged.
    """
    if not query or not query.strip():
        return conversations

    needle = query.lower()
    return [
        c for c in conversations
        if needle in _resolve(resolve_display_name, c.counterpart_email).lower()
        or needle in (c.last_message.body or "").lower()
    ]


def find_conversation(conversations: Iterable[Conversation], conversation_id: Optional[str]) -> Optional[Conversation]:
    """Conversation with the given id, or None."""
    if not conversation_id:
        return None
    for conversation in conversations:
        if conversation.id == conversation_id:
            return conversation
    return None
