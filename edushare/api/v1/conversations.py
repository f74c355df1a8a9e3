"""Conversation REST API routes - V1.

Conversations are not stored; every request derives them from the viewer's
messages.
"""

from typing import Dict
from fastapi import APIRouter, HTTPException, Depends, Query

from ...errors import MutationFailure, TransientFetchError
from ...models.conversation import (
    ConversationSummary,
    ConversationListResponse,
    ConversationThreadResponse,
    ConversationKeyResponse,
    MarkReadResponse,
)
from ...models.message import MessageResponse
from ...db import MessageRepository, UserRepository
from ...services.conversation_aggregator import (
    Conversation,
    aggregate,
    conversation_key,
    filter_conversations,
    find_conversation,
    ordered_messages,
    unread_in,
)
from ...services.message_store import RepositoryMessageStore
from .deps import get_message_repo, get_message_store, get_user_repo
from ...utils.logger import get_logger

router = APIRouter(prefix="/api/v1/conversations", tags=["Conversations"])

DEFAULT_DISPLAY_NAME = "User"

logger = get_logger("api.conversations")


def _viewer_conversations(repo: MessageRepository, viewer: str):
    try:
        return aggregate(repo.list_for_user(viewer), viewer)
    except TransientFetchError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _to_summary(conv: Conversation, names: Dict[str, str]) -> ConversationSummary:
    """Convert a derived Conversation to ConversationSummary."""
    return ConversationSummary(
        id=conv.id,
        counterpart_email=conv.counterpart_email,
        counterpart_name=names.get(conv.counterpart_email) or DEFAULT_DISPLAY_NAME,
        unread_count=conv.unread_count,
        message_count=len(conv.messages),
        last_message=MessageResponse.from_do(conv.last_message),
    )


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    viewer: str = Query(..., min_length=1, description="Identity of the viewing user"),
    q: str = Query("", description="Search counterpart name or last message"),
    repo: MessageRepository = Depends(get_message_repo),
    user_repo: UserRepository = Depends(get_user_repo)
):
    """List the viewer's conversations, most recently active first."""
    names = user_repo.display_names()
    conversations = filter_conversations(_viewer_conversations(repo, viewer), q, names.get)

    return ConversationListResponse(
        conversations=[_to_summary(c, names) for c in conversations],
        total=len(conversations),
        total_unread=sum(c.unread_count for c in conversations)
    )


@router.get("/key", response_model=ConversationKeyResponse)
async def get_conversation_key(
    a: str = Query(..., description="First participant"),
    b: str = Query(..., description="Second participant")
):
    """Conversation key for two participants (order does not matter)."""
    try:
        return ConversationKeyResponse(conversation_id=conversation_key(a, b))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{conversation_id}/messages", response_model=ConversationThreadResponse)
async def get_conversation_messages(
    conversation_id: str,
    viewer: str = Query(..., min_length=1, description="Identity of the viewing user"),
    repo: MessageRepository = Depends(get_message_repo)
):
    """Messages of a conversation, oldest first."""
    conversation = find_conversation(_viewer_conversations(repo, viewer), conversation_id)

    if not conversation:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")

    messages = ordered_messages(conversation)
    return ConversationThreadResponse(
        conversation_id=conversation.id,
        counterpart_email=conversation.counterpart_email,
        messages=[MessageResponse.from_do(m) for m in messages],
        total=len(messages)
    )


@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_conversation_read(
    conversation_id: str,
    viewer: str = Query(..., min_length=1, description="Identity of the viewing user"),
    repo: MessageRepository = Depends(get_message_repo),
    store: RepositoryMessageStore = Depends(get_message_store)
):
    """Mark every unread message addressed to the viewer as read."""
    conversation = find_conversation(_viewer_conversations(repo, viewer), conversation_id)

    if not conversation:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {conversation_id}")

    marked = 0
    failed = []
    for message in unread_in(conversation, viewer):
        try:
            await store.update(message.id, read=True)
        except MutationFailure as e:
            logger.error(f"Failed to mark message {message.id} read: {e}")
            failed.append(message.id)
            continue
        marked += 1

    result = MarkReadResponse(conversation_id=conversation_id, marked=marked, failed=failed)
    if failed:
        raise HTTPException(status_code=500, detail=result.model_dump())
    return result
