"""Message REST API routes - V1."""

from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from ...errors import MessageNotFoundError, MutationFailure, TransientFetchError
from ...models.message import MessageResponse, CreateMessageRequest, UpdateMessageRequest
from ...db import MessageRepository
from ...services.conversation_aggregator import conversation_key
from ...services.message_store import RepositoryMessageStore
from .deps import get_message_repo, get_message_store

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


@router.get("", response_model=List[MessageResponse])
async def list_messages(
    sort: Optional[str] = Query(None, description="created_at or -created_at"),
    store: RepositoryMessageStore = Depends(get_message_store)
):
    """List all messages, optionally sorted by creation time."""
    try:
        messages = await store.list(sort)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransientFetchError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return [MessageResponse.from_do(m) for m in messages]


@router.post("", response_model=MessageResponse, status_code=201)
async def create_message(
    request: CreateMessageRequest,
    store: RepositoryMessageStore = Depends(get_message_store)
):
    """Append a message. The conversation key is derived from the participants."""
    try:
        expected = conversation_key(request.sender_email, request.receiver_email)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if request.conversation_id and request.conversation_id != expected:
        raise HTTPException(
            status_code=400,
            detail=f"conversation_id {request.conversation_id} does not match participants (expected {expected})"
        )

    try:
        message = await store.create(
            conversation_id=expected,
            sender_email=request.sender_email,
            receiver_email=request.receiver_email,
            body=request.body,
            item_id=request.item_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except MutationFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    return MessageResponse.from_do(message)


@router.get("/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: int,
    repo: MessageRepository = Depends(get_message_repo)
):
    """Get a single message."""
    message = repo.get(message_id)

    if not message:
        raise HTTPException(status_code=404, detail=f"Message not found: {message_id}")

    return MessageResponse.from_do(message)


@router.patch("/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: int,
    request: UpdateMessageRequest,
    store: RepositoryMessageStore = Depends(get_message_store)
):
    """Set read and/or flagged. Repeating the same patch is harmless."""
    try:
        message = await store.update(message_id, read=request.read, flagged=request.flagged)
    except MessageNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MutationFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    return MessageResponse.from_do(message)
