"""Message store contract and its implementations.

``MessageStore`` is what the conversation view talks to. It is satisfied by
``RepositoryMessageStore`` (local DuckDB) and by ``HttpMessageStore`` (the
REST API of another EduShare instance).
"""

from typing import Any, Dict, List, Optional, Protocol

import httpx

from ..db.database_models.message import MessageDO
from ..db.repositories.message import MessageRepository, SORT_ORDERS
from ..errors import MessageNotFoundError, MutationFailure, TransientFetchError
from ..utils.logger import get_logger

logger = get_logger("message_store")


class MessageStore(Protocol):
    """Append-only message store with partial updates of read/flagged."""

    async def list(self, sort: Optional[str] = None) -> List[MessageDO]:
        ...

    async def create(
        self,
        conversation_id: str,
        sender_email: str,
        receiver_email: str,
        body: str,
        item_id: Optional[str] = None,
    ) -> MessageDO:
        ...

    async def update(
        self,
        message_id: int,
        read: Optional[bool] = None,
        flagged: Optional[bool] = None,
    ) -> MessageDO:
        ...


def _check_body(body: str) -> str:
    if body is None or not body.strip():
        raise ValueError("Message body cannot be empty")
    return body


def _message_from_response(response: httpx.Response) -> MessageDO:
    record = response.json()
    if not isinstance(record, dict):
        raise ValueError(f"expected a message object, got {type(record).__name__}")
    return MessageDO.from_record(record)


class RepositoryMessageStore:
    """MessageStore backed by a local MessageRepository."""

    def __init__(self, repository: MessageRepository):
        self._repo = repository

    async def list(self, sort: Optional[str] = None) -> List[MessageDO]:
        return self._repo.list_all(sort)

    async def create(
        self,
        conversation_id: str,
        sender_email: str,
        receiver_email: str,
        body: str,
        item_id: Optional[str] = None,
    ) -> MessageDO:
        message = MessageDO(
            conversation_id=conversation_id,
            sender_email=sender_email,
            receiver_email=receiver_email,
            body=_check_body(body),
            item_id=item_id,
        )
        stored = self._repo.add(message)
        if stored is None:
            raise MutationFailure(f"Failed to store message in {conversation_id}")
        return stored

    async def update(
        self,
        message_id: int,
        read: Optional[bool] = None,
        flagged: Optional[bool] = None,
    ) -> MessageDO:
        updated = self._repo.update(message_id, read=read, flagged=flagged)
        if updated is not None:
            return updated
        if self._repo.get(message_id) is None:
            raise MessageNotFoundError(message_id)
        raise MutationFailure(f"Failed to update message {message_id}")


class HttpMessageStore:
    """MessageStore speaking to the ``/api/v1/messages`` endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            base_url: Root URL of the EduShare API
            timeout: Request timeout in seconds
            client: Pre-built client (takes precedence over base_url)
        """
        if client is None and not base_url:
            raise ValueError("Either base_url or client is required")
        self.base_url = base_url
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings) -> "HttpMessageStore":
        """Build a store from ``store_base_url`` and ``request_timeout``."""
        if not settings.store_base_url:
            raise ValueError("store_base_url is not configured")
        return cls(base_url=settings.store_base_url, timeout=settings.request_timeout)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this store created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def list(self, sort: Optional[str] = None) -> List[MessageDO]:
        if sort not in SORT_ORDERS:
            raise ValueError(f"Unsupported sort: {sort}")
        params = {"sort": sort} if sort else None
        try:
            client = await self._get_client()
            response = await client.get("/api/v1/messages", params=params)
            response.raise_for_status()
            records = response.json()
            if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
                raise ValueError(f"expected a list of messages, got {type(records).__name__}")
            return [MessageDO.from_record(record) for record in records]
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Message list request failed: {e}")
            raise TransientFetchError(f"Message list request failed: {e}") from e

    async def create(
        self,
        conversation_id: str,
        sender_email: str,
        receiver_email: str,
        body: str,
        item_id: Optional[str] = None,
    ) -> MessageDO:
        payload: Dict[str, Any] = {
            "conversation_id": conversation_id,
            "sender_email": sender_email,
            "receiver_email": receiver_email,
            "body": _check_body(body),
            "item_id": item_id,
        }
        try:
            client = await self._get_client()
            response = await client.post("/api/v1/messages", json=payload)
            response.raise_for_status()
            return _message_from_response(response)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Message create request failed: {e}")
            raise MutationFailure(f"Message create request failed: {e}") from e

    async def update(
        self,
        message_id: int,
        read: Optional[bool] = None,
        flagged: Optional[bool] = None,
    ) -> MessageDO:
        patch = {k: v for k, v in (("read", read), ("flagged", flagged)) if v is not None}
        try:
            client = await self._get_client()
            response = await client.patch(f"/api/v1/messages/{message_id}", json=patch)
            if response.status_code == 404:
                raise MessageNotFoundError(message_id)
            response.raise_for_status()
            return _message_from_response(response)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Message update request failed for {message_id}: {e}")
            raise MutationFailure(f"Message update request failed: {e}") from e
