"""Messages page state: conversation list, open thread, composer."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from ..db.database_models.message import MessageDO
from ..errors import MutationFailure, TransientFetchError
from .conversation_aggregator import (
    Conversation,
    DisplayNameResolver,
    aggregate,
    conversation_key,
    counterpart_from_key,
    filter_conversations,
    find_conversation,
    ordered_messages,
)
from .message_store import HttpMessageStore, MessageStore
from .poller import PollHandle, Poller
from .query_cache import QueryCache, query_key
from .read_reconciler import ReadReconciler
from ..utils.logger import get_logger

logger = get_logger("messages_view")

MESSAGES_SORT = "-created_at"


class MessagesView:
    """
    Client-side model of the Messages page for one viewer.

    Every refresh re-derives conversations from the latest message snapshot.
    A failed refresh keeps the previous conversations on display.
    """

    def __init__(
        self,
        store: MessageStore,
        viewer_email: str,
        resolve_display_name: Optional[DisplayNameResolver] = None,
        poll_interval: float = 5.0,
        cache: Optional[QueryCache] = None,
        selected_conversation: Optional[str] = None,
        item_id: Optional[str] = None,
    ):
        if not viewer_email:
            raise ValueError("viewer_email is required")
        self.store = store
        self.viewer_email = viewer_email
        self.resolve_display_name = resolve_display_name
        self.poll_interval = poll_interval
        self.cache = cache if cache is not None else QueryCache()
        self.reconciler = ReadReconciler(store)

        self.selected_conversation = selected_conversation
        self.item_id = item_id
        self.composer = ""
        self.last_error: Optional[Exception] = None

        self._conversations: List[Conversation] = []
        self._messages_key = query_key("messages", sort=MESSAGES_SORT)

    @classmethod
    def from_settings(cls, settings, viewer_email: str, **kwargs) -> "MessagesView":
        """Messages page backed by the remote store, polling at ``poll_interval``."""
        return cls(
            HttpMessageStore.from_settings(settings),
            viewer_email,
            poll_interval=settings.poll_interval,
            **kwargs,
        )

    async def _fetch_messages(self) -> List[MessageDO]:
        return await self.store.list(MESSAGES_SORT)

    def _apply(self, messages: List[MessageDO]) -> None:
        self.reconciler.observe(messages)
        self._conversations = aggregate(messages, self.viewer_email)

    async def refresh(self) -> bool:
        """
        Re-fetch messages and rebuild conversations.

        Returns:
            True on success, False if the fetch failed and stale data remains
        """
        try:
            messages = await self.cache.fetch(self._messages_key, self._fetch_messages)
        except TransientFetchError as e:
            self.last_error = e
            logger.warning(f"Refresh failed for {self.viewer_email}, keeping previous data: {e}")
            return False

        self.last_error = None
        self._apply(messages)
        await self._reconcile_selected()
        return True

    async def _invalidate_and_refetch(self) -> None:
        self.cache.invalidate(self._messages_key)
        await self.refresh()

    def conversations(self, query: str = "") -> List[Conversation]:
        """Conversations most recent first, filtered by ``query``."""
        return filter_conversations(self._conversations, query, self.resolve_display_name)

    @property
    def current_conversation(self) -> Optional[Conversation]:
        return find_conversation(self._conversations, self.selected_conversation)

    @property
    def current_messages(self) -> List[MessageDO]:
        conversation = self.current_conversation
        return ordered_messages(conversation) if conversation else []

    @property
    def counterpart_email(self) -> Optional[str]:
        """Other participant of the selected conversation, even before its first message."""
        conversation = self.current_conversation
        if conversation and conversation.counterpart_email:
            return conversation.counterpart_email
        return counterpart_from_key(self.selected_conversation, self.viewer_email)

    async def _reconcile_selected(self) -> List[int]:
        conversation = self.current_conversation
        if conversation is None:
            return []
        issued = await self.reconciler.reconcile(conversation, self.viewer_email)
        if issued:
            # the next poll picks up the new read state
            self.cache.invalidate(self._messages_key)
        return issued

    async def select(self, conversation_id: str) -> List[MessageDO]:
        """Open a conversation, mark its unread messages read, return the thread."""
        self.selected_conversation = conversation_id
        await self._reconcile_selected()
        return self.current_messages

    async def open_with(self, counterpart_email: str, item_id: Optional[str] = None) -> List[MessageDO]:
        """Open the conversation with ``counterpart_email``, creating the key if needed."""
        if item_id is not None:
            self.item_id = item_id
        return await self.select(conversation_key(self.viewer_email, counterpart_email))

    async def send(self, body: Optional[str] = None) -> MessageDO:
        """
        Send ``body`` (or the composer text) to the selected conversation.

        When sending the composer text, it is cleared only once the store
        accepted the message. An explicit ``body`` leaves the composer alone.

        Raises:
            ValueError: empty text, or no conversation / counterpart selected
            MutationFailure: the store rejected the message
        """
        text = self.composer if body is None else body
        if not text or not text.strip():
            raise ValueError("Message body cannot be empty")
        if not self.selected_conversation:
            raise ValueError("No conversation selected")
        receiver = self.counterpart_email
        if not receiver:
            raise ValueError(f"Cannot determine recipient for {self.selected_conversation}")

        try:
            created = await self.store.create(
                conversation_id=self.selected_conversation,
                sender_email=self.viewer_email,
                receiver_email=receiver,
                body=text,
                item_id=self.item_id,
            )
        except MutationFailure as e:
            self.last_error = e
            logger.warning(f"Send failed in {self.selected_conversation}: {e}")
            raise

        if body is None:
            self.composer = ""
        await self._invalidate_and_refetch()
        return created

    def start_polling(self) -> PollHandle:
        """Start polling; the caller must stop the returned handle."""
        return Poller(self.refresh, self.poll_interval, name=f"messages:{self.viewer_email}").start()

    @asynccontextmanager
    async def polling(self) -> AsyncIterator[PollHandle]:
        """Poll while the view is active."""
        poller = Poller(self.refresh, self.poll_interval, name=f"messages:{self.viewer_email}")
        async with poller.subscribe() as handle:
            yield handle
