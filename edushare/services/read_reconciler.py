"""Mark-read side effect for an opened conversation."""

import asyncio
from typing import FrozenSet, Iterable, List, Set

from ..db.database_models.message import MessageDO
from ..errors import MutationFailure
from .conversation_aggregator import Conversation, unread_in
from .message_store import MessageStore
from ..utils.logger import get_logger

logger = get_logger("read_reconciler")


class ReadReconciler:
    """
    Issues at most one outstanding mark-read per message id.

    An id stays pending from the moment its update is issued until a later
    snapshot shows the message as read. Failed updates are released so the
    next reconcile retries them.
    """

    def __init__(self, store: MessageStore):
        self._store = store
        self._pending: Set[int] = set()

    @property
    def pending(self) -> FrozenSet[int]:
        return frozenset(self._pending)

    def observe(self, messages: Iterable[MessageDO]) -> None:
        """Release pending ids whose messages a fresh snapshot shows as read."""
        for message in messages:
            if message.read and message.id in self._pending:
                self._pending.discard(message.id)

    async def reconcile(self, conversation: Conversation, viewer_email: str) -> List[int]:
        """
        Mark the viewer's unread messages in ``conversation`` as read.

        Returns:
            Ids for which an update was issued by this call
        """
        to_mark = [
            m.id for m in unread_in(conversation, viewer_email)
            if m.id is not None and m.id not in self._pending
        ]
        if not to_mark:
            return []

        self._pending.update(to_mark)
        results = await asyncio.gather(
            *(self._store.update(message_id, read=True) for message_id in to_mark),
            return_exceptions=True,
        )

        unexpected = None
        for message_id, result in zip(to_mark, results):
            if not isinstance(result, BaseException):
                continue
            self._pending.discard(message_id)
            if isinstance(result, MutationFailure):
                logger.warning(f"Mark-read failed for message {message_id}: {result}")
            elif unexpected is None:
                unexpected = result

        if unexpected is not None:
            raise unexpected

        logger.debug(f"Issued mark-read for {len(to_mark)} message(s) in {conversation.id}")
        return to_mark
