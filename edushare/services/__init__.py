"""Services package."""

from .conversation_aggregator import (
    Conversation,
    aggregate,
    conversation_key,
    counterpart_from_key,
    filter_conversations,
    find_conversation,
    ordered_messages,
    unread_in,
)
from .message_store import HttpMessageStore, MessageStore, RepositoryMessageStore
from .messages_view import MessagesView
from .poller import PollHandle, Poller
from .query_cache import QueryCache, query_key
from .read_reconciler import ReadReconciler

__all__ = [
    "Conversation",
    "aggregate",
    "conversation_key",
    "counterpart_from_key",
    "filter_conversations",
    "find_conversation",
    "ordered_messages",
    "unread_in",
    "HttpMessageStore",
    "MessageStore",
    "RepositoryMessageStore",
    "MessagesView",
    "PollHandle",
    "Poller",
    "QueryCache",
    "query_key",
    "ReadReconciler",
]
