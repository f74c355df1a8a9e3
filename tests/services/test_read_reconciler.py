"""Tests for ReadReconciler."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from edushare.db.database_models.message import MessageDO
from edushare.errors import MutationFailure
from edushare.services.conversation_aggregator import aggregate, conversation_key
from edushare.services.read_reconciler import ReadReconciler


ALICE = "alice@x.com"
BOB = "bob@y.com"


def _msg(id, sender, receiver, read=False, minute=0):
    return MessageDO(
        id=id,
        conversation_id=conversation_key(sender, receiver),
        sender_email=sender,
        receiver_email=receiver,
        body=f"m{id}",
        read=read,
        created_at=datetime(2025, 1, 1, 12, minute),
    )


@pytest.fixture
def conversation():
    messages = [
        _msg(1, BOB, ALICE, minute=1),
        _msg(2, BOB, ALICE, minute=2),
        _msg(3, ALICE, BOB, minute=3),
        _msg(4, BOB, ALICE, read=True, minute=4),
    ]
    return aggregate(messages, ALICE)[0]


@pytest.fixture
def store():
    store = AsyncMock()
    store.update.side_effect = lambda message_id, read=None, flagged=None: _msg(message_id, BOB, ALICE, read=True)
    return store


class TestReadReconciler:
    """Tests for ReadReconciler."""

    class TestReconcile:
        """SUT: ReadReconciler.reconcile"""

        async def test_marks_each_unread_once(self, store, conversation):
            reconciler = ReadReconciler(store)
            issued = await reconciler.reconcile(conversation, ALICE)
            assert sorted(issued) == [1, 2]
            assert store.update.await_count == 2
            store.update.assert_any_await(1, read=True)
            store.update.assert_any_await(2, read=True)

        async def test_no_reissue_while_pending(self, store, conversation):
            """A stale snapshot still showing unread does not trigger a second update."""
            reconciler = ReadReconciler(store)
            await reconciler.reconcile(conversation, ALICE)
            assert await reconciler.reconcile(conversation, ALICE) == []
            assert store.update.await_count == 2
            assert reconciler.pending == frozenset({1, 2})

        async def test_nothing_for_sender(self, store, conversation):
            reconciler = ReadReconciler(store)
            assert await reconciler.reconcile(conversation, BOB) == []
            store.update.assert_not_awaited()

        async def test_failure_released_for_retry(self, conversation):
            store = AsyncMock()
            store.update.side_effect = MutationFailure("offline")
            reconciler = ReadReconciler(store)

            await reconciler.reconcile(conversation, ALICE)
            assert reconciler.pending == frozenset()

            await reconciler.reconcile(conversation, ALICE)
            assert store.update.await_count == 4

        async def test_unexpected_error_propagates(self, conversation):
            store = AsyncMock()
            store.update.side_effect = RuntimeError("bug")
            reconciler = ReadReconciler(store)
            with pytest.raises(RuntimeError):
                await reconciler.reconcile(conversation, ALICE)
            assert reconciler.pending == frozenset()

    class TestObserve:
        """SUT: ReadReconciler.observe"""

        async def test_releases_confirmed_ids(self, store, conversation):
            reconciler = ReadReconciler(store)
            await reconciler.reconcile(conversation, ALICE)
            reconciler.observe([_msg(1, BOB, ALICE, read=True), _msg(2, BOB, ALICE, read=False)])
            assert reconciler.pending == frozenset({2})

        def test_ignores_unknown_ids(self, store):
            reconciler = ReadReconciler(store)
            reconciler.observe([_msg(9, BOB, ALICE, read=True)])
            assert reconciler.pending == frozenset()
