"""Tests for MessagesView."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

from edushare.db.database_models.message import MessageDO
from edushare.db.repositories.message import MessageRepository
from edushare.errors import MutationFailure, TransientFetchError
from edushare.services.conversation_aggregator import conversation_key
from edushare.services.message_store import HttpMessageStore, RepositoryMessageStore
from edushare.services.messages_view import MessagesView


ALICE = "alice@x.com"
BOB = "bob@y.com"
CAROL = "carol@z.com"

T0 = datetime(2025, 1, 1, 12, 0, 0)


def _msg(id, sender, receiver, minutes, body="hi", read=False):
    return MessageDO(
        id=id,
        conversation_id=conversation_key(sender, receiver),
        sender_email=sender,
        receiver_email=receiver,
        body=body,
        read=read,
        created_at=T0 + timedelta(minutes=minutes),
    )


@pytest.fixture
def repo(db_conn):
    """Provide a MessageRepository seeded with the example scenario."""
    repo = MessageRepository(db_conn.conn)
    repo.add(_msg(None, BOB, ALICE, 1, body="Hi"))
    repo.add(_msg(None, ALICE, BOB, 2, body="Hello", read=True))
    repo.add(_msg(None, CAROL, ALICE, 3, body="Hey"))
    return repo


@pytest.fixture
def view(repo):
    """Alice's Messages page over the local store."""
    names = {BOB: "Bob Builder", CAROL: "Carol Singer"}
    return MessagesView(RepositoryMessageStore(repo), ALICE, resolve_display_name=names.get)


class TestMessagesView:
    """Tests for MessagesView."""

    def test_requires_viewer(self):
        with pytest.raises(ValueError):
            MessagesView(AsyncMock(), "")

    def test_from_settings(self):
        from edushare.config import Settings
        settings = Settings(store_base_url="http://edushare.local", poll_interval=2.5)
        view = MessagesView.from_settings(settings, ALICE, item_id="item-1")
        assert view.poll_interval == 2.5
        assert view.item_id == "item-1"
        assert view.store.base_url == "http://edushare.local"

    class TestRefresh:
        """SUT: MessagesView.refresh"""

        async def test_builds_conversations(self, view):
            assert await view.refresh() is True
            conversations = view.conversations()
            assert [c.counterpart_email for c in conversations] == [CAROL, BOB]
            assert [c.unread_count for c in conversations] == [1, 1]

        async def test_failure_keeps_stale_data(self):
            store = AsyncMock()
            store.list.side_effect = [[_msg(1, BOB, ALICE, 1)], TransientFetchError("offline")]
            view = MessagesView(store, ALICE)

            assert await view.refresh() is True
            assert await view.refresh() is False
            assert isinstance(view.last_error, TransientFetchError)
            assert [c.counterpart_email for c in view.conversations()] == [BOB]

        async def test_error_cleared_on_success(self):
            store = AsyncMock()
            store.list.side_effect = [TransientFetchError("offline"), []]
            view = MessagesView(store, ALICE)
            await view.refresh()
            await view.refresh()
            assert view.last_error is None

        async def test_garbled_response_keeps_stale_data(self):
            """A non-JSON body from the remote store counts as a failed refresh."""
            first = [{
                "id": 1,
                "conversation_id": conversation_key(ALICE, BOB),
                "sender_email": BOB,
                "receiver_email": ALICE,
                "body": "Hi",
                "read": False,
                "created_at": "2025-01-01T12:01:00",
            }]
            responses = [httpx.Response(200, json=first), httpx.Response(200, text="<html>gateway</html>")]
            transport = httpx.MockTransport(lambda request: responses.pop(0))
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                view = MessagesView(HttpMessageStore(client=client), ALICE)
                assert await view.refresh() is True
                assert await view.refresh() is False
            assert isinstance(view.last_error, TransientFetchError)
            assert [c.counterpart_email for c in view.conversations()] == [BOB]

    class TestConversations:
        """SUT: MessagesView.conversations"""

        async def test_search_by_name(self, view):
            await view.refresh()
            assert [c.counterpart_email for c in view.conversations("singer")] == [CAROL]

        async def test_search_by_body(self, view):
            await view.refresh()
            assert [c.counterpart_email for c in view.conversations("HELLO")] == [BOB]

    class TestSelect:
        """SUT: MessagesView.select"""

        async def test_returns_thread_oldest_first(self, view):
            await view.refresh()
            thread = await view.select(conversation_key(ALICE, BOB))
            assert [m.body for m in thread] == ["Hi", "Hello"]

        async def test_marks_unread_read(self, view, repo):
            await view.refresh()
            await view.select(conversation_key(ALICE, BOB))

            assert repo.count_unread(ALICE) == 1  # Carol's message remains
            assert len(view.reconciler.pending) == 1

            await view.refresh()
            bob = [c for c in view.conversations() if c.counterpart_email == BOB][0]
            assert bob.unread_count == 0
            assert view.reconciler.pending == frozenset()

        async def test_refresh_does_not_reissue(self):
            """Polling a stale snapshot while a mark-read is pending issues nothing new."""
            store = AsyncMock()
            store.list.return_value = [_msg(1, BOB, ALICE, 1)]
            store.update.return_value = _msg(1, BOB, ALICE, 1, read=True)
            view = MessagesView(store, ALICE)

            await view.refresh()
            await view.select(conversation_key(ALICE, BOB))
            await view.refresh()
            await view.refresh()
            assert store.update.await_count == 1

        async def test_unknown_conversation(self, view):
            await view.refresh()
            assert await view.select("nobody_nowhere") == []
            assert view.current_conversation is None

    class TestSend:
        """SUT: MessagesView.send"""

        async def test_send_clears_composer_and_refreshes(self, view):
            await view.refresh()
            await view.select(conversation_key(ALICE, CAROL))
            view.composer = "Thanks, I'll pick it up tomorrow"

            sent = await view.send()

            assert sent.receiver_email == CAROL
            assert sent.conversation_id == conversation_key(ALICE, CAROL)
            assert view.composer == ""
            assert view.current_messages[-1].body == "Thanks, I'll pick it up tomorrow"
            assert view.conversations()[0].counterpart_email == CAROL

        async def test_explicit_body_keeps_draft(self, view):
            """Sending an explicit body does not discard what is typed in the composer."""
            await view.refresh()
            await view.select(conversation_key(ALICE, BOB))
            view.composer = "half-written reply"

            sent = await view.send("Quick yes")

            assert sent.body == "Quick yes"
            assert view.composer == "half-written reply"

        async def test_failure_keeps_composer(self):
            store = AsyncMock()
            store.list.return_value = [_msg(1, BOB, ALICE, 1)]
            store.create.side_effect = MutationFailure("rejected")
            view = MessagesView(store, ALICE)
            await view.refresh()
            await view.select(conversation_key(ALICE, BOB))
            view.composer = "retry me"

            with pytest.raises(MutationFailure):
                await view.send()
            assert view.composer == "retry me"

        async def test_blank_rejected(self, view):
            await view.refresh()
            await view.select(conversation_key(ALICE, BOB))
            view.composer = "   "
            with pytest.raises(ValueError):
                await view.send()

        async def test_requires_selection(self, view):
            await view.refresh()
            with pytest.raises(ValueError):
                await view.send("hello")

        async def test_new_conversation_from_item(self):
            """Contacting a donor for the first time derives the key and recipient."""
            store = AsyncMock()
            store.list.return_value = []
            store.create.return_value = _msg(10, ALICE, "donor@x.org", 5, body="Interested")
            view = MessagesView(store, ALICE)
            await view.refresh()

            await view.open_with("donor@x.org", item_id="item-42")
            assert view.counterpart_email == "donor@x.org"
            await view.send("Interested")

            store.create.assert_awaited_once_with(
                conversation_id=conversation_key(ALICE, "donor@x.org"),
                sender_email=ALICE,
                receiver_email="donor@x.org",
                body="Interested",
                item_id="item-42",
            )

    class TestPolling:
        """SUT: MessagesView.polling"""

        async def test_polls_while_active(self):
            store = AsyncMock()
            store.list.return_value = [_msg(1, BOB, ALICE, 1)]
            view = MessagesView(store, ALICE, poll_interval=0.01)

            async with view.polling() as handle:
                await asyncio.sleep(0.05)
                assert handle.active is True
            assert handle.active is False
            assert store.list.await_count >= 2
            assert len(view.conversations()) == 1

        async def test_start_polling_handle(self):
            store = AsyncMock()
            store.list.return_value = []
            view = MessagesView(store, ALICE, poll_interval=0.01)
            handle = view.start_polling()
            await asyncio.sleep(0.03)
            await handle.stop()
            assert store.list.await_count >= 1
