"""Tests for Poller and PollHandle."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from edushare.services.poller import Poller


class TestPoller:
    """Tests for the polling subscription."""

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            Poller(AsyncMock(), interval=0)

    async def test_first_call_is_immediate(self):
        callback = AsyncMock()
        handle = Poller(callback, interval=60).start()
        await asyncio.sleep(0.01)
        assert callback.await_count == 1
        await handle.stop()

    async def test_repeats_on_interval(self):
        callback = AsyncMock()
        handle = Poller(callback, interval=0.01).start()
        await asyncio.sleep(0.1)
        await handle.stop()
        assert callback.await_count >= 3

    async def test_stop_ends_polling(self):
        callback = AsyncMock()
        handle = Poller(callback, interval=0.01).start()
        await asyncio.sleep(0.03)
        await handle.stop()
        assert handle.active is False
        count = callback.await_count
        await asyncio.sleep(0.05)
        assert callback.await_count == count

    async def test_stop_twice(self):
        handle = Poller(AsyncMock(), interval=0.01).start()
        await handle.stop()
        await handle.stop()
        assert handle.active is False

    async def test_callback_errors_do_not_stop_loop(self):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        handle = Poller(flaky, interval=0.01).start()
        await asyncio.sleep(0.08)
        assert handle.active is True
        await handle.stop()
        assert len(calls) >= 2

    class TestSubscribe:
        """SUT: Poller.subscribe"""

        async def test_active_inside_stopped_after(self):
            callback = AsyncMock()
            async with Poller(callback, interval=0.01).subscribe() as handle:
                await asyncio.sleep(0.02)
                assert handle.active is True
            assert handle.active is False
            assert callback.await_count >= 1

        async def test_stopped_on_exception(self):
            poller = Poller(AsyncMock(), interval=0.01)
            with pytest.raises(RuntimeError):
                async with poller.subscribe() as handle:
                    raise RuntimeError("view closed")
            assert handle.active is False
