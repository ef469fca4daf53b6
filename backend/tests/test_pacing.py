"""
Tests for TypingSimulator paced delivery.
"""

import asyncio

from routers.chat_orchestration import Reply, TypingSimulator


def _reply(text="Hello there.", delay_ms=20):
    return Reply(id=text, text=text, delay_ms=delay_ms)


class TestTypingSimulator:
    """Debounced delivery of committed replies."""

    def test_delivers_after_delay(self):
        delivered = []

        async def run():
            typing = TypingSimulator()
            task = typing.schedule(_reply(), delivered.append)
            assert typing.pending
            await task
            assert not typing.pending

        asyncio.run(run())
        assert [r.text for r in delivered] == ["Hello there."]

    def test_cancel(self):
        delivered = []

        async def run():
            typing = TypingSimulator()
            typing.schedule(_reply(delay_ms=5000), delivered.append)
            assert typing.cancel() is True
            assert typing.cancel() is False
            await asyncio.sleep(0.01)

        asyncio.run(run())
        assert delivered == []

    def test_reschedule_discards_stale_reply(self):
        delivered = []

        async def run():
            typing = TypingSimulator()
            first = typing.schedule(_reply("first", delay_ms=5000), delivered.append)
            second = typing.schedule(_reply("second", delay_ms=10), delivered.append)
            await second
            assert first.cancelled()

        asyncio.run(run())
        assert [r.text for r in delivered] == ["second"]

    def test_disabled_skips_delay(self):
        delivered = []

        async def run():
            typing = TypingSimulator(enabled=False)
            await asyncio.wait_for(typing.schedule(_reply(delay_ms=60000), delivered.append), timeout=1)

        asyncio.run(run())
        assert len(delivered) == 1

    def test_zero_delay_delivers_immediately(self):
        delivered = []

        async def run():
            typing = TypingSimulator()
            await asyncio.wait_for(typing.schedule(_reply(delay_ms=0), delivered.append), timeout=1)

        asyncio.run(run())
        assert len(delivered) == 1

    def test_async_callback(self):
        delivered = []

        async def send(reply):
            await asyncio.sleep(0)
            delivered.append(reply.text)

        async def run():
            typing = TypingSimulator()
            await typing.schedule(_reply(delay_ms=1), send)

        asyncio.run(run())
        assert delivered == ["Hello there."]
