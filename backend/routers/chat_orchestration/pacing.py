"""
Typing Simulator - delivers a committed reply after its paced delay.

Only one delivery is pending per simulator. Scheduling a new reply cancels
the previous one, so a stale callback never runs. The reply itself is
already in MemoryStore when it is scheduled.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Union

from .state import Reply

logger = logging.getLogger(__name__)

DeliveryCallback = Callable[[Reply], Union[None, Awaitable[None]]]


class TypingSimulator:
    """
    Debounced reply delivery.

    Usage:
        typing = TypingSimulator()
        typing.schedule(reply, send_reply)
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _deliver(self, reply: Reply, callback: DeliveryCallback) -> None:
        try:
            if self.enabled and reply.delay_ms > 0:
                await asyncio.sleep(reply.delay_ms / 1000)
            result = callback(reply)
            if asyncio.iscoroutine(result):
                await result
        except asyncio.CancelledError:
            logger.debug(f"Delivery of reply {reply.id} cancelled")
            raise

    def schedule(self, reply: Reply, callback: DeliveryCallback) -> asyncio.Task:
        """Schedule delivery, discarding any delivery still pending."""
        self.cancel()

        task = asyncio.create_task(self._deliver(reply, callback))
        self._task = task

        def _cleanup_task(t, simulator=self):
            if simulator._task is t:
                simulator._task = None

        task.add_done_callback(_cleanup_task)
        return task

    def cancel(self) -> bool:
        """Cancel the pending delivery. Returns True if one was pending."""
        if not self.pending:
            return False
        self._task.cancel()
        self._task = None
        return True
