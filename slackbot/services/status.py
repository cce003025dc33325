"""Fire-and-forget progress reporting."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable

from slackbot.utils.logging import get_logger

logger = get_logger(__name__)

StatusCallback = Callable[[str], Awaitable[None] | None]


class StatusReporter:
    """Deliver human-readable progress strings to an optional sink.

    ``report`` never raises and never waits on the sink: coroutine sinks are
    scheduled as background tasks and their failures are only logged.
    """

    def __init__(self, callback: StatusCallback | None = None):
        self.callback = callback
        self._pending: set[asyncio.Task] = set()

    def report(self, status: str) -> None:
        """Send a status update to the sink, if there is one."""
        logger.debug(f"Status: {status}")
        if self.callback is None:
            return

        try:
            result = self.callback(status)
        except Exception as e:
            logger.warning(f"Status callback failed: {e}")
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._pending.add(task)
            task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        if (error := task.exception()) is not None:
            logger.warning(f"Status update failed: {error}")

    async def drain(self) -> None:
        """Wait for in-flight updates so they land before the final answer."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
