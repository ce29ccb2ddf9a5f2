"""
Async debounce helper.

Coalesces rapid repeated triggers into one call: each trigger cancels the
pending timer and starts a new one, so only the last trigger within the
quiet window fires.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger("tutor.debounce")


class AsyncDebouncer:
    """Debounce an async callback on the running event loop."""

    def __init__(self, delay_seconds: float, callback: Callable[..., Awaitable[Any]]):
        self.delay_seconds = delay_seconds
        self.callback = callback
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        """(Re)start the quiet window; the callback runs with the latest arguments."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire_later(args, kwargs))
        return self._task

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def _fire_later(self, args: tuple, kwargs: dict) -> Any:
        await asyncio.sleep(self.delay_seconds)
        # Past this point the call is committed; a later trigger starts a new window.
        self._task = None
        try:
            return await self.callback(*args, **kwargs)
        except Exception as e:
            logger.error(f"Debounced callback failed: {e}", exc_info=True)
            raise
