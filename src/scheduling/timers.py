"""Owned, cancellable delayed callbacks on the running event loop."""

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class Timer:
    """A single re-armable delayed callback.

    At most one firing is outstanding: ``arm`` cancels any pending instance
    before scheduling the new one, so a stale firing can never overwrite
    newer state.
    """

    def __init__(self, name: str):
        self.name = name
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Whether a firing is scheduled and not yet run or cancelled."""
        return self._handle is not None and not self._handle.cancelled()

    @property
    def due_at(self) -> float | None:
        """Loop time of the pending firing, if any."""
        if not self.pending:
            return None
        return self._handle.when()  # type: ignore[union-attr]

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` after ``delay`` seconds, replacing any pending one."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire, callback)
        logger.debug(f"Timer {self.name} armed for {delay:.3f}s")

    def cancel(self) -> bool:
        """Cancel the pending firing. Returns True if one was pending."""
        handle, self._handle = self._handle, None
        if handle is None or handle.cancelled():
            return False
        handle.cancel()
        logger.debug(f"Timer {self.name} cancelled")
        return True

    def _fire(self, callback: Callable[[], None]) -> None:
        self._handle = None
        try:
            callback()
        except Exception:
            logger.exception(f"Timer {self.name} callback failed")
