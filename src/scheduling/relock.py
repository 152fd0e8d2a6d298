"""Auto-relock scheduling for released locks."""

import logging
from typing import Callable

from scheduling.timers import Timer

logger = logging.getLogger(__name__)


class AutoRelockScheduler:
    """Fires once ``duration`` seconds after the most recent unlock.

    Every ``arm`` replaces the pending firing, so repeated unlocks extend the
    window instead of stacking relocks. What the firing does (a relay write or
    a display flash) is up to the ``on_fire`` callback supplied by the lock.
    """

    def __init__(self, device_id: str, on_fire: Callable[[], None]):
        self.device_id = device_id
        self._on_fire = on_fire
        self._timer = Timer(f"{device_id}:relock")
        self.fire_count = 0

    @property
    def pending(self) -> bool:
        return self._timer.pending

    @property
    def due_at(self) -> float | None:
        return self._timer.due_at

    def arm(self, duration: float) -> None:
        """Start or restart the relock window."""
        replaced = self._timer.pending
        self._timer.arm(duration, self._fire)
        if replaced:
            logger.info(f"{self.device_id}: relock window restarted ({duration}s)")
        else:
            logger.info(f"{self.device_id}: relock in {duration}s")

    def cancel(self) -> None:
        """Drop the pending relock, if any."""
        if self._timer.cancel():
            logger.info(f"{self.device_id}: pending relock cancelled")

    def _fire(self) -> None:
        self.fire_count += 1
        logger.info(f"{self.device_id}: relock window elapsed")
        self._on_fire()
