"""Scheduling module for Intercom Door."""

from scheduling.relock import AutoRelockScheduler
from scheduling.timers import Timer

__all__ = ["AutoRelockScheduler", "Timer"]
