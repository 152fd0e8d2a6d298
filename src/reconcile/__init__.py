"""Lock/door state reconciliation."""

from reconcile.events import (
    ArmFlash,
    ArmRelock,
    CancelFlash,
    CancelRelock,
    DoorSettled,
    FlashElapsed,
    Notify,
    PersistState,
    PublishContact,
    PublishState,
    RelockElapsed,
    SetTarget,
    Transition,
    WriteRelay,
)
from reconcile.transitions import FLASH_INTERVAL, reconcile

__all__ = [
    "ArmFlash",
    "ArmRelock",
    "CancelFlash",
    "CancelRelock",
    "DoorSettled",
    "FLASH_INTERVAL",
    "FlashElapsed",
    "Notify",
    "PersistState",
    "PublishContact",
    "PublishState",
    "RelockElapsed",
    "SetTarget",
    "Transition",
    "WriteRelay",
    "reconcile",
]
