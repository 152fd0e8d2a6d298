"""Utility modules for Intercom Door."""

from utils.errors import (
    ErrorCategory,
    HardwareIOError,
    NotificationError,
    PersistenceError,
    StateAnomaly,
    ToolError,
    classify_exception,
)

__all__ = [
    "ErrorCategory",
    "HardwareIOError",
    "NotificationError",
    "PersistenceError",
    "StateAnomaly",
    "ToolError",
    "classify_exception",
]
