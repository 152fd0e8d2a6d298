"""Error types for Intercom Door.

The lock devices raise or log the four failure kinds below. The MCP layer
turns whatever reaches it into a ``ToolError`` so a bridge call always gets
an answer, with a hint on what to check next.
"""

import asyncio
import logging
import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Awaitable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HardwareIOError(Exception):
    """Raised when reading or writing a GPIO line fails."""

    def __init__(self, pin: int, operation: str, cause: Exception | None = None):
        self.pin = pin
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"GPIO {operation} failed on line {pin}{detail}")


class PersistenceError(Exception):
    """A stored record could not be read or written.

    Never escapes the state store: callers see a missing record instead.
    """

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Stored record {key!r}: {message}")


class NotificationError(Exception):
    """A notification could not be delivered. Logged only."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(f"Failed to deliver notification {message!r}: {cause}")


class StateAnomaly(Exception):
    """A lock state the reconciler does not recognize. Logged, never raised."""

    def __init__(self, device_id: str, lock_state: Any):
        self.device_id = device_id
        self.lock_state = lock_state
        super().__init__(
            f"Lock {device_id} has unrecognized internal state {lock_state!r}; "
            "reporting Unknown"
        )


class ErrorCategory(Enum):
    """What kind of failure a tool response describes."""

    TIMEOUT = "timeout"
    HARDWARE_IO = "hardware_io"
    DEVICE_NOT_FOUND = "device_not_found"
    INVALID_INPUT = "invalid_input"
    INTERNAL_ERROR = "internal_error"


RECOVERY_SUGGESTIONS = {
    ErrorCategory.TIMEOUT: "The lock did not answer in time. Check the controller and try again.",
    ErrorCategory.HARDWARE_IO: "GPIO access failed. Check wiring, pin numbers and gpio permissions.",
    ErrorCategory.DEVICE_NOT_FOUND: "Use 'list_devices' to see configured locks.",
    ErrorCategory.INVALID_INPUT: "Use 'secured' or 'unsecured' as the target state.",
    ErrorCategory.INTERNAL_ERROR: "Check the server log for details.",
}


def get_recovery_suggestion(category: ErrorCategory) -> str:
    return RECOVERY_SUGGESTIONS[category]


@dataclass
class ToolError:
    """Error payload returned by an MCP tool instead of raising."""

    category: ErrorCategory
    message: str
    device_id: str | None = None
    request_id: str | None = None
    recovery: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, category: ErrorCategory, message: str, device_id: str | None = None) -> "ToolError":
        """Build an error with the stock recovery hint for its category."""
        return cls(
            category=category,
            message=message,
            device_id=device_id,
            recovery=get_recovery_suggestion(category),
        )

    def to_dict(self) -> dict[str, Any]:
        """Response dict; empty optional fields are left out."""
        payload = asdict(self)
        response: dict[str, Any] = {
            "error": payload.pop("message"),
            "error_category": self.category.value,
        }
        payload.pop("category")
        response.update({key: value for key, value in payload.items() if value})
        return response


def generate_request_id() -> str:
    """Short random ID that ties a tool call to its log lines."""
    return uuid.uuid4().hex[:8]


def classify_exception(e: Exception, device_id: str | None = None) -> ToolError:
    """Map an exception raised while serving a tool to a ToolError."""
    if isinstance(e, asyncio.TimeoutError):
        subject = f"Lock {device_id}" if device_id else "Operation"
        return ToolError.of(ErrorCategory.TIMEOUT, f"{subject} timed out", device_id)
    if isinstance(e, HardwareIOError):
        return ToolError.of(ErrorCategory.HARDWARE_IO, str(e), device_id)
    if isinstance(e, ValueError):
        return ToolError.of(ErrorCategory.INVALID_INPUT, str(e), device_id)
    return ToolError.of(
        ErrorCategory.INTERNAL_ERROR, f"{type(e).__name__}: {e}", device_id
    )


DEFAULT_HANDLER_TIMEOUT = 15.0  # whole tool call
DEFAULT_DEVICE_TIMEOUT = 5.0  # one device operation


async def execute_with_timeout(coro: Awaitable[T], timeout: float = DEFAULT_DEVICE_TIMEOUT) -> T:
    """Await ``coro``, raising asyncio.TimeoutError after ``timeout`` seconds."""
    async with asyncio.timeout(timeout):
        return await coro
