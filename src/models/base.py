"""Device base class shared by locks and intercoms."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class DeviceType(Enum):
    LOCK = "lock"
    INTERCOM = "intercom"


class DeviceStatus(Enum):
    """Whether the device's GPIO lines were claimed."""

    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


@dataclass
class Device(ABC):
    """A configured accessory.

    ``id`` is the configured name, which is also the persistence key. State
    is only touched from the event loop that ran ``start``.
    """

    id: str
    name: str
    device_type: DeviceType
    status: DeviceStatus = DeviceStatus.UNKNOWN

    @abstractmethod
    async def start(self) -> None:
        """Restore state, claim lines and begin watching inputs."""

    @abstractmethod
    def to_state_dict(self) -> dict[str, Any]:
        """State for MCP responses."""

    async def close(self) -> None:
        """Cancel timers. Lines are released by the manager."""
