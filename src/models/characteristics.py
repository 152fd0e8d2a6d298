"""Bridge-facing characteristics and the sinks that receive their updates."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Characteristic(Enum):
    """Characteristics a device pushes to the bridge."""

    LOCK_CURRENT_STATE = "LockCurrentState"
    LOCK_TARGET_STATE = "LockTargetState"
    CONTACT_SENSOR_STATE = "ContactSensorState"


class CharacteristicSink(Protocol):
    """Receives characteristic updates from a device."""

    def update_characteristic(
        self, device_id: str, characteristic: Characteristic, value: int
    ) -> None:
        ...


Listener = Callable[[str, Characteristic, int], None]


@dataclass
class CharacteristicCache:
    """Records the last value pushed per (device, characteristic).

    Listeners are called synchronously after each update; a failing listener
    is logged and does not affect the device that published.
    """

    _values: dict[tuple[str, Characteristic], int] = field(default_factory=dict)
    _listeners: list[Listener] = field(default_factory=list)

    def update_characteristic(
        self, device_id: str, characteristic: Characteristic, value: int
    ) -> None:
        self._values[(device_id, characteristic)] = int(value)
        logger.debug(f"{device_id}: {characteristic.value} -> {int(value)}")
        for listener in list(self._listeners):
            try:
                listener(device_id, characteristic, int(value))
            except Exception as e:
                logger.error(f"Characteristic listener failed for {device_id}: {e}")

    def get(self, device_id: str, characteristic: Characteristic) -> int | None:
        """Get the last value published for a characteristic."""
        return self._values.get((device_id, characteristic))

    def for_device(self, device_id: str) -> dict[str, int]:
        """Get every characteristic value published by one device."""
        return {
            characteristic.value: value
            for (dev, characteristic), value in self._values.items()
            if dev == device_id
        }

    def subscribe(self, listener: Listener) -> None:
        """Register a listener for all updates."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a previously registered listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)
