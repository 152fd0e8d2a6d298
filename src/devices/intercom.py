"""Intercom door: a door-opener relay plus a bell voltage sense line.

Unlike ``DoorLock`` this variant keeps no state of its own. The relay line is
the lock state (high means the opener is energized) and the voltage line is
the bell.
"""

import logging
from typing import Any

from config import IntercomConfig
from hardware.gpio import LineIO
from models.base import DeviceStatus, DeviceType
from models.characteristics import Characteristic, CharacteristicSink
from models.lock import TARGET_STATES, Lock, LockStateCode
from notifications import Notifier
from utils.errors import HardwareIOError

logger = logging.getLogger(__name__)

BELL_MESSAGE = "Bell was pressed"
OPEN_MESSAGE = "Door is open"
CLOSED_MESSAGE = "Door is closed"


class IntercomDoor(Lock):
    """Relay and bell sensor exposed as a lock and a contact sensor."""

    def __init__(
        self,
        config: IntercomConfig,
        lines: LineIO,
        sink: CharacteristicSink,
        notifier: Notifier | None = None,
    ):
        super().__init__(id=config.name, name=config.name, device_type=DeviceType.INTERCOM)
        self.config = config
        self.lines = lines
        self.sink = sink
        self.notifier = notifier

    async def start(self) -> None:
        """Start watching the bell line."""
        try:
            self.lines.watch_line(self.config.voltage_pin, self._on_voltage_edge)
        except HardwareIOError:
            self.status = DeviceStatus.OFFLINE
            raise
        self.status = DeviceStatus.ONLINE
        logger.info(
            f"{self.id}: relay on line {self.config.relay_pin}, "
            f"bell on line {self.config.voltage_pin}"
        )

    def get_current_state(self) -> LockStateCode:
        """Read the relay line: energized means unsecured."""
        try:
            value = self.lines.read_line(self.config.relay_pin)
        except HardwareIOError as e:
            logger.error(f"{self.id}: {e}")
            raise
        state = LockStateCode.UNSECURED if value == 1 else LockStateCode.SECURED
        logger.info(f"{self.id}: lock state is {state.name}")
        return state

    def get_target_state(self) -> LockStateCode:
        return self.get_current_state()

    async def set_target_state(self, requested: LockStateCode | int) -> None:
        """Drive the relay and report the result."""
        try:
            requested = LockStateCode(requested)
        except ValueError:
            raise ValueError(f"Invalid lock target state: {requested!r}") from None
        if requested not in TARGET_STATES:
            raise ValueError(f"Target state must be secured or unsecured, got {requested.name}")

        unlocking = requested == LockStateCode.UNSECURED
        try:
            self.lines.write_line(self.config.relay_pin, 1 if unlocking else 0)
        except HardwareIOError as e:
            logger.error(f"{self.id}: {e}")
            raise

        logger.info(f"{self.id}: lock state set to {requested.name}")
        self.sink.update_characteristic(self.id, Characteristic.LOCK_CURRENT_STATE, requested)
        self.sink.update_characteristic(self.id, Characteristic.LOCK_TARGET_STATE, requested)
        self._notify(OPEN_MESSAGE if unlocking else CLOSED_MESSAGE)

    def get_contact_state(self) -> int:
        """Read the bell voltage line."""
        try:
            value = self.lines.read_line(self.config.voltage_pin)
        except HardwareIOError as e:
            logger.error(f"{self.id}: {e}")
            raise
        logger.info(f"{self.id}: contact sensor state is {value}")
        return value

    def _on_voltage_edge(self, err: Exception | None, value: int | None) -> None:
        if err is not None:
            logger.error(f"{self.id}: voltage edge error: {err}")
            return
        logger.info(f"{self.id}: voltage changed to {value}")
        self.sink.update_characteristic(self.id, Characteristic.CONTACT_SENSOR_STATE, value)
        if value == 1:
            self._notify(BELL_MESSAGE)

    def _notify(self, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(message)
        except Exception as e:
            logger.error(f"{self.id}: could not queue notification {message!r}: {e}")

    def to_state_dict(self) -> dict[str, Any]:
        """Return current state as dict.

        Reads the lines, so a failing line shows up as ``None``.
        """
        try:
            lock_state: str | None = self.get_current_state().name.lower()
        except HardwareIOError:
            lock_state = None
        try:
            contact: int | None = self.get_contact_state()
        except HardwareIOError:
            contact = None
        return {"lock_state": lock_state, "contact_state": contact}
