"""Electromagnetic door lock with door-position reconciliation.

The lock owns its runtime state and three timers (door debounce, auto-relock,
transient Secured display). Every input, whether a bridge command, a door
edge or a timer, becomes an event for ``reconcile``; the resulting effects are
carried out here. All of it runs on the event loop thread, one event at a
time, and nothing awaits between computing a transition and committing it.
"""

import logging
from typing import Any

from config import DoorLockConfig
from hardware.gpio import LineIO
from models.base import DeviceStatus, DeviceType
from models.characteristics import Characteristic, CharacteristicSink
from models.lock import Lock, LockRuntimeState, LockStateCode
from notifications import Notifier
from persistence import StateStore
from reconcile import (
    FLASH_INTERVAL,
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
    reconcile,
)
from reconcile.events import Effect, Event
from scheduling.relock import AutoRelockScheduler
from scheduling.timers import Timer
from utils.errors import HardwareIOError

logger = logging.getLogger(__name__)

DEBOUNCE_INTERVAL = 0.02  # seconds between a door edge and sampling the line


class DoorLock(Lock):
    """Relay-driven lock, optionally corroborated by a reed-switch door sensor."""

    def __init__(
        self,
        config: DoorLockConfig,
        lines: LineIO,
        store: StateStore,
        sink: CharacteristicSink,
        notifier: Notifier | None = None,
        debounce_interval: float = DEBOUNCE_INTERVAL,
        flash_interval: float = FLASH_INTERVAL,
    ):
        super().__init__(id=config.name, name=config.name, device_type=DeviceType.LOCK)
        self.config = config
        self.lines = lines
        self.store = store
        self.sink = sink
        self.notifier = notifier
        self.debounce_interval = debounce_interval
        self.flash_interval = flash_interval

        self._state = LockRuntimeState()
        self._debounce = Timer(f"{self.id}:debounce")
        self._flash = Timer(f"{self.id}:flash")
        self.relock = AutoRelockScheduler(self.id, self._on_relock)

    @property
    def state(self) -> LockRuntimeState:
        return self._state

    async def start(self) -> None:
        """Restore the persisted state and start watching the door."""
        persisted = self.store.get_item(self.config.name)
        self._state = LockRuntimeState.restore(persisted)
        logger.info(
            f"{self.id}: restored current={self._state.current_state.name} "
            f"(persisted={persisted.name if persisted is not None else 'none'}, "
            f"memory={self.config.lock_with_memory}, door_pin={self.config.door_pin})"
        )
        self._publish(self._state.current_state, self._state.target_state)

        if self.config.watches_door:
            try:
                self.lines.watch_line(self.config.door_pin, self._on_door_edge)
            except HardwareIOError:
                self.status = DeviceStatus.OFFLINE
                raise
            self._sample_door()

        if not self.config.watches_door and self._state.current_state == LockStateCode.UNSECURED:
            # Restarted inside an unlock window with no door sensor to settle
            # it: close it again.
            self.relock.arm(self.config.unlocking_duration)

        self.status = DeviceStatus.ONLINE

    async def close(self) -> None:
        """Cancel every pending timer."""
        self._debounce.cancel()
        self._flash.cancel()
        self.relock.cancel()

    def get_current_state(self) -> LockStateCode:
        return self._state.current_state

    def get_target_state(self) -> LockStateCode:
        return self._state.target_state

    def get_contact_state(self) -> int | None:
        """Last settled door position as ContactSensorState, None if never sampled."""
        if self._state.door_open is None:
            return None
        return 1 if self._state.door_open else 0

    async def set_target_state(self, requested: LockStateCode | int) -> None:
        """Handle a LockTargetState write from the bridge."""
        try:
            requested = LockStateCode(requested)
        except ValueError:
            raise ValueError(f"Invalid lock target state: {requested!r}") from None
        logger.info(f"{self.id}: target state requested: {requested.name}")
        self._dispatch(SetTarget(requested))

    # Hardware and timer callbacks

    def _on_door_edge(self, err: Exception | None, value: int | None) -> None:
        if err is not None:
            logger.error(f"{self.id}: door sensor edge error: {err}")
            return
        logger.debug(f"{self.id}: door edge ({value}), settling")
        self._debounce.arm(self.debounce_interval, self._sample_door)

    def _sample_door(self) -> None:
        try:
            level = self.lines.read_line(self.config.door_pin)
        except HardwareIOError as e:
            logger.error(f"{self.id}: could not read door sensor: {e}")
            return
        self._dispatch(DoorSettled(self.config.door_open_from_level(level)))

    def _on_relock(self) -> None:
        self._dispatch(RelockElapsed())

    def _on_flash(self) -> None:
        self._dispatch(FlashElapsed())

    # Reconciliation

    def _dispatch(self, event: Event) -> Transition:
        transition = reconcile(self.config, self._state, event, self.flash_interval)

        for write in transition.of_type(WriteRelay):
            try:
                self.lines.write_line(self.config.relay_pin, write.level)
            except HardwareIOError as e:
                logger.error(f"{self.id}: relay write failed, state unchanged: {e}")
                raise

        previous, self._state = self._state, transition.state
        if previous != self._state:
            logger.info(
                f"{self.id}: {type(event).__name__} -> "
                f"current={self._state.current_state.name} "
                f"target={self._state.target_state.name} "
                f"lock={getattr(self._state.lock_state, 'name', self._state.lock_state)}"
            )

        for effect in transition.effects:
            self._apply(effect)
        return transition

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, WriteRelay):
            return
        if isinstance(effect, PersistState):
            self.store.set_item(self.config.name, effect.state)
        elif isinstance(effect, PublishState):
            self._publish(effect.current, effect.target)
        elif isinstance(effect, PublishContact):
            # ContactSensorState: 0 = contact detected (closed), 1 = not detected
            self.sink.update_characteristic(
                self.id, Characteristic.CONTACT_SENSOR_STATE, 1 if effect.door_open else 0
            )
        elif isinstance(effect, Notify):
            self._notify(effect.message)
        elif isinstance(effect, ArmRelock):
            self.relock.arm(effect.seconds)
        elif isinstance(effect, CancelRelock):
            self.relock.cancel()
        elif isinstance(effect, ArmFlash):
            self._flash.arm(effect.seconds, self._on_flash)
        elif isinstance(effect, CancelFlash):
            self._flash.cancel()

    def _publish(self, current: LockStateCode, target: LockStateCode) -> None:
        self.sink.update_characteristic(self.id, Characteristic.LOCK_CURRENT_STATE, current)
        self.sink.update_characteristic(self.id, Characteristic.LOCK_TARGET_STATE, target)

    def _notify(self, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.notify(message)
        except Exception as e:
            logger.error(f"{self.id}: could not queue notification {message!r}: {e}")

    def to_state_dict(self) -> dict[str, Any]:
        """Return current state as dict."""
        return {
            **self._state.to_dict(),
            "lock_with_memory": self.config.lock_with_memory,
            "door_sensor": self.config.door_pin is not None,
            "relock_pending": self.relock.pending,
        }
