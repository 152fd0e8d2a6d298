"""Lock state model."""

from abc import abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from models.base import Device


class LockStateCode(IntEnum):
    """Lock states, numbered as the HomeKit LockCurrentState values."""

    UNSECURED = 0
    SECURED = 1
    JAMMED = 2
    UNKNOWN = 3

    @classmethod
    def parse(cls, value: Any) -> "LockStateCode | None":
        """Parse a stored value, returning None when it is not a valid code."""
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# The only values LockTargetState accepts.
TARGET_STATES = (LockStateCode.UNSECURED, LockStateCode.SECURED)


@dataclass(frozen=True)
class FlashRestore:
    """Published values to put back when a transient Secured display ends."""

    current_state: LockStateCode
    target_state: LockStateCode
    persist: bool = False


@dataclass(frozen=True)
class LockRuntimeState:
    """What the reconciler believes and publishes for one lock.

    ``current_state`` and ``target_state`` are the published pair.
    ``lock_state`` is the belief about the catch itself, which can differ from
    ``current_state`` while the door stands open. It is typed loosely because a
    corrupted value must still reach the reconciler and be reported.
    """

    current_state: LockStateCode = LockStateCode.UNKNOWN
    target_state: LockStateCode = LockStateCode.SECURED
    lock_state: Any = LockStateCode.SECURED
    door_open: bool | None = None
    pending_restore: FlashRestore | None = None

    @classmethod
    def restore(cls, persisted: LockStateCode | None) -> "LockRuntimeState":
        """Seed runtime state from the last persisted current state."""
        current = persisted if persisted is not None else LockStateCode.UNKNOWN
        if current in TARGET_STATES:
            return cls(current_state=current, target_state=current, lock_state=current)
        # Nothing trustworthy was stored: the catch rests engaged, but say so
        # only once the door sensor corroborates it.
        return cls(
            current_state=LockStateCode.UNKNOWN,
            target_state=LockStateCode.SECURED,
            lock_state=LockStateCode.SECURED,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return state as dict."""
        lock_state = self.lock_state
        return {
            "current_state": self.current_state.name.lower(),
            "target_state": self.target_state.name.lower(),
            "lock_state": lock_state.name.lower()
            if isinstance(lock_state, LockStateCode)
            else repr(lock_state),
            "door_open": self.door_open,
        }


class Lock(Device):
    """Base class for lock devices exposing LockCurrentState/LockTargetState."""

    @abstractmethod
    def get_current_state(self) -> LockStateCode:
        """Value behind LockCurrentState."""
        pass

    @abstractmethod
    def get_target_state(self) -> LockStateCode:
        """Value behind LockTargetState."""
        pass

    @abstractmethod
    async def set_target_state(self, requested: LockStateCode) -> None:
        """Handle a LockTargetState write.

        Raises:
            HardwareIOError: If the relay could not be driven
            ValueError: If ``requested`` is not Secured or Unsecured
        """
        pass

    @abstractmethod
    def get_contact_state(self) -> int | None:
        """Value behind ContactSensorState, None if it has never been read."""
        pass
