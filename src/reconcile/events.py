"""Events consumed and effects produced by lock reconciliation."""

from dataclasses import dataclass, field

from models.lock import LockRuntimeState, LockStateCode


# Events


@dataclass(frozen=True)
class SetTarget:
    """The bridge asked for a new target state."""

    requested: LockStateCode


@dataclass(frozen=True)
class DoorSettled:
    """The door line was sampled after the debounce delay."""

    door_open: bool


@dataclass(frozen=True)
class RelockElapsed:
    """The unlock window ran out."""


@dataclass(frozen=True)
class FlashElapsed:
    """The transient Secured display is over."""


Event = SetTarget | DoorSettled | RelockElapsed | FlashElapsed


# Effects


@dataclass(frozen=True)
class WriteRelay:
    """Drive the relay line to a raw level."""

    level: int


@dataclass(frozen=True)
class PersistState:
    state: LockStateCode


@dataclass(frozen=True)
class PublishState:
    """Push LockCurrentState and LockTargetState to the bridge."""

    current: LockStateCode
    target: LockStateCode


@dataclass(frozen=True)
class PublishContact:
    door_open: bool


@dataclass(frozen=True)
class Notify:
    message: str


@dataclass(frozen=True)
class ArmRelock:
    seconds: float


@dataclass(frozen=True)
class CancelRelock:
    pass


@dataclass(frozen=True)
class ArmFlash:
    seconds: float


@dataclass(frozen=True)
class CancelFlash:
    pass


Effect = (
    WriteRelay
    | PersistState
    | PublishState
    | PublishContact
    | Notify
    | ArmRelock
    | CancelRelock
    | ArmFlash
    | CancelFlash
)


@dataclass(frozen=True)
class Transition:
    """Result of applying one event: the next state and what to do about it."""

    state: LockRuntimeState
    effects: tuple[Effect, ...] = field(default_factory=tuple)

    def of_type(self, kind: type) -> list:
        """Effects of one kind, in order."""
        return [effect for effect in self.effects if isinstance(effect, kind)]
