"""Lock/door state reconciliation.

``reconcile`` is a pure function of (config, state, event). It returns the next
runtime state and the ordered side effects the lock must carry out. Relay
writes always come first so the lock can abort before committing anything
when the hardware refuses the write.

Door position table, applied when the door line settles::

    door_open  lock_state  ->  lock_state  current    target
    True       UNSECURED       SECURED     UNSECURED  UNSECURED
    True       SECURED         SECURED     UNSECURED  UNSECURED
    False      SECURED         SECURED     SECURED    SECURED
    False      UNSECURED       UNSECURED   UNSECURED  UNSECURED
    any        other           unchanged   UNKNOWN    unchanged

Opening the door while the magnet is released lets the catch re-engage as the
door swings, so the lock counts as engaged even though the open door is
reported unsecured.
"""

import logging
from dataclasses import replace

from config import DoorLockConfig
from models.lock import TARGET_STATES, FlashRestore, LockRuntimeState, LockStateCode
from reconcile.events import (
    ArmFlash,
    ArmRelock,
    CancelFlash,
    CancelRelock,
    DoorSettled,
    Effect,
    Event,
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
from utils.errors import StateAnomaly

logger = logging.getLogger(__name__)

FLASH_INTERVAL = 0.5  # seconds a refused lock request shows as Secured

DOOR_OPEN_MESSAGE = "Door is open"
DOOR_CLOSED_MESSAGE = "Door is closed"

SECURED = LockStateCode.SECURED
UNSECURED = LockStateCode.UNSECURED
UNKNOWN = LockStateCode.UNKNOWN


def reconcile(
    config: DoorLockConfig,
    state: LockRuntimeState,
    event: Event,
    flash_interval: float = FLASH_INTERVAL,
) -> Transition:
    """Apply one event to a lock's runtime state."""
    if isinstance(event, SetTarget):
        return _set_target(config, state, event.requested, flash_interval)
    if isinstance(event, DoorSettled):
        return _door_settled(config, state, event.door_open)
    if isinstance(event, RelockElapsed):
        return _relock(config, state, flash_interval)
    if isinstance(event, FlashElapsed):
        return _flash_elapsed(state)
    raise TypeError(f"Unsupported event: {event!r}")


def _set_target(
    config: DoorLockConfig,
    state: LockRuntimeState,
    requested: LockStateCode,
    flash_interval: float,
) -> Transition:
    if requested not in TARGET_STATES:
        raise ValueError(f"Target state must be secured or unsecured, got {requested!r}")

    if requested == UNSECURED:
        return _unlock(config, state)

    if config.lock_with_memory:
        # The magnet cannot be commanded shut. Acknowledge, then put things back.
        return _flash(state, flash_interval, restore=None)

    return _secure(config, state, (CancelRelock(),))


def _unlock(config: DoorLockConfig, state: LockRuntimeState) -> Transition:
    new_state = replace(
        state,
        current_state=UNSECURED,
        target_state=UNSECURED,
        lock_state=UNSECURED,
        pending_restore=None,
    )
    return Transition(
        new_state,
        (
            WriteRelay(config.unlock_level),
            CancelFlash(),
            PersistState(UNSECURED),
            PublishState(UNSECURED, UNSECURED),
            ArmRelock(config.unlocking_duration),
        ),
    )


def _secure(
    config: DoorLockConfig,
    state: LockRuntimeState,
    extra: tuple[Effect, ...] = (),
) -> Transition:
    new_state = replace(
        state,
        current_state=SECURED,
        target_state=SECURED,
        lock_state=SECURED,
        pending_restore=None,
    )
    return Transition(
        new_state,
        (
            WriteRelay(config.secure_level),
            *extra,
            CancelFlash(),
            PersistState(SECURED),
            PublishState(SECURED, SECURED),
        ),
    )


def _flash(
    state: LockRuntimeState,
    flash_interval: float,
    restore: FlashRestore | None,
) -> Transition:
    """Show Secured for one flash interval, then put back ``restore``.

    The target is shown as Secured too, since that is what the bridge just
    wrote or the relock implies. Both values revert when the flash elapses.
    """
    # A flash already on screen keeps the values it will restore.
    if state.pending_restore is not None:
        restore = state.pending_restore
    elif restore is None:
        restore = FlashRestore(state.current_state, state.target_state)

    new_state = replace(
        state,
        current_state=SECURED,
        target_state=SECURED,
        pending_restore=restore,
    )
    return Transition(
        new_state,
        (
            PublishState(SECURED, SECURED),
            ArmFlash(flash_interval),
        ),
    )


def _flash_elapsed(state: LockRuntimeState) -> Transition:
    restore = state.pending_restore
    if restore is None:
        return Transition(state)

    new_state = replace(
        state,
        current_state=restore.current_state,
        target_state=restore.target_state,
        pending_restore=None,
    )
    effects: list[Effect] = [PublishState(restore.current_state, restore.target_state)]
    if restore.persist:
        effects.insert(0, PersistState(restore.current_state))
    return Transition(new_state, tuple(effects))


def _relock(
    config: DoorLockConfig, state: LockRuntimeState, flash_interval: float
) -> Transition:
    if not config.lock_with_memory:
        return _secure(config, state)

    if config.door_pin is not None:
        return _flash(state, flash_interval, restore=None)

    # No door sensor: nobody can tell whether the door was opened and the
    # catch re-engaged, so settle on Unknown after the flash.
    return _flash(
        state,
        flash_interval,
        restore=FlashRestore(UNKNOWN, SECURED, persist=True),
    )


def _door_settled(
    config: DoorLockConfig, state: LockRuntimeState, door_open: bool
) -> Transition:
    lock_state = state.lock_state
    target = state.target_state

    if lock_state == UNSECURED or lock_state == SECURED:
        if door_open:
            lock_state = SECURED
            current = target = UNSECURED
        elif lock_state == SECURED:
            current = target = SECURED
        else:
            current = target = UNSECURED
    else:
        logger.warning(str(StateAnomaly(config.name, lock_state)))
        current = UNKNOWN

    new_state = replace(
        state,
        current_state=current,
        target_state=target,
        lock_state=lock_state,
        door_open=door_open,
        pending_restore=None,
    )

    effects: list[Effect] = [
        CancelFlash(),
        PersistState(current),
        PublishState(current, target),
        PublishContact(door_open),
    ]
    if state.door_open is not None and state.door_open != door_open:
        effects.append(Notify(DOOR_OPEN_MESSAGE if door_open else DOOR_CLOSED_MESSAGE))
    return Transition(new_state, tuple(effects))
