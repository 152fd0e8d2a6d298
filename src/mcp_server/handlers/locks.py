"""Lock tool handlers for Intercom Door.

Every handler answers with a dict. Failures come back as ToolError payloads
so the bridge is never left without a result.
"""

import asyncio
import logging
from typing import Any

from devices.manager import DeviceManager
from models import Lock, LockStateCode
from utils.errors import (
    DEFAULT_DEVICE_TIMEOUT,
    ErrorCategory,
    HardwareIOError,
    ToolError,
    classify_exception,
    execute_with_timeout,
)

logger = logging.getLogger(__name__)

TARGET_STATE_NAMES = {
    "secured": LockStateCode.SECURED,
    "unsecured": LockStateCode.UNSECURED,
}


def _state_name(state: LockStateCode) -> str:
    return state.name.lower()


class LockHandlers:
    """Handlers behind LockCurrentState, LockTargetState and ContactSensorState."""

    def __init__(self, device_manager: DeviceManager):
        self.device_manager = device_manager

    def _find(self, device_id: str) -> Lock | ToolError:
        lock = self.device_manager.get_lock(device_id)
        if lock is None:
            return ToolError.of(
                ErrorCategory.DEVICE_NOT_FOUND, f"No lock named {device_id!r}", device_id
            )
        return lock

    def _describe(self, lock: Lock) -> dict[str, Any]:
        return {
            "device_id": lock.id,
            "current_state": _state_name(lock.get_current_state()),
            "target_state": _state_name(lock.get_target_state()),
            "device_status": lock.status.value,
        }

    async def get_lock_state(self, args: dict[str, Any]) -> dict[str, Any]:
        device_id = args["device_id"]
        lock = self._find(device_id)
        if isinstance(lock, ToolError):
            return lock.to_dict()

        try:
            return self._describe(lock)
        except HardwareIOError as e:
            logger.error(f"{device_id}: could not read lock state: {e}")
            return classify_exception(e, device_id).to_dict()

    async def set_lock_target_state(self, args: dict[str, Any]) -> dict[str, Any]:
        """Write LockTargetState.

        A lock with memory accepts 'secured' but only shows it briefly; the
        catch closes by itself when the door does.
        """
        device_id = args["device_id"]
        raw = args.get("state")
        requested = TARGET_STATE_NAMES.get(str(raw).lower())
        if requested is None:
            return ToolError.of(
                ErrorCategory.INVALID_INPUT,
                f"Unsupported target state {raw!r}",
                device_id,
            ).to_dict()

        lock = self._find(device_id)
        if isinstance(lock, ToolError):
            return lock.to_dict()

        try:
            await execute_with_timeout(
                lock.set_target_state(requested), timeout=DEFAULT_DEVICE_TIMEOUT
            )
        except asyncio.TimeoutError:
            logger.error(f"{device_id}: no answer setting {requested.name}")
            return ToolError.of(
                ErrorCategory.TIMEOUT, f"Lock {device_id} did not respond", device_id
            ).to_dict()
        except Exception as e:
            logger.error(f"{device_id}: could not set {requested.name}: {e}")
            return classify_exception(e, device_id).to_dict()

        logger.info(f"{device_id}: target set to {requested.name} over MCP")
        return {"success": True, **self._describe(lock)}

    async def get_contact_state(self, args: dict[str, Any]) -> dict[str, Any]:
        """Door sensor of a lock (1 = open) or bell line of an intercom."""
        device_id = args["device_id"]
        lock = self._find(device_id)
        if isinstance(lock, ToolError):
            return lock.to_dict()

        try:
            contact = lock.get_contact_state()
        except HardwareIOError as e:
            logger.error(f"{device_id}: could not read contact sensor: {e}")
            return classify_exception(e, device_id).to_dict()

        return {
            "device_id": device_id,
            "contact_state": contact,
            "device_status": lock.status.value,
        }
