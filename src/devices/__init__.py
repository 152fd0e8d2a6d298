"""Device implementations for Intercom Door."""

from config import DoorLockConfig, IntercomConfig
from devices.door_lock import DoorLock
from devices.intercom import IntercomDoor
from devices.manager import DeviceDeps, DeviceManager


async def create_door_lock(device_config: DoorLockConfig, deps: DeviceDeps) -> DoorLock:
    """Factory function to create a door lock from config."""
    return DoorLock(
        device_config,
        lines=deps.lines,
        store=deps.store,
        sink=deps.sink,
        notifier=deps.notifier,
    )


async def create_intercom(device_config: IntercomConfig, deps: DeviceDeps) -> IntercomDoor:
    """Factory function to create an intercom door from config."""
    return IntercomDoor(
        device_config,
        lines=deps.lines,
        sink=deps.sink,
        notifier=deps.notifier,
    )


__all__ = [
    "DeviceDeps",
    "DeviceManager",
    "DoorLock",
    "IntercomDoor",
    "create_door_lock",
    "create_intercom",
    "register_all_factories",
]

# Device type to factory mapping
DEVICE_FACTORIES = {
    "door_lock": create_door_lock,
    "intercom": create_intercom,
}


def register_all_factories(manager: DeviceManager) -> None:
    """Register all device factories with a device manager."""
    for device_type, factory in DEVICE_FACTORIES.items():
        manager.register_device_factory(device_type, factory)
