"""Builds the configured devices and owns their shared collaborators."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from config import AppConfig, DeviceConfig
from hardware.gpio import LineIO
from models import Device, DeviceStatus, DeviceType, Lock
from models.characteristics import CharacteristicCache
from notifications import Notifier
from persistence import StateStore

logger = logging.getLogger(__name__)


@dataclass
class DeviceDeps:
    """Collaborators handed to every device factory."""

    lines: LineIO
    store: StateStore
    sink: CharacteristicCache
    notifier: Notifier | None = None


DeviceFactory = Callable[[Any, DeviceDeps], Awaitable[Device]]


class DeviceManager:
    """Registry of running devices, keyed by their configured name."""

    def __init__(self, config: AppConfig, deps: DeviceDeps):
        self.config = config
        self.deps = deps
        self._devices: dict[str, Device] = {}
        self._factories: dict[str, DeviceFactory] = {}

    @property
    def characteristics(self) -> CharacteristicCache:
        return self.deps.sink

    def register_device_factory(self, device_type: str, factory: DeviceFactory) -> None:
        """Use ``factory(device_config, deps)`` for config entries of ``device_type``."""
        self._factories[device_type] = factory

    async def initialize(self) -> None:
        """Build and start every configured device, in config order."""
        for device_config in self.config.devices:
            await self._add(device_config)
        online = len(self.get_devices(status=DeviceStatus.ONLINE))
        logger.info(f"{online}/{len(self._devices)} devices online")

    async def _add(self, device_config: DeviceConfig) -> None:
        factory = self._factories.get(device_config.type)
        if factory is None:
            logger.warning(f"Skipping {device_config.name}: no factory for {device_config.type}")
            return

        try:
            device = await factory(device_config, self.deps)
        except Exception as e:
            logger.error(f"Could not build {device_config.name}: {e}")
            return

        # Registered before start so a device that fails still shows up offline
        self._devices[device.id] = device
        try:
            await device.start()
        except Exception as e:
            device.status = DeviceStatus.OFFLINE
            logger.error(f"{device.id} failed to start, marked offline: {e}")
        else:
            logger.info(f"{device.id} started ({device_config.type})")

    async def shutdown(self) -> None:
        """Cancel device timers, flush pending writes and release the lines."""
        for device in self._devices.values():
            try:
                await device.close()
            except Exception as e:
                logger.warning(f"{device.id} did not close cleanly: {e}")

        await self.deps.store.close()
        if self.deps.notifier is not None:
            await self.deps.notifier.close()
        self.deps.lines.close()
        logger.info("Lock states flushed, GPIO lines released")

    def get_device(self, device_id: str) -> Device | None:
        return self._devices.get(device_id)

    def get_devices(
        self,
        device_type: DeviceType | None = None,
        status: DeviceStatus | None = None,
    ) -> list[Device]:
        """Devices in config order, optionally filtered by type and status."""
        return [
            d
            for d in self._devices.values()
            if (device_type is None or d.device_type == device_type)
            and (status is None or d.status == status)
        ]

    def get_lock(self, device_id: str) -> Lock | None:
        """Door lock or intercom by name."""
        device = self._devices.get(device_id)
        return device if isinstance(device, Lock) else None

    def get_locks(self) -> list[Lock]:
        return [d for d in self._devices.values() if isinstance(d, Lock)]

    def device_to_response(self, device: Device) -> dict[str, Any]:
        """Device summary plus the last value it published per characteristic."""
        return {
            "id": device.id,
            "name": device.name,
            "type": device.device_type.value,
            "status": device.status.value,
            "state": device.to_state_dict(),
            "characteristics": self.deps.sink.for_device(device.id),
        }
