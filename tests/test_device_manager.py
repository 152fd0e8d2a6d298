"""Tests for the device manager."""

import pytest

from config import AppConfig
from devices import register_all_factories
from devices.door_lock import DoorLock
from devices.intercom import IntercomDoor
from devices.manager import DeviceDeps, DeviceManager
from models import DeviceStatus, DeviceType
from models.lock import LockStateCode
from persistence import StateStore
from utils.errors import HardwareIOError


@pytest.fixture
def app_config() -> AppConfig:
    """Create a config with one of each device kind."""
    return AppConfig.model_validate(
        {
            "devices": [
                {"name": "Front Door", "relay_pin": 5, "door_pin": 6},
                {"name": "Gate", "relay_pin": 12, "lock_with_memory": False},
                {"type": "intercom"},
            ]
        }
    )


@pytest.fixture
async def device_manager(app_config, lines, store, sink, notifier) -> DeviceManager:
    """Create and initialize a device manager on fake lines."""
    manager = DeviceManager(app_config, DeviceDeps(lines, store, sink, notifier))
    register_all_factories(manager)
    await manager.initialize()
    yield manager
    for device in manager.get_devices():
        await device.close()


class TestDeviceManager:
    """Tests for DeviceManager."""

    @pytest.mark.asyncio
    async def test_initialize_creates_devices(self, device_manager):
        """Test every configured device is built and started."""
        devices = device_manager.get_devices()

        assert len(devices) == 3
        assert all(d.status == DeviceStatus.ONLINE for d in devices)
        assert isinstance(device_manager.get_device("Front Door"), DoorLock)
        assert isinstance(device_manager.get_device("Intercom Door"), IntercomDoor)

    @pytest.mark.asyncio
    async def test_filters(self, device_manager):
        """Test filtering by type."""
        locks = device_manager.get_devices(device_type=DeviceType.LOCK)
        assert {d.id for d in locks} == {"Front Door", "Gate"}

        intercoms = device_manager.get_devices(device_type=DeviceType.INTERCOM)
        assert [d.id for d in intercoms] == ["Intercom Door"]

        assert len(device_manager.get_locks()) == 3

    @pytest.mark.asyncio
    async def test_get_missing(self, device_manager):
        """Test unknown IDs."""
        assert device_manager.get_device("Back Door") is None
        assert device_manager.get_lock("Back Door") is None

    @pytest.mark.asyncio
    async def test_device_response(self, device_manager):
        """Test the response includes published characteristics."""
        lock = device_manager.get_device("Front Door")
        response = device_manager.device_to_response(lock)

        assert response["id"] == "Front Door"
        assert response["type"] == "lock"
        assert response["status"] == "online"
        assert response["state"]["current_state"] == "secured"
        assert response["characteristics"]["LockCurrentState"] == LockStateCode.SECURED
        assert response["characteristics"]["ContactSensorState"] == 0

    @pytest.mark.asyncio
    async def test_start_failure_marks_offline(self, app_config, lines, store, sink):
        """A device whose lines cannot be claimed is kept, offline."""

        def broken_watch(pin, handler):
            raise HardwareIOError(pin, "watch")

        lines.watch_line = broken_watch
        manager = DeviceManager(app_config, DeviceDeps(lines, store, sink))
        register_all_factories(manager)
        await manager.initialize()

        assert manager.get_device("Front Door").status == DeviceStatus.OFFLINE
        assert manager.get_device("Gate").status == DeviceStatus.ONLINE
        assert manager.get_device("Intercom Door").status == DeviceStatus.OFFLINE

    @pytest.mark.asyncio
    async def test_unknown_type_skipped(self, app_config, lines, store, sink):
        """Test devices without a registered factory are skipped."""
        manager = DeviceManager(app_config, DeviceDeps(lines, store, sink))
        await manager.initialize()
        assert manager.get_devices() == []

    @pytest.mark.asyncio
    async def test_shutdown_releases_resources(self, app_config, lines, tmp_path, sink, notifier):
        """Test shutdown flushes the store and releases lines."""
        store = StateStore(tmp_path / "shutdown.db")
        await store.initialize()
        manager = DeviceManager(app_config, DeviceDeps(lines, store, sink, notifier))
        register_all_factories(manager)
        await manager.initialize()

        await manager.get_lock("Gate").set_target_state(LockStateCode.UNSECURED)
        await manager.shutdown()

        assert lines.closed
        assert not manager.get_device("Gate").relock.pending

        reopened = StateStore(tmp_path / "shutdown.db")
        await reopened.initialize()
        assert reopened.get_item("Gate") == LockStateCode.UNSECURED
        await reopened.close()
