"""Tests for MCP handlers."""

import pytest

from config import AppConfig
from devices import register_all_factories
from devices.manager import DeviceDeps, DeviceManager
from mcp_server.handlers import LockHandlers, QueryHandlers
from mcp_server.server import IntercomDoorMcpServer
from mcp_server.tools import TOOL_CATEGORIES, get_all_tools


@pytest.fixture
async def device_manager(lines, store, sink, notifier) -> DeviceManager:
    """Create a device manager with a lock with memory and an intercom."""
    config = AppConfig.model_validate(
        {
            "devices": [
                {"name": "Front Door", "relay_pin": 5, "door_pin": 6},
                {"name": "Gate", "relay_pin": 12, "lock_with_memory": False},
                {"type": "intercom"},
            ]
        }
    )
    manager = DeviceManager(config, DeviceDeps(lines, store, sink, notifier))
    register_all_factories(manager)
    await manager.initialize()
    yield manager
    for device in manager.get_devices():
        await device.close()


class TestTools:
    """Tests for tool definitions."""

    def test_every_tool_is_categorized(self):
        """Test categories list exactly the defined tools."""
        names = {tool.name for tool in get_all_tools()}
        categorized = {name for c in TOOL_CATEGORIES.values() for name in c["tools"]}
        assert names == categorized


class TestQueryHandlers:
    """Tests for query handlers."""

    @pytest.mark.asyncio
    async def test_list_devices(self, device_manager):
        """Test listing all devices."""
        result = await QueryHandlers(device_manager).list_devices({})

        assert [d["id"] for d in result["devices"]] == ["Front Door", "Gate", "Intercom Door"]
        assert all(d["status"] == "online" for d in result["devices"])

    @pytest.mark.asyncio
    async def test_list_devices_by_type(self, device_manager):
        """Test filtering by device type."""
        result = await QueryHandlers(device_manager).list_devices({"device_type": "intercom"})
        assert [d["id"] for d in result["devices"]] == ["Intercom Door"]

    @pytest.mark.asyncio
    async def test_list_devices_invalid_type(self, device_manager):
        """Test an unknown device type."""
        result = await QueryHandlers(device_manager).list_devices({"device_type": "toaster"})
        assert "error" in result

    @pytest.mark.asyncio
    async def test_get_device_state(self, device_manager):
        """Test full device state."""
        result = await QueryHandlers(device_manager).get_device_state({"device_id": "Gate"})

        assert result["id"] == "Gate"
        assert result["state"]["lock_with_memory"] is False
        assert "LockCurrentState" in result["characteristics"]

    @pytest.mark.asyncio
    async def test_get_device_state_not_found(self, device_manager):
        """Test an unknown device."""
        result = await QueryHandlers(device_manager).get_device_state({"device_id": "Nope"})
        assert "error" in result


class TestLockHandlers:
    """Tests for lock handlers."""

    @pytest.mark.asyncio
    async def test_get_lock_state(self, device_manager):
        """Test reading lock state."""
        result = await LockHandlers(device_manager).get_lock_state({"device_id": "Front Door"})

        assert result["current_state"] == "secured"
        assert result["target_state"] == "secured"
        assert result["device_status"] == "online"

    @pytest.mark.asyncio
    async def test_unlock(self, device_manager, lines):
        """Test unlocking through the handler."""
        result = await LockHandlers(device_manager).set_lock_target_state(
            {"device_id": "Gate", "state": "unsecured"}
        )

        assert result["success"] is True
        assert result["current_state"] == "unsecured"
        assert (12, 0) in lines.writes

    @pytest.mark.asyncio
    async def test_invalid_state(self, device_manager, lines):
        """Test an unsupported target state."""
        result = await LockHandlers(device_manager).set_lock_target_state(
            {"device_id": "Gate", "state": "jammed"}
        )

        assert result["error_category"] == "invalid_input"
        assert lines.writes == []

    @pytest.mark.asyncio
    async def test_lock_not_found(self, device_manager):
        """Test an unknown lock."""
        result = await LockHandlers(device_manager).set_lock_target_state(
            {"device_id": "Back Door", "state": "secured"}
        )

        assert result["error_category"] == "device_not_found"
        assert "recovery" in result

    @pytest.mark.asyncio
    async def test_hardware_failure(self, device_manager, lines):
        """A relay failure is a structured error, never an exception."""
        lines.fail_writes = True
        result = await LockHandlers(device_manager).set_lock_target_state(
            {"device_id": "Gate", "state": "unsecured"}
        )

        assert result["error_category"] == "hardware_io"
        assert result["device_id"] == "Gate"
        assert device_manager.get_lock("Gate").get_current_state().name == "UNKNOWN"

    @pytest.mark.asyncio
    async def test_contact_state(self, device_manager, lines):
        """Test contact state for a door sensor and a bell line."""
        handlers = LockHandlers(device_manager)

        door = await handlers.get_contact_state({"device_id": "Front Door"})
        assert door["contact_state"] == 0

        lines.levels[17] = 1
        bell = await handlers.get_contact_state({"device_id": "Intercom Door"})
        assert bell["contact_state"] == 1

        plain = await handlers.get_contact_state({"device_id": "Gate"})
        assert plain["contact_state"] is None


class TestServerDispatch:
    """Tests for tool routing and error wrapping."""

    @pytest.mark.asyncio
    async def test_request_id_added(self, device_manager):
        """Test successful responses carry a request ID."""
        server = IntercomDoorMcpServer(device_manager)
        result = await server.dispatch("get_lock_state", {"device_id": "Gate"})

        assert len(result["request_id"]) == 8
        assert result["current_state"] == "unknown"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, device_manager):
        """Test an unknown tool name."""
        server = IntercomDoorMcpServer(device_manager)
        result = await server.dispatch("open_sesame", {})
        assert result == {"error": "Unknown tool: open_sesame"}

    @pytest.mark.asyncio
    async def test_handler_exception_is_classified(self, device_manager):
        """A missing argument comes back as a structured error."""
        server = IntercomDoorMcpServer(device_manager)
        result = await server.dispatch("get_lock_state", {})

        assert result["error_category"] == "internal_error"
        assert "request_id" in result
