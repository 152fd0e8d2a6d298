"""Query handlers for Intercom Door."""

from typing import Any

from devices.manager import DeviceManager
from models import DeviceType


class QueryHandlers:
    """Handlers for query tools."""

    def __init__(self, device_manager: DeviceManager):
        self.device_manager = device_manager

    async def list_devices(self, args: dict[str, Any]) -> dict[str, Any]:
        """List devices with an optional type filter."""
        device_type = None
        if "device_type" in args:
            try:
                device_type = DeviceType(args["device_type"])
            except ValueError:
                return {"error": f"Invalid device type: {args['device_type']}"}

        devices = self.device_manager.get_devices(device_type=device_type)
        return {
            "devices": [
                {
                    "id": d.id,
                    "name": d.name,
                    "type": d.device_type.value,
                    "status": d.status.value,
                }
                for d in devices
            ]
        }

    async def get_device_state(self, args: dict[str, Any]) -> dict[str, Any]:
        """Get detailed device state."""
        device_id = args["device_id"]
        device = self.device_manager.get_device(device_id)
        if device is None:
            return {"error": f"Device not found: {device_id}"}

        return self.device_manager.device_to_response(device)
