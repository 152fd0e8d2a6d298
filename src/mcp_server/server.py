"""MCP server exposing the lock accessories to a bridge."""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent

from devices.manager import DeviceManager
from mcp_server.handlers import LockHandlers, QueryHandlers
from mcp_server.tools import get_all_tools
from utils.errors import (
    DEFAULT_HANDLER_TIMEOUT,
    ErrorCategory,
    ToolError,
    classify_exception,
    generate_request_id,
)

logger = logging.getLogger(__name__)

TOOL_TIMEOUT = DEFAULT_HANDLER_TIMEOUT

Handler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


class IntercomDoorMcpServer:
    """Routes MCP tool calls to the lock and query handlers."""

    def __init__(self, device_manager: DeviceManager):
        self.device_manager = device_manager
        self.query = QueryHandlers(device_manager)
        self.locks = LockHandlers(device_manager)

        self._routes: dict[str, Handler] = {
            "list_devices": self.query.list_devices,
            "get_device_state": self.query.get_device_state,
            "get_lock_state": self.locks.get_lock_state,
            "set_lock_target_state": self.locks.set_lock_target_state,
            "get_contact_state": self.locks.get_contact_state,
        }

        self.server = Server("intercom-door")
        self._register()

    def _register(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list:
            return get_all_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            result = await self.dispatch(name, arguments or {})
            return [TextContent(type="text", text=json.dumps(result, indent=2))]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Run one tool call. Always returns a dict, errors included."""
        request_id = generate_request_id()
        device_id = arguments.get("device_id")
        logger.info(f"[{request_id}] {name} (device={device_id or '-'})")

        handler = self._routes.get(name)
        if handler is None:
            return {"error": f"Unknown tool: {name}"}

        try:
            async with asyncio.timeout(TOOL_TIMEOUT):
                result = await handler(arguments)
        except asyncio.TimeoutError:
            logger.error(f"[{request_id}] {name} gave up after {TOOL_TIMEOUT}s")
            error = ToolError.of(
                ErrorCategory.TIMEOUT, f"No result after {TOOL_TIMEOUT} seconds", device_id
            )
        except Exception as e:
            logger.exception(f"[{request_id}] {name} failed: {e}")
            error = classify_exception(e, device_id)
        else:
            if "error" not in result:
                result["request_id"] = request_id
            logger.info(f"[{request_id}] {name} done")
            return result

        error.request_id = request_id
        return error.to_dict()

    async def run(self) -> None:
        """Serve over stdio until the client disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream, write_stream, self.server.create_initialization_options()
            )


def create_server(device_manager: DeviceManager) -> IntercomDoorMcpServer:
    return IntercomDoorMcpServer(device_manager)
