"""MCP tool definitions for Intercom Door.

Tools mirror the accessory characteristics: LockCurrentState and
LockTargetState for locks, ContactSensorState for door and bell sensors.
"""

from mcp.types import Tool

TOOL_CATEGORIES = {
    "query": {
        "name": "Query",
        "description": "Tools for listing devices and reading their state",
        "tags": ["query", "list", "get", "state", "devices"],
        "tools": ["list_devices", "get_device_state"],
    },
    "locks": {
        "name": "Door Locks",
        "description": "Tools for reading and setting lock state (security-sensitive)",
        "tags": ["locks", "doors", "security", "lock", "unlock", "contact", "bell"],
        "tools": ["get_lock_state", "set_lock_target_state", "get_contact_state"],
    },
}


def _add_examples(schema: dict, examples: list[dict]) -> dict:
    """Add input examples to a tool schema."""
    schema["examples"] = examples
    return schema


def _device_schema(examples: list[dict]) -> dict:
    return _add_examples(
        {
            "type": "object",
            "properties": {
                "device_id": {
                    "type": "string",
                    "description": "Device name from config.yaml",
                },
            },
            "required": ["device_id"],
        },
        examples,
    )


def get_query_tools() -> list[Tool]:
    """Get query tool definitions."""
    return [
        Tool(
            name="list_devices",
            description="List configured locks and intercoms with their status.",
            inputSchema={
                "type": "object",
                "properties": {
                    "device_type": {
                        "type": "string",
                        "enum": ["lock", "intercom"],
                        "description": "Filter by device type (optional)",
                    },
                },
            },
        ),
        Tool(
            name="get_device_state",
            description=(
                "Get full state of one device, including the last value published "
                "for each characteristic."
            ),
            inputSchema=_device_schema([{"device_id": "Front Door"}]),
        ),
    ]


def get_lock_tools() -> list[Tool]:
    """Get lock tool definitions with input examples."""
    return [
        Tool(
            name="get_lock_state",
            description=(
                "Get LockCurrentState and LockTargetState of a lock: "
                "unsecured, secured, jammed or unknown."
            ),
            inputSchema=_device_schema([{"device_id": "Front Door"}]),
        ),
        Tool(
            name="set_lock_target_state",
            description=(
                "Set LockTargetState. 'unsecured' releases the lock. "
                "SECURITY SENSITIVE - verify intent before unlocking. "
                "Locks with memory cannot be locked remotely and only flash secured."
            ),
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "device_id": {
                            "type": "string",
                            "description": "Device name from config.yaml",
                        },
                        "state": {
                            "type": "string",
                            "enum": ["secured", "unsecured"],
                            "description": "Requested target state",
                        },
                    },
                    "required": ["device_id", "state"],
                },
                [
                    {"device_id": "Front Door", "state": "unsecured"},
                    {"device_id": "Gate", "state": "secured"},
                ],
            ),
        ),
        Tool(
            name="get_contact_state",
            description=(
                "Get ContactSensorState: the door sensor of a lock "
                "(1 = open) or the bell line of an intercom (1 = ringing)."
            ),
            inputSchema=_device_schema([{"device_id": "Intercom Door"}]),
        ),
    ]


def get_all_tools() -> list[Tool]:
    """Get all tool definitions."""
    return get_query_tools() + get_lock_tools()
