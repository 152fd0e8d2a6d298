"""MCP tool handlers for Intercom Door."""

from mcp_server.handlers.locks import LockHandlers
from mcp_server.handlers.query import QueryHandlers

__all__ = [
    "LockHandlers",
    "QueryHandlers",
]
