"""MCP surface: tool catalog, façade and stdio server."""

from designbridge.mcp.facade import ToolFacade, ToolResponse
from designbridge.mcp.server import create_server, run_bridge
from designbridge.mcp.tools import TOOLS, ToolInfo

__all__ = ["TOOLS", "ToolFacade", "ToolInfo", "ToolResponse", "create_server", "run_bridge"]
