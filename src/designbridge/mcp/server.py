"""MCP stdio server exposing the tool catalog through the façade."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from designbridge import __version__
from designbridge.bridge.runtime import BridgeRuntime
from designbridge.bridge.server import Listener
from designbridge.mcp.facade import ToolFacade
from designbridge.mcp.tools import list_tools

if TYPE_CHECKING:
    from designbridge.config.schema import Config

log = logging.getLogger(__name__)

SERVER_NAME = "designbridge"


def create_server(facade: ToolFacade) -> Server:
    """Build the MCP server bound to ``facade``.

    ``tools/call`` is registered directly so the façade's error flag reaches
    the client unchanged.
    """
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_tools()

    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        response = await facade.call_tool(request.params.name, request.params.arguments or {})
        return types.ServerResult(types.CallToolResult.model_validate(response.to_dict()))

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server


async def run_bridge(config: Config) -> None:
    """Run the listener and serve MCP over stdio until stdin closes."""
    runtime = BridgeRuntime(config.bridge)
    server = create_server(ToolFacade(runtime))

    listener = Listener(runtime)
    await listener.start(config.bridge.host, config.bridge.port)
    try:
        async with stdio_server() as (read_stream, write_stream):
            log.info("MCP server ready on stdio")
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await runtime.close()
        await listener.stop()
