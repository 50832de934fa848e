"""designbridge: relay MCP tool calls to a design-document worker over WebSocket."""

__version__ = "0.1.0"
