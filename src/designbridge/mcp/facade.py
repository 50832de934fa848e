"""Tool façade: turns tool calls into bridge requests and renders replies."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from designbridge.mcp.tools import CONNECTION_STATUS_TOOL

if TYPE_CHECKING:
    from designbridge.bridge.runtime import BridgeRuntime

log = logging.getLogger(__name__)

EXPORT_TOOL = "export_node"
RASTER_MIME_TYPES = frozenset({"image/png", "image/jpeg"})
EMBEDDED_MIME_TYPES = frozenset({"image/svg+xml", "application/pdf"})
_EXPORT_METADATA = ("nodeId", "nodeName", "format", "scale", "size")


@dataclass
class ToolResponse:
    """Content blocks for one tool call, in MCP wire shape."""

    content: list[dict[str, Any]] = field(default_factory=list)
    is_error: bool = False

    def text(self) -> str:
        return "\n".join(block["text"] for block in self.content if block.get("type") == "text")

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "isError": self.is_error}


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def text_response(value: Any) -> ToolResponse:
    return ToolResponse(content=[{"type": "text", "text": _compact(value)}])


def error_response(message: str) -> ToolResponse:
    return ToolResponse(content=[{"type": "text", "text": f"Error: {message}"}], is_error=True)


def render_export(result: dict[str, Any]) -> ToolResponse:
    """Split an export result into image and metadata blocks."""
    mime_type = result.get("mimeType")
    content: list[dict[str, Any]] = []
    if mime_type in RASTER_MIME_TYPES:
        content.append({"type": "image", "data": result["base64"], "mimeType": mime_type})

    metadata: dict[str, Any] = {"success": True}
    metadata.update((key, result.get(key)) for key in _EXPORT_METADATA)
    if mime_type in EMBEDDED_MIME_TYPES:
        metadata["base64"] = result["base64"]
    content.append({"type": "text", "text": _compact(metadata)})
    return ToolResponse(content=content)


class ToolFacade:
    """Maps every tool name onto a bridge request.

    The connection status tool is answered from the runtime without
    touching the channel. Errors never escape :meth:`call_tool`.
    """

    def __init__(self, runtime: BridgeRuntime) -> None:
        self.runtime = runtime

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResponse:
        if name == CONNECTION_STATUS_TOOL:
            return text_response(self.runtime.status())

        try:
            result = await self.runtime.send(name, arguments or {})
        except Exception as e:
            log.info("Tool %s failed: %s", name, e)
            return error_response(str(e) or type(e).__name__)

        if (
            name == EXPORT_TOOL
            and isinstance(result, dict)
            and result.get("success")
            and result.get("base64")
        ):
            return render_export(result)
        return text_response(result)
