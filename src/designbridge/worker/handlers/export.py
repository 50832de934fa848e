"""``export_node``: render a node and return it base64-encoded."""

from __future__ import annotations

import asyncio
import base64
from functools import partial
from typing import TYPE_CHECKING

from designbridge.worker import render
from designbridge.worker.document import Document, DocumentError, Node
from designbridge.worker.params import ExportNodeParams
from designbridge.worker.results import CommandResult, ok

if TYPE_CHECKING:
    from designbridge.worker.registry import CommandRegistry

MIME_TYPES = {
    "PNG": "image/png",
    "JPG": "image/jpeg",
    "SVG": "image/svg+xml",
    "PDF": "application/pdf",
}


def _target(document: Document, node_id: str | None) -> Node:
    if node_id:
        return document.require(node_id)
    for selected in document.selection:
        node = document.find(selected)
        if node is not None:
            return node
    raise DocumentError("No node specified and nothing selected")


async def export_node(document: Document, params: ExportNodeParams) -> CommandResult:
    node = _target(document, params.node_id)

    if params.format == "SVG":
        data = render.render_svg(node)
        size = {"width": node.width, "height": node.height}
    else:
        width, height = render.raster_size(node, params.scale)
        shapes = render.flatten(node)
        data = await asyncio.to_thread(
            render.render_raster, shapes, (width, height), params.scale, params.format
        )
        if params.format == "PDF":
            size = {"width": node.width, "height": node.height}
        else:
            size = {"width": width, "height": height}

    return ok(
        nodeId=node.id,
        nodeName=node.name,
        format=params.format,
        scale=params.scale,
        size=size,
        mimeType=MIME_TYPES[params.format],
        base64=base64.b64encode(data).decode("ascii"),
    )


def register(registry: CommandRegistry, document: Document) -> None:
    registry.add("export_node", partial(export_node, document), ExportNodeParams)
