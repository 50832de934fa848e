"""Read-only document queries."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from designbridge.worker.document import TEXT, Document, DocumentError, Node
from designbridge.worker.params import (
    FindNodesParams,
    GetTreeParams,
    ListNodesParams,
    NodeParams,
)
from designbridge.worker.results import CommandResult, ok

if TYPE_CHECKING:
    from designbridge.worker.registry import CommandRegistry


def describe(node: Node) -> dict[str, Any]:
    """Full property view of one node."""
    info = node.summary()
    absolute_x, absolute_y = node.absolute_position()
    info.update(
        parentId=node.parent.id if node.parent else None,
        absolutePosition={"x": absolute_x, "y": absolute_y},
        visible=node.visible,
        opacity=node.opacity,
        fills=node.fills,
        strokes=node.strokes,
        strokeWeight=node.stroke_weight,
        cornerRadius=node.corner_radius,
        childCount=len(node.children),
        constraints=dict(node.constraints),
        effects=node.effects,
        sizing={"horizontal": node.sizing_horizontal, "vertical": node.sizing_vertical},
    )
    if node.is_auto_layout:
        info["autoLayout"] = auto_layout(node)
    if node.component_id:
        info["componentId"] = node.component_id
    if node.type == TEXT:
        info.update(
            text=node.characters,
            fontSize=node.font_size,
            fontWeight=node.font_weight,
            textAlign=node.text_align,
            lineHeight=node.line_height,
            letterSpacing=node.letter_spacing,
            textDecoration=node.text_decoration,
        )
    return info


def auto_layout(node: Node) -> dict[str, Any]:
    return {
        "layoutMode": node.layout_mode,
        "itemSpacing": node.item_spacing,
        "padding": node.padding,
        "primaryAxisAlign": node.primary_axis_align,
        "counterAxisAlign": node.counter_axis_align,
    }


def _tree(node: Node, depth: int) -> dict[str, Any]:
    entry = node.summary()
    if node.children:
        if depth > 0:
            entry["children"] = [_tree(child, depth - 1) for child in node.children]
        else:
            entry["childCount"] = len(node.children)
    return entry


async def list_nodes(document: Document, params: ListNodesParams) -> CommandResult:
    if params.parent_id:
        parent = document.find(params.parent_id)
        if parent is None or not parent.is_container:
            raise DocumentError("Parent not found or has no children")
    else:
        parent = document.page
    nodes = [child.summary() for child in parent.children]
    return ok(nodes=nodes, count=len(nodes))


async def get_node(document: Document, params: NodeParams) -> CommandResult:
    return ok(node=describe(document.require(params.node_id)))


async def get_selection(document: Document, params: Any = None) -> CommandResult:
    selection = [
        {"id": node.id, "name": node.name, "type": node.type}
        for node in (document.find(node_id) for node_id in document.selection)
        if node is not None
    ]
    return ok(selection=selection, count=len(selection))


async def find_nodes(document: Document, params: FindNodesParams) -> CommandResult:
    root = document.container(params.parent_id)
    needle = params.name_contains.lower() if params.name_contains else None
    matches = []
    for node in root.walk():
        if node is root:
            continue
        if params.type and node.type != params.type.upper():
            continue
        if params.name is not None and node.name != params.name:
            continue
        if needle and needle not in node.name.lower():
            continue
        matches.append(node.summary())
        if len(matches) >= params.max_results:
            break
    return ok(nodes=matches, count=len(matches))


async def get_tree(document: Document, params: GetTreeParams) -> CommandResult:
    root = document.require(params.node_id) if params.node_id else document.page
    return ok(tree=_tree(root, params.depth))


def register(registry: CommandRegistry, document: Document) -> None:
    registry.add("list_nodes", partial(list_nodes, document), ListNodesParams)
    registry.add("get_node", partial(get_node, document), NodeParams)
    registry.add("get_selection", partial(get_selection, document))
    registry.add("find_nodes", partial(find_nodes, document), FindNodesParams)
    registry.add("get_tree", partial(get_tree, document), GetTreeParams)
