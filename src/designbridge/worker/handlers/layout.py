"""Auto layout, sizing, constraints and viewport commands."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from designbridge.worker.document import (
    AUTO_LAYOUT_TYPES,
    CONSTRAINT_PARENT_TYPES,
    FILL,
    GROUP,
    HUG,
    TEXT,
    Document,
    DocumentError,
    Node,
    layout_children,
    reflow,
)
from designbridge.worker.handlers.query import auto_layout, describe
from designbridge.worker.params import (
    NodeParams,
    SetAutoLayoutParams,
    SetConstraintsParams,
    SetSizingModeParams,
    ZoomToFitParams,
)
from designbridge.worker.results import CommandResult, ok

if TYPE_CHECKING:
    from designbridge.worker.registry import CommandRegistry


async def set_auto_layout(document: Document, params: SetAutoLayoutParams) -> CommandResult:
    node = document.find(params.node_id)
    if node is None or node.type not in AUTO_LAYOUT_TYPES:
        raise DocumentError("Node not found or not a frame")
    node.layout_mode = params.direction
    node.item_spacing = params.spacing
    node.padding = params.padding
    if params.alignment:
        node.primary_axis_align = params.alignment
    if params.counter_alignment:
        node.counter_axis_align = params.counter_alignment
    layout_children(node)
    reflow(node)
    return ok(nodeId=node.id, layoutMode=node.layout_mode, itemSpacing=node.item_spacing)


def _check_sizing(node: Node, mode: str) -> None:
    if mode == HUG and not (node.type == TEXT or node.is_auto_layout):
        raise DocumentError("HUG sizing needs an auto-layout frame or a text node")
    if mode == FILL and (node.parent is None or not node.parent.is_auto_layout):
        raise DocumentError("FILL sizing needs an auto-layout parent")


async def set_sizing_mode(document: Document, params: SetSizingModeParams) -> CommandResult:
    node = document.require(params.node_id)
    if node.type == GROUP:
        raise DocumentError("Node does not support sizing modes")
    for mode in (params.horizontal, params.vertical):
        if mode is not None:
            _check_sizing(node, mode)
    if params.horizontal:
        node.sizing_horizontal = params.horizontal
    if params.vertical:
        node.sizing_vertical = params.vertical
    layout_children(node)
    reflow(node)
    return ok(
        nodeId=node.id,
        horizontalSizing=node.sizing_horizontal,
        verticalSizing=node.sizing_vertical,
    )


async def set_constraints(document: Document, params: SetConstraintsParams) -> CommandResult:
    node = document.require(params.node_id)
    if params.horizontal:
        node.constraints["horizontal"] = params.horizontal
    if params.vertical:
        node.constraints["vertical"] = params.vertical
    return ok(nodeId=node.id, constraints=dict(node.constraints))


async def analyze_node(document: Document, params: NodeParams) -> CommandResult:
    node = document.require(params.node_id)
    parent = node.parent
    in_auto_layout = parent is not None and parent.is_auto_layout
    constraints_apply = (
        parent is not None and parent.type in CONSTRAINT_PARENT_TYPES and not in_auto_layout
    )

    notes = []
    if in_auto_layout:
        notes.append(
            "Position is set by the parent's auto layout; x and y edits are overwritten. "
            "Reorder with reparent_node or turn the parent's auto layout off."
        )
    elif constraints_apply:
        notes.append("Constraints decide how this node moves when its parent is resized.")
    if node.is_auto_layout:
        notes.append("Children of this node are positioned by its auto layout.")

    context = {
        "parentId": parent.id if parent else None,
        "parentName": parent.name if parent else None,
        "parentType": parent.type if parent else None,
        "inAutoLayout": in_auto_layout,
        "parentAutoLayout": auto_layout(parent) if in_auto_layout else None,
    }
    return ok(
        node=describe(node),
        layoutContext=context,
        sizing={"horizontal": node.sizing_horizontal, "vertical": node.sizing_vertical},
        constraints=dict(node.constraints),
        constraintsApply=constraints_apply,
        canBePositionedFreely=not in_auto_layout,
        isAutoLayoutContainer=node.is_auto_layout,
        notes=notes,
    )


async def zoom_to_fit(document: Document, params: ZoomToFitParams) -> CommandResult:
    node_ids = params.node_ids if params.node_ids is not None else document.selection
    nodes = [node for node in (document.find(node_id) for node_id in node_ids) if node is not None]
    if not nodes:
        nodes = list(document.page.children)

    if nodes:
        corners = [node.absolute_position() for node in nodes]
        min_x = min(x for x, _ in corners)
        min_y = min(y for _, y in corners)
        max_x = max(x + node.width for (x, _), node in zip(corners, nodes))
        max_y = max(y + node.height for (_, y), node in zip(corners, nodes))
        document.viewport = {"x": min_x, "y": min_y, "width": max_x - min_x, "height": max_y - min_y}
    return ok(zoomedToNodes=len(nodes), viewport=document.viewport)


def register(registry: CommandRegistry, document: Document) -> None:
    registry.add("set_auto_layout", partial(set_auto_layout, document), SetAutoLayoutParams)
    registry.add("set_sizing_mode", partial(set_sizing_mode, document), SetSizingModeParams)
    registry.add("set_constraints", partial(set_constraints, document), SetConstraintsParams)
    registry.add("analyze_node", partial(analyze_node, document), NodeParams)
    registry.add("zoom_to_fit", partial(zoom_to_fit, document), ZoomToFitParams)
