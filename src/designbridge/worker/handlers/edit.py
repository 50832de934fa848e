"""Single-node property edits and tree operations.

These raise DocumentError on failure; the dispatcher turns that into an
error reply and the batch interpreter into a failed entry.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from designbridge.worker.document import (
    CORNER_RADIUS,
    FILLS,
    GROUP,
    OPACITY,
    STROKE_WEIGHT,
    STROKES,
    TEXT,
    Document,
    DocumentError,
    Node,
    solid_paint,
)
from designbridge.worker.handlers.nodes import fit_text
from designbridge.worker.params import (
    AddEffectParams,
    AddStrokeParams,
    AlignNodesParams,
    DistributeNodesParams,
    DuplicateNodeParams,
    GroupNodesParams,
    MoveNodeParams,
    NodeListParams,
    NodeParams,
    ReparentNodeParams,
    ResizeNodeParams,
    SetCornerRadiusParams,
    SetFillColorParams,
    SetOpacityParams,
    SetTextParams,
    SetTextStyleParams,
)
from designbridge.worker.results import CommandResult, ok

if TYPE_CHECKING:
    from designbridge.worker.registry import CommandRegistry


def _existing(document: Document, node_ids: list[str], minimum: int, verb: str) -> list[Node]:
    nodes = [node for node in (document.find(node_id) for node_id in node_ids) if node is not None]
    if len(nodes) < minimum:
        raise DocumentError(f"Need at least {minimum} nodes to {verb}")
    return nodes


async def move_node(document: Document, params: MoveNodeParams) -> CommandResult:
    node = document.require(params.node_id)
    node.x = params.x
    node.y = params.y
    return ok(nodeId=node.id, newPosition={"x": node.x, "y": node.y})


async def resize_node(document: Document, params: ResizeNodeParams) -> CommandResult:
    node = document.require(params.node_id)
    document.resize(node, params.width, params.height)
    return ok(nodeId=node.id, newSize={"width": node.width, "height": node.height})


async def set_fill_color(document: Document, params: SetFillColorParams) -> CommandResult:
    node = document.require(params.node_id)
    color = params.color.model_dump()
    document.set_property(node, FILLS, [solid_paint(color)])
    return ok(nodeId=node.id, color=color)


async def add_stroke(document: Document, params: AddStrokeParams) -> CommandResult:
    node = document.require(params.node_id)
    color = params.color.model_dump()
    document.set_property(node, STROKES, [solid_paint(color)])
    document.set_property(node, STROKE_WEIGHT, params.weight)
    return ok(nodeId=node.id, strokeColor=color, strokeWeight=node.stroke_weight)


async def set_corner_radius(document: Document, params: SetCornerRadiusParams) -> CommandResult:
    node = document.require(params.node_id)
    document.set_property(node, CORNER_RADIUS, params.radius)
    return ok(nodeId=node.id, cornerRadius=node.corner_radius)


async def set_opacity(document: Document, params: SetOpacityParams) -> CommandResult:
    node = document.require(params.node_id)
    document.set_property(node, OPACITY, params.opacity)
    return ok(nodeId=node.id, opacity=node.opacity)


async def set_text(document: Document, params: SetTextParams) -> CommandResult:
    node = document.require(params.node_id)
    if node.type != TEXT:
        raise DocumentError("Node is not a text node")
    node.characters = params.text
    fit_text(node)
    return ok(nodeId=node.id, text=node.characters)


_SHADOWS = ("DROP_SHADOW", "INNER_SHADOW")


async def add_effect(document: Document, params: AddEffectParams) -> CommandResult:
    node = document.require(params.node_id)
    if node.type == GROUP:
        raise DocumentError("Node does not support effects")
    if params.type in _SHADOWS:
        color = params.color.model_dump() if params.color else {"r": 0, "g": 0, "b": 0, "a": 0.25}
        offset = params.offset.model_dump() if params.offset else {"x": 0, "y": 4}
        effect = {
            "type": params.type,
            "color": color,
            "offset": offset,
            "radius": params.radius,
            "spread": params.spread,
            "visible": True,
            "blendMode": "NORMAL",
        }
    else:
        effect = {"type": params.type, "radius": params.radius, "visible": True}
    node.effects.append(effect)
    return ok(nodeId=node.id, effectType=params.type, effectCount=len(node.effects))


async def set_text_style(document: Document, params: SetTextStyleParams) -> CommandResult:
    node = document.require(params.node_id)
    if node.type != TEXT:
        raise DocumentError("Node is not a text node")
    if params.text_align:
        node.text_align = params.text_align
    if params.line_height is not None:
        # Small values are multipliers, larger ones are pixels.
        if params.line_height < 10:
            node.line_height = {"value": params.line_height * 100, "unit": "PERCENT"}
        else:
            node.line_height = {"value": params.line_height, "unit": "PIXELS"}
    if params.letter_spacing is not None:
        node.letter_spacing = params.letter_spacing
    if params.text_decoration:
        node.text_decoration = params.text_decoration
    fit_text(node)
    return ok(
        nodeId=node.id,
        textAlign=node.text_align,
        lineHeight=node.line_height,
        letterSpacing={"value": node.letter_spacing, "unit": "PIXELS"},
        textDecoration=node.text_decoration,
    )


async def delete_node(document: Document, params: NodeParams) -> CommandResult:
    node = document.require(params.node_id)
    name = node.name
    document.remove(node)
    return ok(deletedNodeId=params.node_id, deletedName=name)


async def duplicate_node(document: Document, params: DuplicateNodeParams) -> CommandResult:
    node = document.require(params.node_id)
    twin = document.clone(node)
    twin.x = node.x + params.offset_x
    twin.y = node.y + params.offset_y
    return ok(
        originalId=node.id,
        newNodeId=twin.id,
        name=twin.name,
        position={"x": twin.x, "y": twin.y},
    )


async def reparent_node(document: Document, params: ReparentNodeParams) -> CommandResult:
    node = document.require(params.node_id)
    new_parent = document.find(params.new_parent_id)
    if new_parent is None or not new_parent.is_container:
        raise DocumentError("New parent not found or cannot contain children")
    document.append(new_parent, node, params.index)
    return ok(nodeId=node.id, newParentId=new_parent.id, newParentName=new_parent.name)


async def group_nodes(document: Document, params: GroupNodesParams) -> CommandResult:
    nodes = _existing(document, params.node_ids, 2, "group")
    if len({id(node.parent) for node in nodes}) > 1:
        raise DocumentError("Nodes to group must share a parent")
    group = document.group(nodes, params.name)
    return ok(groupId=group.id, name=group.name, childCount=len(nodes))


async def align_nodes(document: Document, params: AlignNodesParams) -> CommandResult:
    nodes = _existing(document, params.node_ids, 2, "align")
    min_x = min(n.x for n in nodes)
    max_x = max(n.x + n.width for n in nodes)
    min_y = min(n.y for n in nodes)
    max_y = max(n.y + n.height for n in nodes)
    center_x = (min_x + max_x) / 2
    center_y = (min_y + max_y) / 2

    for node in nodes:
        if params.alignment == "LEFT":
            node.x = min_x
        elif params.alignment == "CENTER_H":
            node.x = center_x - node.width / 2
        elif params.alignment == "RIGHT":
            node.x = max_x - node.width
        elif params.alignment == "TOP":
            node.y = min_y
        elif params.alignment == "CENTER_V":
            node.y = center_y - node.height / 2
        else:
            node.y = max_y - node.height

    return ok(alignedCount=len(nodes), alignment=params.alignment)


async def distribute_nodes(document: Document, params: DistributeNodesParams) -> CommandResult:
    nodes = _existing(document, params.node_ids, 2, "distribute")
    horizontal = params.direction == "HORIZONTAL"
    nodes.sort(key=lambda n: n.x if horizontal else n.y)

    if params.spacing is not None:
        gap = params.spacing
    else:
        first, last = nodes[0], nodes[-1]
        if horizontal:
            span = last.x + last.width - first.x
            occupied = sum(n.width for n in nodes)
        else:
            span = last.y + last.height - first.y
            occupied = sum(n.height for n in nodes)
        gap = (span - occupied) / (len(nodes) - 1)

    position = nodes[0].x if horizontal else nodes[0].y
    for node in nodes:
        if horizontal:
            node.x = position
            position += node.width + gap
        else:
            node.y = position
            position += node.height + gap

    return ok(distributedCount=len(nodes), direction=params.direction)


async def set_selection(document: Document, params: NodeListParams) -> CommandResult:
    document.selection = [node_id for node_id in params.node_ids if document.find(node_id)]
    return ok(selectedCount=len(document.selection))


def register(registry: CommandRegistry, document: Document) -> None:
    registry.add("move_node", partial(move_node, document), MoveNodeParams)
    registry.add("resize_node", partial(resize_node, document), ResizeNodeParams)
    registry.add("set_fill_color", partial(set_fill_color, document), SetFillColorParams)
    registry.add("add_stroke", partial(add_stroke, document), AddStrokeParams)
    registry.add("set_corner_radius", partial(set_corner_radius, document), SetCornerRadiusParams)
    registry.add("set_opacity", partial(set_opacity, document), SetOpacityParams)
    registry.add("set_text", partial(set_text, document), SetTextParams)
    registry.add("add_effect", partial(add_effect, document), AddEffectParams)
    registry.add("set_text_style", partial(set_text_style, document), SetTextStyleParams)
    registry.add("delete_node", partial(delete_node, document), NodeParams)
    registry.add("duplicate_node", partial(duplicate_node, document), DuplicateNodeParams)
    registry.add("reparent_node", partial(reparent_node, document), ReparentNodeParams)
    registry.add("group_nodes", partial(group_nodes, document), GroupNodesParams)
    registry.add("align_nodes", partial(align_nodes, document), AlignNodesParams)
    registry.add("distribute_nodes", partial(distribute_nodes, document), DistributeNodesParams)
    registry.add("set_selection", partial(set_selection, document), NodeListParams)
