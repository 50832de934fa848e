"""Declarative tool catalog: names, descriptions and JSON input schemas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mcp import types

CONNECTION_STATUS_TOOL = "get_connection_status"


@dataclass(frozen=True)
class ToolInfo:
    """One tool advertised to the MCP client."""

    name: str
    description: str
    input_schema: dict[str, Any]

    def to_mcp(self) -> types.Tool:
        return types.Tool(name=self.name, description=self.description, inputSchema=self.input_schema)


def _object(required: list[str] | None = None, **properties: dict[str, Any]) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _number(description: str) -> dict[str, Any]:
    return {"type": "number", "description": description}


def _string(description: str, enum: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "string", "description": description}
    if enum:
        schema["enum"] = enum
    return schema


def _rgb(description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "description": description,
        "properties": {"r": {"type": "number"}, "g": {"type": "number"}, "b": {"type": "number"}},
        "required": ["r", "g", "b"],
    }


def _ids(description: str) -> dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


_NODE_ID = _string("ID of the node")
_PARENT_ID = _string("ID of the parent frame (default: current page)")

TOOLS: tuple[ToolInfo, ...] = (
    ToolInfo(
        "batch",
        "Execute multiple design commands in one call, sequentially. "
        "Use $ref:id.field to reference results of earlier commands in the batch.",
        _object(
            ["commands"],
            commands={
                "type": "array",
                "description": "Commands to execute in order",
                "items": _object(
                    ["command"],
                    command=_string("Command name (e.g. 'create_frame', 'create_text')"),
                    params={"type": "object", "description": "Parameters for the command"},
                    id=_string("Optional ID to reference this result later via $ref:id.field"),
                ),
            },
        ),
    ),
    ToolInfo(
        "create_frame",
        "Create a new frame. Frames are containers for other elements.",
        _object(
            ["name"],
            name=_string("Name of the frame"),
            x=_number("X position (default: 0)"),
            y=_number("Y position (default: 0)"),
            width=_number("Width (default: 400)"),
            height=_number("Height (default: 300)"),
            fillColor=_rgb("Background color as RGB (0-1 range)"),
            parentId=_PARENT_ID,
        ),
    ),
    ToolInfo(
        "create_text",
        "Create a text element",
        _object(
            ["text"],
            text=_string("The text content"),
            x=_number("X position (default: 0)"),
            y=_number("Y position (default: 0)"),
            fontSize=_number("Font size in pixels (default: 16)"),
            fontWeight=_string("Font weight (default: Regular)"),
            fillColor=_rgb("Text color as RGB (0-1 range)"),
            parentId=_PARENT_ID,
        ),
    ),
    ToolInfo(
        "create_rectangle",
        "Create a rectangle shape",
        _object(
            name=_string("Name of the rectangle"),
            x=_number("X position (default: 0)"),
            y=_number("Y position (default: 0)"),
            width=_number("Width (default: 100)"),
            height=_number("Height (default: 100)"),
            cornerRadius=_number("Corner radius (default: 0)"),
            fillColor=_rgb("Fill color as RGB (0-1 range)"),
            parentId=_PARENT_ID,
        ),
    ),
    ToolInfo(
        "create_ellipse",
        "Create an ellipse or circle",
        _object(
            name=_string("Name of the ellipse"),
            x=_number("X position (default: 0)"),
            y=_number("Y position (default: 0)"),
            width=_number("Width/diameter (default: 100)"),
            height=_number("Height (default: same as width)"),
            fillColor=_rgb("Fill color as RGB (0-1 range)"),
            parentId=_PARENT_ID,
        ),
    ),
    ToolInfo(
        "create_component",
        "Create a reusable component, either empty or by converting an existing node",
        _object(
            name=_string("Component name (default: Component)"),
            fromNodeId=_string("Convert this node into a component instead of creating an empty one"),
            x=_number("X position (default: 0)"),
            y=_number("Y position (default: 0)"),
            width=_number("Width (default: 200)"),
            height=_number("Height (default: 100)"),
            parentId=_PARENT_ID,
        ),
    ),
    ToolInfo(
        "create_instance",
        "Place an instance of a component",
        _object(
            ["componentId"],
            componentId=_string("ID of the component"),
            x=_number("X position (default: 0)"),
            y=_number("Y position (default: 0)"),
            parentId=_PARENT_ID,
        ),
    ),
    ToolInfo(
        "move_node",
        "Move a node to a new position",
        _object(["nodeId", "x", "y"], nodeId=_NODE_ID, x=_number("New X"), y=_number("New Y")),
    ),
    ToolInfo(
        "resize_node",
        "Resize a node",
        _object(
            ["nodeId", "width", "height"],
            nodeId=_NODE_ID,
            width=_number("New width"),
            height=_number("New height"),
        ),
    ),
    ToolInfo(
        "set_fill_color",
        "Set the fill color of a node",
        _object(["nodeId", "color"], nodeId=_NODE_ID, color=_rgb("RGB color (0-1 range)")),
    ),
    ToolInfo(
        "add_stroke",
        "Add a stroke/border to a node",
        _object(
            ["nodeId", "color"],
            nodeId=_NODE_ID,
            color=_rgb("Stroke color as RGB (0-1 range)"),
            weight=_number("Stroke weight in pixels (default: 1)"),
        ),
    ),
    ToolInfo(
        "set_corner_radius",
        "Set the corner radius of a frame or rectangle",
        _object(["nodeId", "radius"], nodeId=_NODE_ID, radius=_number("Corner radius in pixels")),
    ),
    ToolInfo(
        "set_opacity",
        "Set the opacity of a node",
        _object(
            ["nodeId", "opacity"],
            nodeId=_NODE_ID,
            opacity=_number("Opacity from 0 (transparent) to 1 (opaque)"),
        ),
    ),
    ToolInfo(
        "set_text",
        "Update the content of an existing text node",
        _object(["nodeId", "text"], nodeId=_NODE_ID, text=_string("New text content")),
    ),
    ToolInfo(
        "set_text_style",
        "Set alignment, line height, letter spacing or decoration of a text node",
        _object(
            ["nodeId"],
            nodeId=_NODE_ID,
            textAlign=_string("Horizontal alignment", ["LEFT", "CENTER", "RIGHT", "JUSTIFIED"]),
            lineHeight=_number("Line height: below 10 is a multiplier (1.5), otherwise pixels"),
            letterSpacing=_number("Letter spacing in pixels"),
            textDecoration=_string("Decoration", ["NONE", "UNDERLINE", "STRIKETHROUGH"]),
        ),
    ),
    ToolInfo(
        "add_effect",
        "Add a shadow or blur effect to a node",
        _object(
            ["nodeId", "type"],
            nodeId=_NODE_ID,
            type=_string(
                "Effect type", ["DROP_SHADOW", "INNER_SHADOW", "LAYER_BLUR", "BACKGROUND_BLUR"]
            ),
            color={
                "type": "object",
                "description": "Shadow color as RGBA (0-1 range, default: black at 0.25)",
                "properties": {
                    "r": {"type": "number"},
                    "g": {"type": "number"},
                    "b": {"type": "number"},
                    "a": {"type": "number"},
                },
            },
            offset={
                "type": "object",
                "description": "Shadow offset (default: x 0, y 4)",
                "properties": {"x": {"type": "number"}, "y": {"type": "number"}},
            },
            radius=_number("Blur radius (default: 8)"),
            spread=_number("Shadow spread (default: 0)"),
        ),
    ),
    ToolInfo(
        "delete_node",
        "Delete a node by its ID",
        _object(["nodeId"], nodeId=_NODE_ID),
    ),
    ToolInfo(
        "duplicate_node",
        "Duplicate a node with an optional position offset",
        _object(
            ["nodeId"],
            nodeId=_NODE_ID,
            offsetX=_number("X offset for the duplicate (default: 20)"),
            offsetY=_number("Y offset for the duplicate (default: 20)"),
        ),
    ),
    ToolInfo(
        "reparent_node",
        "Move a node into a different parent frame",
        _object(
            ["nodeId", "newParentId"],
            nodeId=_NODE_ID,
            newParentId=_string("ID of the new parent frame"),
            index={"type": "integer", "description": "Position among the parent's children"},
        ),
    ),
    ToolInfo(
        "group_nodes",
        "Group sibling nodes together",
        _object(
            ["nodeIds"],
            nodeIds=_ids("Node IDs to group"),
            name=_string("Name for the group (default: 'Group')"),
        ),
    ),
    ToolInfo(
        "align_nodes",
        "Align multiple nodes to each other",
        _object(
            ["nodeIds", "alignment"],
            nodeIds=_ids("Node IDs to align"),
            alignment=_string(
                "Alignment direction", ["LEFT", "CENTER_H", "RIGHT", "TOP", "CENTER_V", "BOTTOM"]
            ),
        ),
    ),
    ToolInfo(
        "distribute_nodes",
        "Distribute nodes evenly with equal spacing",
        _object(
            ["nodeIds", "direction"],
            nodeIds=_ids("Node IDs to distribute"),
            direction=_string("Distribution direction", ["HORIZONTAL", "VERTICAL"]),
            spacing=_number("Fixed spacing between nodes (default: equal distribution)"),
        ),
    ),
    ToolInfo(
        "list_nodes",
        "List the children of the current page or of a parent node",
        _object(parentId=_string("ID of the parent node (default: current page)")),
    ),
    ToolInfo(
        "get_node",
        "Get every property of one node",
        _object(["nodeId"], nodeId=_NODE_ID),
    ),
    ToolInfo(
        "find_nodes",
        "Search for nodes by type, exact name or partial name",
        _object(
            type=_string("Node type filter (e.g. TEXT, FRAME, RECTANGLE)"),
            name=_string("Exact node name"),
            nameContains=_string("Case-insensitive partial name match"),
            parentId=_string("Search within this parent (default: current page)"),
            maxResults={"type": "integer", "description": "Maximum results (default: 100)"},
        ),
    ),
    ToolInfo(
        "get_tree",
        "Get the node hierarchy in a single call",
        _object(
            nodeId=_string("Root node ID (default: current page)"),
            depth={"type": "integer", "description": "Levels to traverse (default: 3)"},
        ),
    ),
    ToolInfo("get_selection", "Get the currently selected nodes", _object()),
    ToolInfo(
        "set_selection",
        "Select specific nodes by their IDs",
        _object(["nodeIds"], nodeIds=_ids("Node IDs to select")),
    ),
    ToolInfo(
        "analyze_node",
        "Get detailed information about a node including its layout context, parent auto-layout "
        "settings, sizing mode, and whether it can be freely positioned.",
        _object(["nodeId"], nodeId=_NODE_ID),
    ),
    ToolInfo(
        "set_auto_layout",
        "Turn a frame into an auto-layout frame that stacks its children.",
        _object(
            ["nodeId"],
            nodeId=_string("ID of the frame"),
            direction=_string("Stacking direction (default: VERTICAL)", ["HORIZONTAL", "VERTICAL"]),
            spacing=_number("Gap between children (default: 10)"),
            padding=_number("Padding on all sides (default: 20)"),
            alignment=_string("Primary axis alignment", ["MIN", "CENTER", "MAX"]),
            counterAlignment=_string("Counter axis alignment", ["MIN", "CENTER", "MAX"]),
        ),
    ),
    ToolInfo(
        "set_sizing_mode",
        "Set how a node sizes itself: FIXED, FILL the auto-layout parent, or HUG its content.",
        _object(
            ["nodeId"],
            nodeId=_NODE_ID,
            horizontal=_string("Horizontal sizing", ["FIXED", "FILL", "HUG"]),
            vertical=_string("Vertical sizing", ["FIXED", "FILL", "HUG"]),
        ),
    ),
    ToolInfo(
        "set_constraints",
        "Set how a node moves or stretches when its parent frame is resized.",
        _object(
            ["nodeId"],
            nodeId=_NODE_ID,
            horizontal=_string("Horizontal constraint", ["MIN", "CENTER", "MAX", "STRETCH", "SCALE"]),
            vertical=_string("Vertical constraint", ["MIN", "CENTER", "MAX", "STRETCH", "SCALE"]),
        ),
    ),
    ToolInfo(
        "zoom_to_fit",
        "Fit the viewport to the given nodes, or to the selection if none are given.",
        _object(nodeIds=_ids("Node IDs to fit (default: current selection)")),
    ),
    ToolInfo(
        "export_node",
        "Export a node as an image (PNG, JPG, SVG or PDF). Returns base64-encoded data. "
        "Uses the current selection if no nodeId is given.",
        _object(
            nodeId=_string("ID of the node to export (default: first selected node)"),
            format=_string("Export format (default: PNG)", ["PNG", "JPG", "SVG", "PDF"]),
            scale=_number("Scale factor for raster exports (default: 2)"),
        ),
    ),
    ToolInfo(
        "bulk_modify",
        "Apply the same changes to several nodes at once. The change can be reverted with undo.",
        _object(
            ["nodeIds", "changes"],
            nodeIds=_ids("Node IDs to modify"),
            changes=_object(
                fillColor=_rgb("Fill color (RGB 0-1)"),
                strokeColor=_rgb("Stroke color (RGB 0-1)"),
                strokeWeight={"type": "number"},
                opacity={"type": "number"},
                cornerRadius={"type": "number"},
                visible={"type": "boolean"},
            ),
        ),
    ),
    ToolInfo(
        "undo",
        "Revert the most recent bulk_modify. Only one level of undo is kept.",
        _object(),
    ),
    ToolInfo(
        CONNECTION_STATUS_TOOL,
        "Report whether the design worker is connected to the bridge",
        _object(),
    ),
)

TOOLS_BY_NAME: dict[str, ToolInfo] = {tool.name: tool for tool in TOOLS}


def list_tools() -> list[types.Tool]:
    return [tool.to_mcp() for tool in TOOLS]
