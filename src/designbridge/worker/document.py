"""In-memory design document the reference worker edits.

Nodes form a tree under a single page. Coordinates are relative to the
parent, sizes are in document pixels, colors are RGB floats in 0..1, and
paints are plain dicts of the form ``{"type": "SOLID", "color": {...}}``.
"""

from __future__ import annotations

import copy
import itertools
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

PAGE = "PAGE"
FRAME = "FRAME"
GROUP = "GROUP"
TEXT = "TEXT"
RECTANGLE = "RECTANGLE"
ELLIPSE = "ELLIPSE"
COMPONENT = "COMPONENT"
INSTANCE = "INSTANCE"

CONTAINER_TYPES = frozenset({PAGE, FRAME, GROUP, COMPONENT})
CORNER_RADIUS_TYPES = frozenset({FRAME, RECTANGLE, COMPONENT, INSTANCE})
PAINTABLE_TYPES = frozenset({FRAME, TEXT, RECTANGLE, ELLIPSE, COMPONENT, INSTANCE})
AUTO_LAYOUT_TYPES = frozenset({FRAME, COMPONENT})
# Frames whose children follow their constraints when the frame is resized.
CONSTRAINT_PARENT_TYPES = frozenset({FRAME, COMPONENT, INSTANCE})

NO_LAYOUT = "NONE"
HORIZONTAL = "HORIZONTAL"
VERTICAL = "VERTICAL"
FIXED = "FIXED"
FILL = "FILL"
HUG = "HUG"

# Properties bulk edits may change and undo may restore.
FILLS = "fills"
STROKES = "strokes"
STROKE_WEIGHT = "strokeWeight"
OPACITY = "opacity"
CORNER_RADIUS = "cornerRadius"
VISIBLE = "visible"
RESTORABLE_PROPERTIES = (FILLS, STROKES, STROKE_WEIGHT, OPACITY, CORNER_RADIUS, VISIBLE)


class DocumentError(Exception):
    """A document operation was rejected (missing node, unsupported property...)."""


def solid_paint(color: dict[str, float]) -> dict[str, Any]:
    return {"type": "SOLID", "color": {"r": color["r"], "g": color["g"], "b": color["b"]}}


@dataclass(eq=False)
class Node:
    """A single scene node."""

    id: str
    type: str
    name: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    fills: list[dict[str, Any]] = field(default_factory=list)
    strokes: list[dict[str, Any]] = field(default_factory=list)
    stroke_weight: float = 0.0
    opacity: float = 1.0
    corner_radius: float = 0.0
    visible: bool = True
    characters: str = ""
    font_size: float = 16.0
    font_weight: str = "Regular"
    text_align: str = "LEFT"
    line_height: dict[str, Any] | None = None
    letter_spacing: float = 0.0
    text_decoration: str = "NONE"
    layout_mode: str = NO_LAYOUT
    item_spacing: float = 0.0
    padding: float = 0.0
    primary_axis_align: str = "MIN"
    counter_axis_align: str = "MIN"
    sizing_horizontal: str = FIXED
    sizing_vertical: str = FIXED
    constraints: dict[str, str] = field(default_factory=lambda: {"horizontal": "MIN", "vertical": "MIN"})
    effects: list[dict[str, Any]] = field(default_factory=list)
    component_id: str | None = None
    children: list[Node] = field(default_factory=list)
    parent: Node | None = field(default=None, repr=False)

    @property
    def is_container(self) -> bool:
        return self.type in CONTAINER_TYPES

    @property
    def is_auto_layout(self) -> bool:
        return self.layout_mode != NO_LAYOUT

    @property
    def line_height_px(self) -> float:
        if self.line_height is None:
            return self.font_size * 1.2
        if self.line_height["unit"] == "PERCENT":
            return self.font_size * self.line_height["value"] / 100
        return self.line_height["value"]

    def walk(self) -> Iterator[Node]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def absolute_position(self) -> tuple[float, float]:
        x, y = self.x, self.y
        parent = self.parent
        while parent is not None and parent.type != PAGE:
            x += parent.x
            y += parent.y
            parent = parent.parent
        return x, y

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "position": {"x": self.x, "y": self.y},
            "size": {"width": self.width, "height": self.height},
        }


_ALIGN_FACTOR = {"MIN": 0.0, "CENTER": 0.5, "MAX": 1.0}


def layout_children(frame: Node) -> None:
    """Position ``frame``'s visible children along its auto-layout axis.

    HUG on the frame shrinks it to its content plus padding; FILL on a
    child takes an equal share of the free space on the primary axis, or
    the whole inner size on the counter axis.
    """
    if not frame.is_auto_layout:
        return
    horizontal = frame.layout_mode == HORIZONTAL
    main, cross = ("width", "height") if horizontal else ("height", "width")
    main_pos, cross_pos = ("x", "y") if horizontal else ("y", "x")
    main_sizing, cross_sizing = (
        ("sizing_horizontal", "sizing_vertical") if horizontal else ("sizing_vertical", "sizing_horizontal")
    )

    items = [child for child in frame.children if child.visible]
    pad = frame.padding
    gaps = frame.item_spacing * max(len(items) - 1, 0)
    resized: list[Node] = []

    hug_main = getattr(frame, main_sizing) == HUG
    fills = [c for c in items if getattr(c, main_sizing) == FILL and not hug_main]
    fixed = sum(getattr(c, main) for c in items if c not in fills)
    if hug_main:
        setattr(frame, main, fixed + gaps + 2 * pad)
    if fills:
        share = max((getattr(frame, main) - 2 * pad - fixed - gaps) / len(fills), 1.0)
        for child in fills:
            setattr(child, main, share)
            resized.append(child)

    if getattr(frame, cross_sizing) == HUG:
        content = max((getattr(c, cross) for c in items if getattr(c, cross_sizing) != FILL), default=0)
        setattr(frame, cross, content + 2 * pad)
    inner_cross = getattr(frame, cross) - 2 * pad
    for child in items:
        if getattr(child, cross_sizing) == FILL:
            setattr(child, cross, max(inner_cross, 1.0))
            resized.append(child)

    total = sum(getattr(c, main) for c in items) + gaps
    free = getattr(frame, main) - 2 * pad - total
    offset = pad + free * _ALIGN_FACTOR[frame.primary_axis_align]
    counter = _ALIGN_FACTOR[frame.counter_axis_align]
    for child in items:
        setattr(child, main_pos, offset)
        setattr(child, cross_pos, pad + (inner_cross - getattr(child, cross)) * counter)
        offset += getattr(child, main) + frame.item_spacing

    for child in resized:
        layout_children(child)


def reflow(node: Node) -> None:
    """Re-run auto layout on every auto-layout ancestor of ``node``."""
    parent = node.parent
    while parent is not None and parent.is_auto_layout:
        layout_children(parent)
        parent = parent.parent


def _apply_constraint(child: Node, axis: str, delta: float, ratio: float) -> None:
    pos, size = ("x", "width") if axis == "horizontal" else ("y", "height")
    rule = child.constraints.get(axis, "MIN")
    if rule == "MAX":
        setattr(child, pos, getattr(child, pos) + delta)
    elif rule == "CENTER":
        setattr(child, pos, getattr(child, pos) + delta / 2)
    elif rule == "STRETCH":
        setattr(child, size, max(getattr(child, size) + delta, 0.01))
    elif rule == "SCALE":
        setattr(child, pos, getattr(child, pos) * ratio)
        setattr(child, size, max(getattr(child, size) * ratio, 0.01))


class Document:
    """A one-page document with id lookup, selection and tree edits."""

    def __init__(self, page_name: str = "Page 1") -> None:
        self.page = Node(id="0:1", type=PAGE, name=page_name)
        self._ids = itertools.count(1)
        self._nodes: dict[str, Node] = {self.page.id: self.page}
        self.selection: list[str] = []
        self.viewport: dict[str, float] | None = None

    def __len__(self) -> int:
        return len(self._nodes) - 1

    def _next_id(self) -> str:
        return f"1:{next(self._ids)}"

    def find(self, node_id: str | None) -> Node | None:
        if not node_id:
            return None
        node = self._nodes.get(node_id)
        if node is None or node is self.page:
            return None
        return node

    def require(self, node_id: str | None) -> Node:
        node = self.find(node_id)
        if node is None:
            raise DocumentError("Node not found")
        return node

    def container(self, parent_id: str | None) -> Node:
        """Resolve a parent id to a container, defaulting to the page."""
        if parent_id:
            parent = self.find(parent_id)
            if parent is not None and parent.is_container:
                return parent
        return self.page

    def create(self, node_type: str, name: str, parent: Node | None = None, **attrs: Any) -> Node:
        node = Node(id=self._next_id(), type=node_type, name=name, **attrs)
        self._nodes[node.id] = node
        self.append(parent or self.page, node)
        return node

    def append(self, parent: Node, node: Node, index: int | None = None) -> None:
        if not parent.is_container:
            raise DocumentError("New parent not found or cannot contain children")
        ancestor: Node | None = parent
        while ancestor is not None:
            if ancestor is node:
                raise DocumentError("Cannot move a node inside itself")
            ancestor = ancestor.parent
        old_parent = node.parent
        if old_parent is not None:
            old_parent.children.remove(node)
        if index is None:
            parent.children.append(node)
        else:
            parent.children.insert(max(0, min(index, len(parent.children))), node)
        node.parent = parent
        layout_children(parent)
        reflow(parent)
        if old_parent is not None and old_parent is not parent:
            layout_children(old_parent)
            reflow(old_parent)

    def remove(self, node: Node) -> None:
        parent = node.parent
        if parent is not None:
            parent.children.remove(node)
            node.parent = None
            layout_children(parent)
            reflow(parent)
        for descendant in node.walk():
            self._nodes.pop(descendant.id, None)
            if descendant.id in self.selection:
                self.selection.remove(descendant.id)

    def clone(self, node: Node) -> Node:
        """Deep-copy ``node`` with fresh ids next to the original."""
        twin = self._copy_tree(node)
        self.append(node.parent or self.page, twin)
        return twin

    def _copy_tree(self, node: Node) -> Node:
        twin = copy.copy(node)
        twin.id = self._next_id()
        twin.fills = copy.deepcopy(node.fills)
        twin.strokes = copy.deepcopy(node.strokes)
        twin.effects = copy.deepcopy(node.effects)
        twin.constraints = dict(node.constraints)
        twin.line_height = copy.deepcopy(node.line_height)
        twin.parent = None
        twin.children = []
        self._nodes[twin.id] = twin
        for child in node.children:
            child_twin = self._copy_tree(child)
            child_twin.parent = twin
            twin.children.append(child_twin)
        return twin

    def resize(self, node: Node, width: float, height: float) -> None:
        """Resize ``node``, moving children by their constraints or by auto layout."""
        if node.type in CONSTRAINT_PARENT_TYPES and not node.is_auto_layout:
            dx, dy = width - node.width, height - node.height
            sx = width / node.width if node.width else 1.0
            sy = height / node.height if node.height else 1.0
            for child in node.children:
                _apply_constraint(child, "horizontal", dx, sx)
                _apply_constraint(child, "vertical", dy, sy)
        node.width, node.height = width, height
        layout_children(node)
        reflow(node)

    def componentize(self, node: Node, name: str) -> Node:
        """Turn ``node`` into a component in place.

        A frame or group hands its children and styling to the new
        component and is removed; any other node is wrapped, keeping its
        place in the parent.
        """
        parent = node.parent or self.page
        index = parent.children.index(node)
        component = self.create(
            COMPONENT,
            name,
            parent=parent,
            x=node.x,
            y=node.y,
            width=node.width,
            height=node.height,
            constraints=dict(node.constraints),
        )
        self.append(parent, component, index)
        if node.is_container:
            component.fills = copy.deepcopy(node.fills)
            component.strokes = copy.deepcopy(node.strokes)
            component.stroke_weight = node.stroke_weight
            component.corner_radius = node.corner_radius
            component.opacity = node.opacity
            component.effects = copy.deepcopy(node.effects)
            for attr in ("layout_mode", "item_spacing", "padding", "primary_axis_align", "counter_axis_align"):
                setattr(component, attr, getattr(node, attr))
            for child in list(node.children):
                self.append(component, child)
            self.remove(node)
        else:
            self.append(component, node)
            node.x = node.y = 0.0
        return component

    def instantiate(self, component: Node, parent: Node, x: float, y: float) -> Node:
        """Place a linked copy of ``component`` under ``parent``."""
        instance = self._copy_tree(component)
        instance.type = INSTANCE
        instance.component_id = component.id
        instance.x, instance.y = x, y
        self.append(parent, instance)
        return instance

    def group(self, nodes: list[Node], name: str) -> Node:
        """Wrap ``nodes`` in a group sized to their combined bounds."""
        parent = nodes[0].parent or self.page
        min_x = min(n.x for n in nodes)
        min_y = min(n.y for n in nodes)
        max_x = max(n.x + n.width for n in nodes)
        max_y = max(n.y + n.height for n in nodes)
        group = self.create(
            GROUP, name, parent=parent, x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y
        )
        for node in nodes:
            self.append(group, node)
            node.x -= min_x
            node.y -= min_y
        return group

    def get_property(self, node: Node, prop: str) -> Any:
        self._check_property(node, prop)
        if prop == FILLS:
            return copy.deepcopy(node.fills)
        if prop == STROKES:
            return copy.deepcopy(node.strokes)
        if prop == STROKE_WEIGHT:
            return node.stroke_weight
        if prop == OPACITY:
            return node.opacity
        if prop == CORNER_RADIUS:
            return node.corner_radius
        return node.visible

    def set_property(self, node: Node, prop: str, value: Any) -> None:
        self._check_property(node, prop)
        if prop == FILLS:
            node.fills = copy.deepcopy(list(value))
        elif prop == STROKES:
            node.strokes = copy.deepcopy(list(value))
        elif prop == STROKE_WEIGHT:
            node.stroke_weight = float(value)
        elif prop == OPACITY:
            node.opacity = max(0.0, min(1.0, float(value)))
        elif prop == CORNER_RADIUS:
            node.corner_radius = float(value)
        else:
            node.visible = bool(value)

    def supports(self, node: Node, prop: str) -> bool:
        try:
            self._check_property(node, prop)
        except DocumentError:
            return False
        return True

    def _check_property(self, node: Node, prop: str) -> None:
        if prop not in RESTORABLE_PROPERTIES:
            raise DocumentError(f"Unknown property: {prop}")
        if prop in (FILLS, STROKES, STROKE_WEIGHT) and node.type not in PAINTABLE_TYPES:
            raise DocumentError(f"Node does not support {prop}")
        if prop == CORNER_RADIUS and node.type not in CORNER_RADIUS_TYPES:
            raise DocumentError("Node does not support corner radius")
