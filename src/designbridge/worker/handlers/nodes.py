"""Node creation commands."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

from designbridge.worker.document import (
    COMPONENT,
    ELLIPSE,
    FRAME,
    RECTANGLE,
    TEXT,
    Document,
    DocumentError,
    Node,
    reflow,
    solid_paint,
)
from designbridge.worker.params import (
    RGB,
    CreateComponentParams,
    CreateFrameParams,
    CreateInstanceParams,
    CreateShapeParams,
    CreateTextParams,
)
from designbridge.worker.results import CommandResult, ok

if TYPE_CHECKING:
    from designbridge.worker.registry import CommandRegistry

# Width of one glyph relative to the font size, for auto-sized text.
_GLYPH_ASPECT = 0.6
_BLACK = RGB(r=0, g=0, b=0)


def fit_text(node: Node) -> None:
    """Size a text node to its characters and re-run any enclosing auto layout."""
    lines = node.characters.splitlines() or [""]
    longest = max(len(line) for line in lines)
    node.width = longest * node.font_size * _GLYPH_ASPECT + max(longest - 1, 0) * node.letter_spacing
    node.height = len(lines) * node.line_height_px
    reflow(node)


def _created(node: Node, **extra: Any) -> CommandResult:
    return ok(
        nodeId=node.id,
        name=node.name,
        type=node.type,
        position={"x": node.x, "y": node.y},
        size={"width": node.width, "height": node.height},
        **extra,
    )


async def create_frame(document: Document, params: CreateFrameParams) -> CommandResult:
    frame = document.create(
        FRAME,
        params.name,
        parent=document.container(params.parent_id),
        x=params.x,
        y=params.y,
        width=params.width,
        height=params.height,
        fills=[solid_paint(params.fill_color.model_dump())] if params.fill_color else [],
    )
    return _created(frame)


async def create_text(document: Document, params: CreateTextParams) -> CommandResult:
    font_size = params.font_size or 16.0
    node = document.create(
        TEXT,
        params.text[:40] or "Text",
        parent=document.container(params.parent_id),
        x=params.x,
        y=params.y,
        characters=params.text,
        font_size=font_size,
        font_weight=params.font_weight,
        fills=[solid_paint((params.fill_color or _BLACK).model_dump())],
    )
    fit_text(node)
    return ok(
        nodeId=node.id,
        text=node.characters,
        type=node.type,
        position={"x": node.x, "y": node.y},
        size={"width": node.width, "height": node.height},
    )


async def create_rectangle(document: Document, params: CreateShapeParams) -> CommandResult:
    node = document.create(
        RECTANGLE,
        params.name or "Rectangle",
        parent=document.container(params.parent_id),
        x=params.x,
        y=params.y,
        width=params.width,
        height=params.height or 100,
        corner_radius=params.corner_radius or 0,
        fills=[solid_paint(params.fill_color.model_dump())] if params.fill_color else [],
    )
    return _created(node)


async def create_ellipse(document: Document, params: CreateShapeParams) -> CommandResult:
    node = document.create(
        ELLIPSE,
        params.name or "Ellipse",
        parent=document.container(params.parent_id),
        x=params.x,
        y=params.y,
        width=params.width,
        height=params.height or params.width,
        fills=[solid_paint(params.fill_color.model_dump())] if params.fill_color else [],
    )
    return _created(node)


async def create_component(document: Document, params: CreateComponentParams) -> CommandResult:
    if params.from_node_id:
        component = document.componentize(document.require(params.from_node_id), params.name)
    else:
        component = document.create(
            COMPONENT,
            params.name,
            parent=document.container(params.parent_id),
            x=params.x,
            y=params.y,
            width=params.width,
            height=params.height,
        )
    return _created(component)


async def create_instance(document: Document, params: CreateInstanceParams) -> CommandResult:
    component = document.find(params.component_id)
    if component is None or component.type != COMPONENT:
        raise DocumentError("Component not found")
    instance = document.instantiate(
        component, document.container(params.parent_id), params.x, params.y
    )
    return ok(
        nodeId=instance.id,
        componentId=component.id,
        type=instance.type,
        position={"x": instance.x, "y": instance.y},
    )


def register(registry: CommandRegistry, document: Document) -> None:
    registry.add("create_frame", partial(create_frame, document), CreateFrameParams)
    registry.add("create_text", partial(create_text, document), CreateTextParams)
    registry.add("create_rectangle", partial(create_rectangle, document), CreateShapeParams)
    registry.add("create_ellipse", partial(create_ellipse, document), CreateShapeParams)
    registry.add("create_component", partial(create_component, document), CreateComponentParams)
    registry.add("create_instance", partial(create_instance, document), CreateInstanceParams)
