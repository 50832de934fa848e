"""Exports a node subtree as PNG, JPG, SVG or PDF bytes.

The subtree is first flattened into :class:`Shape` primitives in the
export root's coordinate space. SVG is written directly from the shapes;
the other formats are rasterized with Pillow and encoded from the bitmap.
Rasterizing is CPU-bound, so callers on an event loop should run
:func:`render_raster` in a worker thread.

Drop shadows, layer blurs and background blurs are drawn in raster
output. Inner shadows are kept on the node but not rasterized.
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass, field
from typing import Any
from xml.sax.saxutils import escape, quoteattr

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from designbridge.worker.document import ELLIPSE, GROUP, PAGE, TEXT, DocumentError, Node

MAX_RASTER_SIDE = 4096
JPEG_QUALITY = 90

WHITE = (255, 255, 255)


@dataclass
class Shape:
    kind: str
    x: float
    y: float
    width: float
    height: float
    fill: tuple[float, float, float] | None
    stroke: tuple[float, float, float] | None
    stroke_weight: float
    alpha: float
    radius: float = 0.0
    text: str = ""
    font_size: float = 16.0
    line_height: float = 19.2
    effects: list[dict[str, Any]] = field(default_factory=list)


def _solid(paints: list[dict]) -> tuple[float, float, float] | None:
    for paint in paints:
        if paint.get("type") == "SOLID":
            color = paint["color"]
            return color["r"], color["g"], color["b"]
    return None


def flatten(root: Node) -> list[Shape]:
    """Visible shapes under ``root`` (inclusive), back to front."""
    shapes: list[Shape] = []

    def visit(node: Node, origin_x: float, origin_y: float, alpha: float) -> None:
        if not node.visible:
            return
        alpha *= node.opacity
        x = origin_x if node is root else origin_x + node.x
        y = origin_y if node is root else origin_y + node.y
        if node.type not in (GROUP, PAGE):
            shapes.append(
                Shape(
                    kind=node.type,
                    x=x,
                    y=y,
                    width=node.width,
                    height=node.height,
                    fill=_solid(node.fills),
                    stroke=_solid(node.strokes) if node.stroke_weight > 0 else None,
                    stroke_weight=node.stroke_weight,
                    alpha=alpha,
                    radius=node.corner_radius,
                    text=node.characters,
                    font_size=node.font_size,
                    line_height=node.line_height_px,
                    effects=[dict(e) for e in node.effects if e.get("visible", True)],
                )
            )
        for child in node.children:
            visit(child, x, y, alpha)

    visit(root, 0.0, 0.0, 1.0)
    return shapes


def _channel(value: float) -> int:
    return max(0, min(255, round(value * 255)))


def _rgb(color: tuple[float, float, float]) -> tuple[int, int, int]:
    return _channel(color[0]), _channel(color[1]), _channel(color[2])


def _hex(color: tuple[float, float, float]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*_rgb(color))


# Raster


def raster_size(root: Node, scale: float) -> tuple[int, int]:
    """Pixel size of ``root`` at ``scale``; rejects bitmaps over the limit."""
    width = max(1, math.ceil(root.width * scale))
    height = max(1, math.ceil(root.height * scale))
    if width > MAX_RASTER_SIDE or height > MAX_RASTER_SIDE:
        raise DocumentError(f"Export too large: {width}x{height} exceeds {MAX_RASTER_SIDE}px")
    return width, height


def _draw_shape(
    draw: ImageDraw.ImageDraw,
    shape: Shape,
    box: tuple[float, float, float, float],
    scale: float,
    fill: tuple[int, ...] | None,
    outline: tuple[int, ...] | None,
) -> None:
    # Pillow boxes are inclusive on the far edge.
    x0, y0, x1, y1 = box
    x1 = max(x0, x1 - 1)
    y1 = max(y0, y1 - 1)
    width = max(1, round(shape.stroke_weight * scale)) if outline else 0

    if shape.kind == TEXT:
        if fill is None or not shape.text:
            return
        font = ImageFont.load_default(size=max(1.0, shape.font_size * scale))
        spacing = max(0.0, (shape.line_height - shape.font_size) * scale)
        draw.multiline_text((x0, y0), shape.text, fill=fill, font=font, spacing=spacing)
    elif shape.kind == ELLIPSE:
        draw.ellipse((x0, y0, x1, y1), fill=fill, outline=outline, width=width)
    elif shape.radius > 0:
        draw.rounded_rectangle(
            (x0, y0, x1, y1), radius=shape.radius * scale, fill=fill, outline=outline, width=width
        )
    else:
        draw.rectangle((x0, y0, x1, y1), fill=fill, outline=outline, width=width)


def _layer(size: tuple[int, int]) -> Image.Image:
    return Image.new("RGBA", size, (0, 0, 0, 0))


def _with_alpha(layer: Image.Image, alpha: float) -> Image.Image:
    if alpha >= 1:
        return layer
    faded = layer.getchannel("A").point(lambda a: round(a * alpha))
    layer.putalpha(faded)
    return layer


def _silhouette(
    shape: Shape, size: tuple[int, int], box: tuple[float, ...], scale: float, color: tuple[int, ...]
) -> Image.Image:
    layer = _layer(size)
    _draw_shape(ImageDraw.Draw(layer), shape, box, scale, color, None)
    return layer


def _shadow(
    canvas: Image.Image, shape: Shape, box: tuple[float, ...], scale: float, effect: dict[str, Any]
) -> None:
    color = effect.get("color", {})
    rgba = (
        _channel(color.get("r", 0)),
        _channel(color.get("g", 0)),
        _channel(color.get("b", 0)),
        _channel(color.get("a", 0.25)),
    )
    offset = effect.get("offset", {})
    dx = offset.get("x", 0) * scale
    dy = offset.get("y", 4) * scale
    spread = effect.get("spread", 0) * scale
    x0, y0, x1, y1 = box
    shadow_box = (x0 + dx - spread, y0 + dy - spread, x1 + dx + spread, y1 + dy + spread)
    layer = _silhouette(shape, canvas.size, shadow_box, scale, rgba)
    radius = effect.get("radius", 8) * scale
    if radius > 0:
        layer = layer.filter(ImageFilter.GaussianBlur(radius / 2))
    canvas.alpha_composite(_with_alpha(layer, shape.alpha))


def _background_blur(
    canvas: Image.Image, shape: Shape, box: tuple[float, ...], scale: float, radius: float
) -> None:
    if radius <= 0:
        return
    mask = _silhouette(shape, canvas.size, box, scale, (0, 0, 0, 255)).getchannel("A")
    blurred = canvas.filter(ImageFilter.GaussianBlur(radius * scale / 2))
    canvas.paste(blurred, (0, 0), mask)


def rasterize(shapes: list[Shape], size: tuple[int, int], scale: float) -> Image.Image:
    """Draw ``shapes`` back to front onto a transparent RGBA bitmap."""
    canvas = _layer(size)
    for shape in shapes:
        box = (
            shape.x * scale,
            shape.y * scale,
            (shape.x + shape.width) * scale,
            (shape.y + shape.height) * scale,
        )
        blur = 0.0
        for effect in shape.effects:
            kind = effect.get("type")
            if kind == "DROP_SHADOW":
                _shadow(canvas, shape, box, scale, effect)
            elif kind == "BACKGROUND_BLUR":
                _background_blur(canvas, shape, box, scale, effect.get("radius", 8))
            elif kind == "LAYER_BLUR":
                blur = max(blur, effect.get("radius", 8))

        layer = _layer(size)
        fill = (*_rgb(shape.fill), 255) if shape.fill is not None else None
        outline = (*_rgb(shape.stroke), 255) if shape.stroke is not None else None
        if fill is None and outline is None:
            continue
        _draw_shape(ImageDraw.Draw(layer), shape, box, scale, fill, outline)
        if blur > 0:
            layer = layer.filter(ImageFilter.GaussianBlur(blur * scale / 2))
        canvas.alpha_composite(_with_alpha(layer, shape.alpha))
    return canvas


def encode(image: Image.Image, fmt: str, scale: float) -> bytes:
    """Encode an RGBA bitmap. JPG and PDF are flattened onto white."""
    buffer = io.BytesIO()
    if fmt == "PNG":
        image.save(buffer, "PNG")
        return buffer.getvalue()

    flattened = Image.new("RGB", image.size, WHITE)
    flattened.paste(image, (0, 0), image.getchannel("A"))
    if fmt == "JPG":
        flattened.save(buffer, "JPEG", quality=JPEG_QUALITY)
    elif fmt == "PDF":
        # Page size in points matches the node size in document pixels.
        flattened.save(buffer, "PDF", resolution=72.0 * scale)
    else:
        raise DocumentError(f"Export format not supported: {fmt}")
    return buffer.getvalue()


def render_raster(shapes: list[Shape], size: tuple[int, int], scale: float, fmt: str) -> bytes:
    return encode(rasterize(shapes, size, scale), fmt, scale)


# SVG


def _svg_paint(shape: Shape) -> str:
    attrs = [f'fill="{_hex(shape.fill)}"' if shape.fill else 'fill="none"']
    if shape.stroke is not None:
        attrs.append(f'stroke="{_hex(shape.stroke)}" stroke-width="{shape.stroke_weight:g}"')
    if shape.alpha < 1:
        attrs.append(f'opacity="{shape.alpha:g}"')
    return " ".join(attrs)


def _svg_element(shape: Shape) -> str:
    paint = _svg_paint(shape)
    if shape.kind == ELLIPSE:
        return (
            f'<ellipse cx="{shape.x + shape.width / 2:g}" cy="{shape.y + shape.height / 2:g}" '
            f'rx="{shape.width / 2:g}" ry="{shape.height / 2:g}" {paint}/>'
        )
    if shape.kind == TEXT:
        lines = shape.text.splitlines() or [""]
        spans = "".join(
            f'<tspan x="{shape.x:g}" dy="{0 if i == 0 else shape.line_height:g}">{escape(line)}</tspan>'
            for i, line in enumerate(lines)
        )
        return (
            f'<text x="{shape.x:g}" y="{shape.y + shape.font_size:g}" '
            f'font-size="{shape.font_size:g}" {paint}>{spans}</text>'
        )
    radius = f' rx="{shape.radius:g}"' if shape.radius else ""
    return (
        f'<rect x="{shape.x:g}" y="{shape.y:g}" width="{shape.width:g}" '
        f'height="{shape.height:g}"{radius} {paint}/>'
    )


def render_svg(root: Node) -> bytes:
    body = "".join(_svg_element(shape) for shape in flatten(root))
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{root.width:g}" height="{root.height:g}" '
        f'viewBox="0 0 {root.width:g} {root.height:g}" data-name={quoteattr(root.name)}>'
        f"{body}</svg>"
    ).encode("utf-8")
