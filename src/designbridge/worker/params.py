"""Parameter models validated before a handler runs.

Wire params use camelCase; models expose snake_case fields with aliases.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ParamsModel(BaseModel):
    """Base model: accept aliases or field names, ignore unknown keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RGB(ParamsModel):
    r: float = Field(ge=0, le=1)
    g: float = Field(ge=0, le=1)
    b: float = Field(ge=0, le=1)


class RGBA(RGB):
    a: float = Field(default=1, ge=0, le=1)


class Offset(ParamsModel):
    x: float = 0
    y: float = 0


class CreateFrameParams(ParamsModel):
    name: str = "Frame"
    x: float = 0
    y: float = 0
    width: float = Field(default=400, gt=0)
    height: float = Field(default=300, gt=0)
    fill_color: RGB | None = Field(default=None, alias="fillColor")
    parent_id: str | None = Field(default=None, alias="parentId")


class CreateTextParams(ParamsModel):
    text: str
    x: float = 0
    y: float = 0
    font_size: float | None = Field(default=None, alias="fontSize", gt=0)
    font_weight: str = Field(default="Regular", alias="fontWeight")
    fill_color: RGB | None = Field(default=None, alias="fillColor")
    parent_id: str | None = Field(default=None, alias="parentId")


class CreateShapeParams(ParamsModel):
    name: str | None = None
    x: float = 0
    y: float = 0
    width: float = Field(default=100, gt=0)
    height: float | None = Field(default=None, gt=0)
    corner_radius: float | None = Field(default=None, alias="cornerRadius", ge=0)
    fill_color: RGB | None = Field(default=None, alias="fillColor")
    parent_id: str | None = Field(default=None, alias="parentId")


class NodeParams(ParamsModel):
    node_id: str = Field(alias="nodeId")


class MoveNodeParams(NodeParams):
    x: float
    y: float


class ResizeNodeParams(NodeParams):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class SetFillColorParams(NodeParams):
    color: RGB


class AddStrokeParams(NodeParams):
    color: RGB
    weight: float = Field(default=1, ge=0)


class SetCornerRadiusParams(NodeParams):
    radius: float = Field(ge=0)


class SetOpacityParams(NodeParams):
    opacity: float


class SetTextParams(NodeParams):
    text: str


class DuplicateNodeParams(NodeParams):
    offset_x: float = Field(default=20, alias="offsetX")
    offset_y: float = Field(default=20, alias="offsetY")


class ReparentNodeParams(NodeParams):
    new_parent_id: str = Field(alias="newParentId")
    index: int | None = None


class NodeListParams(ParamsModel):
    node_ids: list[str] = Field(alias="nodeIds")


class GroupNodesParams(NodeListParams):
    name: str = "Group"


class AlignNodesParams(NodeListParams):
    alignment: Literal["LEFT", "CENTER_H", "RIGHT", "TOP", "CENTER_V", "BOTTOM"]


class DistributeNodesParams(NodeListParams):
    direction: Literal["HORIZONTAL", "VERTICAL"]
    spacing: float | None = None


Alignment = Literal["MIN", "CENTER", "MAX"]
Sizing = Literal["FIXED", "FILL", "HUG"]
Constraint = Literal["MIN", "CENTER", "MAX", "STRETCH", "SCALE"]


class SetAutoLayoutParams(NodeParams):
    direction: Literal["HORIZONTAL", "VERTICAL"] = "VERTICAL"
    spacing: float = Field(default=10, ge=0)
    padding: float = Field(default=20, ge=0)
    alignment: Alignment | None = None
    counter_alignment: Alignment | None = Field(default=None, alias="counterAlignment")


class SetSizingModeParams(NodeParams):
    horizontal: Sizing | None = None
    vertical: Sizing | None = None


class SetConstraintsParams(NodeParams):
    horizontal: Constraint | None = None
    vertical: Constraint | None = None


class AddEffectParams(NodeParams):
    type: Literal["DROP_SHADOW", "INNER_SHADOW", "LAYER_BLUR", "BACKGROUND_BLUR"]
    color: RGBA | None = None
    offset: Offset | None = None
    radius: float = Field(default=8, ge=0)
    spread: float = 0


class SetTextStyleParams(NodeParams):
    text_align: Literal["LEFT", "CENTER", "RIGHT", "JUSTIFIED"] | None = Field(
        default=None, alias="textAlign"
    )
    line_height: float | None = Field(default=None, alias="lineHeight", gt=0)
    letter_spacing: float | None = Field(default=None, alias="letterSpacing")
    text_decoration: Literal["NONE", "UNDERLINE", "STRIKETHROUGH"] | None = Field(
        default=None, alias="textDecoration"
    )


class CreateComponentParams(ParamsModel):
    name: str = "Component"
    from_node_id: str | None = Field(default=None, alias="fromNodeId")
    x: float = 0
    y: float = 0
    width: float = Field(default=200, gt=0)
    height: float = Field(default=100, gt=0)
    parent_id: str | None = Field(default=None, alias="parentId")


class CreateInstanceParams(ParamsModel):
    component_id: str = Field(alias="componentId")
    x: float = 0
    y: float = 0
    parent_id: str | None = Field(default=None, alias="parentId")


class ZoomToFitParams(ParamsModel):
    node_ids: list[str] | None = Field(default=None, alias="nodeIds")


class ListNodesParams(ParamsModel):
    parent_id: str | None = Field(default=None, alias="parentId")


class FindNodesParams(ParamsModel):
    type: str | None = None
    name: str | None = None
    name_contains: str | None = Field(default=None, alias="nameContains")
    parent_id: str | None = Field(default=None, alias="parentId")
    max_results: int = Field(default=100, alias="maxResults", gt=0)


class GetTreeParams(ParamsModel):
    node_id: str | None = Field(default=None, alias="nodeId")
    depth: int = Field(default=3, ge=0)


class ExportNodeParams(ParamsModel):
    node_id: str | None = Field(default=None, alias="nodeId")
    format: Literal["PNG", "JPG", "SVG", "PDF"] = "PNG"
    scale: float = Field(default=2, gt=0, le=4)


class BulkChanges(ParamsModel):
    fill_color: RGB | None = Field(default=None, alias="fillColor")
    stroke_color: RGB | None = Field(default=None, alias="strokeColor")
    stroke_weight: float | None = Field(default=None, alias="strokeWeight", ge=0)
    opacity: float | None = None
    corner_radius: float | None = Field(default=None, alias="cornerRadius", ge=0)
    visible: bool | None = None


class BulkModifyParams(NodeListParams):
    changes: BulkChanges


class BatchParams(ParamsModel):
    commands: list[Any]
