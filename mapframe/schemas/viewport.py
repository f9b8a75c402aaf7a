"""
Pydantic schemas for API request/response serialization.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mapframe.spatial.extent import Extent, Point
from mapframe.spatial.transform import TransformDirection
from mapframe.spatial.units import MapUnit, RenderFlags


# ═══════════════════════════════════════════════════════════════════
# Geometry
# ═══════════════════════════════════════════════════════════════════
class ExtentModel(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @classmethod
    def from_extent(cls, extent: Extent) -> ExtentModel:
        return cls(
            x_min=extent.x_min,
            y_min=extent.y_min,
            x_max=extent.x_max,
            y_max=extent.y_max,
        )

    def to_extent(self) -> Extent:
        return Extent(self.x_min, self.y_min, self.x_max, self.y_max)


class PointModel(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float

    def to_point(self) -> Point:
        return Point(self.x, self.y)


class OutputSize(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    width: float = Field(ge=0, description="Output width (px)")
    height: float = Field(ge=0, description="Output height (px)")


class RenderFlagsModel(BaseModel):
    antialiasing: bool = True
    use_advanced_effects: bool = True
    draw_labeling: bool = True

    @classmethod
    def from_flags(cls, flags: RenderFlags) -> RenderFlagsModel:
        return cls(
            antialiasing=flags.antialiasing,
            use_advanced_effects=flags.use_advanced_effects,
            draw_labeling=flags.draw_labeling,
        )

    def to_flags(self) -> RenderFlags:
        return RenderFlags(**self.model_dump())


# ═══════════════════════════════════════════════════════════════════
# Viewport inputs
# ═══════════════════════════════════════════════════════════════════
class ViewportInputs(BaseModel):
    """
    Any subset of viewport inputs.  Omitted fields are left unchanged;
    provided ones are applied through the matching mutator.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    extent: ExtentModel | None = None
    output_size: OutputSize | None = None
    dpi: float | None = Field(default=None, gt=0)
    destination_crs: str | None = Field(
        default=None, description="Authority id or PROJ string, e.g. EPSG:3857"
    )
    map_units: MapUnit | None = None
    projections_enabled: bool | None = None
    layers: list[str] | None = None
    flags: RenderFlagsModel | None = None

    @field_validator("destination_crs")
    @classmethod
    def crs_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("destination_crs must not be blank")
        return v


# ═══════════════════════════════════════════════════════════════════
# Viewport state
# ═══════════════════════════════════════════════════════════════════
class PixelTransformModel(BaseModel):
    map_units_per_pixel: float
    height: float
    x_min: float
    y_min: float
    matrix: list[list[float]] = Field(
        description="3x3 homogeneous matrix taking [x, y, 1] to [px, py, 1]"
    )


class ViewportState(BaseModel):
    """Inputs plus derived values.  Derived values are null while invalid."""

    id: uuid.UUID
    valid: bool
    extent: ExtentModel
    output_size: OutputSize
    dpi: float
    destination_crs: str
    map_units: MapUnit
    projections_enabled: bool
    layers: list[str]
    flags: RenderFlagsModel
    visible_extent: ExtentModel | None = None
    map_units_per_pixel: float | None = None
    scale: float | None = None
    pixel_transform: PixelTransformModel | None = None


# ═══════════════════════════════════════════════════════════════════
# Extent / transform operations
# ═══════════════════════════════════════════════════════════════════
class FullExtentResponse(BaseModel):
    extent: ExtentModel
    empty: bool = Field(description="True when no layer contributed")


class TransformPointRequest(BaseModel):
    source_crs: str
    point: PointModel
    direction: TransformDirection = Field(
        default=TransformDirection.FORWARD,
        description="forward: source → map, reverse: map → source",
    )


class TransformPointResponse(BaseModel):
    source_crs: str
    destination_crs: str
    direction: TransformDirection
    point: PointModel


class PixelBatchRequest(BaseModel):
    points: list[PointModel] = Field(max_length=10_000)
    source_crs: str | None = Field(
        default=None,
        description="CRS of the points; omitted means destination-CRS map units",
    )


class PixelBatchResponse(BaseModel):
    pixels: list[PointModel]


# ═══════════════════════════════════════════════════════════════════
# Sources
# ═══════════════════════════════════════════════════════════════════
class SourceOut(BaseModel):
    id: str
    name: str
    crs: str
    extent: ExtentModel | None = None
    wkt: str | None = Field(default=None, description="Native extent as a WKT polygon")
