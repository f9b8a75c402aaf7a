"""Spatial subpackage — extents, units, scale, pixel and CRS transforms."""

from mapframe.spatial.crs import CrsRecord
from mapframe.spatial.extent import Extent, Point
from mapframe.spatial.map_to_pixel import MapToPixel
from mapframe.spatial.scale import ScaleCalculator
from mapframe.spatial.transform import (
    CoordinateTransform,
    TransformCache,
    TransformDirection,
    TransformResult,
)
from mapframe.spatial.units import MapUnit, RenderFlag, RenderFlags

__all__ = [
    "CoordinateTransform",
    "CrsRecord",
    "Extent",
    "MapToPixel",
    "MapUnit",
    "Point",
    "RenderFlag",
    "RenderFlags",
    "ScaleCalculator",
    "TransformCache",
    "TransformDirection",
    "TransformResult",
]
