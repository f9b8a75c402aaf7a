"""
Scale Calculation
=================
Converts a visible extent and an output width into a "1:N" map scale.

    scale = (Δ_map × inches_per_unit) / (canvas_width_px / dpi)

For geographic (degree) units the horizontal extent is first turned into
a ground distance in metres along the extent's mid-latitude.
"""

from __future__ import annotations

import math

from mapframe.spatial.extent import Extent
from mapframe.spatial.units import MapUnit

INCHES_PER_METER = 39.3700787
INCHES_PER_FOOT = 12.0
INCHES_PER_NAUTICAL_MILE = 72913.3858

# Ellipsoid used for the degree → metre approximation.
_EQUATORIAL_RADIUS_M = 6378000.0
_ECCENTRICITY = 0.0810820288


class ScaleCalculator:
    """
    Parameters
    ----------
    map_units : MapUnit
        Units of the extent handed to :meth:`calculate`.
    dpi : float
        Output resolution in dots per inch.
    """

    def __init__(self, map_units: MapUnit = MapUnit.DEGREES, dpi: float = 96.0) -> None:
        self.map_units = map_units
        self.dpi = dpi

    def calculate(self, extent: Extent, canvas_width: float) -> float:
        """Scale denominator for ``extent`` drawn ``canvas_width`` pixels wide.

        Returns ``0.0`` when either the canvas width or the DPI is zero.
        """
        if not canvas_width or not self.dpi:
            return 0.0

        if self.map_units is MapUnit.METERS:
            factor, delta = INCHES_PER_METER, extent.width
        elif self.map_units is MapUnit.FEET:
            factor, delta = INCHES_PER_FOOT, extent.width
        elif self.map_units is MapUnit.NAUTICAL_MILES:
            factor, delta = INCHES_PER_NAUTICAL_MILE, extent.width
        else:
            # Degrees, and the fallback for unknown units.
            factor, delta = INCHES_PER_METER, self.geographic_distance(extent)

        return (delta * factor) / (float(canvas_width) / self.dpi)

    @staticmethod
    def geographic_distance(extent: Extent) -> float:
        """Approximate east-west ground distance (m) across ``extent``."""
        lat = math.radians((extent.y_max + extent.y_min) * 0.5)
        a = math.cos(lat) ** 2
        c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
        e2 = _ECCENTRICITY ** 2
        radius = _EQUATORIAL_RADIUS_M * (1.0 - e2) / (1.0 - e2 * math.sin(lat) ** 2) ** 1.5
        return extent.width / 180.0 * radius * c
