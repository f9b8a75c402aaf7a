"""
Pixel Transform
===============
Affine mapping between device pixels and map coordinates.

Device y grows downward, map y grows upward, so the transform flips the
vertical axis around the output height:

    px = (x - x_min) / mupp
    py = height - (y - y_min) / mupp
"""

from __future__ import annotations

import numpy as np

from mapframe.spatial.extent import Extent, Point


class MapToPixel:
    """
    Parameters
    ----------
    map_units_per_pixel : float
    height : float
        Output height in pixels.
    y_min, x_min : float
        Lower-left corner of the visible extent.
    """

    def __init__(
        self,
        map_units_per_pixel: float = 1.0,
        height: float = 0.0,
        y_min: float = 0.0,
        x_min: float = 0.0,
    ) -> None:
        self.map_units_per_pixel = map_units_per_pixel
        self.height = height
        self.y_min = y_min
        self.x_min = x_min

    # ── Single points ─────────────────────────────────────────

    def transform(self, x: float, y: float) -> Point:
        """Map coordinate → device pixel."""
        mupp = self.map_units_per_pixel
        return Point(
            (x - self.x_min) / mupp,
            self.height - (y - self.y_min) / mupp,
        )

    def to_map_coordinates(self, px: float, py: float) -> Point:
        """Device pixel → map coordinate."""
        mupp = self.map_units_per_pixel
        return Point(
            px * mupp + self.x_min,
            self.y_min + (self.height - py) * mupp,
        )

    def to_map_extent(self, width: float, height: float | None = None) -> Extent:
        """Map extent covered by the pixel rectangle ``(0, 0)-(width, height)``."""
        if height is None:
            height = self.height
        top_left = self.to_map_coordinates(0.0, 0.0)
        bottom_right = self.to_map_coordinates(width, height)
        return Extent(top_left.x, bottom_right.y, bottom_right.x, top_left.y)

    # ── Batches ───────────────────────────────────────────────

    @property
    def matrix(self) -> np.ndarray:
        """3×3 homogeneous matrix taking ``[x, y, 1]`` to ``[px, py, 1]``."""
        inv = 1.0 / self.map_units_per_pixel
        return np.array(
            [
                [inv, 0.0, -self.x_min * inv],
                [0.0, -inv, self.height + self.y_min * inv],
                [0.0, 0.0, 1.0],
            ]
        )

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """Vectorised :meth:`transform` over an ``(N, 2)`` array."""
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        out = np.empty_like(pts)
        out[:, 0] = (pts[:, 0] - self.x_min) / self.map_units_per_pixel
        out[:, 1] = self.height - (pts[:, 1] - self.y_min) / self.map_units_per_pixel
        return out

    def __repr__(self) -> str:
        return (
            f"MapToPixel(map_units_per_pixel={self.map_units_per_pixel!r}, "
            f"height={self.height!r}, y_min={self.y_min!r}, x_min={self.x_min!r})"
        )
