"""
Extent & Point Primitives
=========================
Axis-aligned rectangles and points in an arbitrary coordinate system.

An extent is *empty* when it has no positive area:

    empty  ⇔  x_max <= x_min  or  y_max <= y_min

The default ``Extent()`` (all zeros) is therefore empty.  It is not
*null*, though: a null extent is inverted and describes no location at
all, whereas a zero-area extent still pins down a point.  The *minimal*
extent is the identity element for :meth:`Extent.union` — it starts
"inside out" so that the first union simply adopts the other rectangle.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterable

from shapely.geometry import Polygon, box

_DOUBLE_MAX = sys.float_info.max


# ── Point ─────────────────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class Point:
    """A single coordinate pair."""

    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return self.x, self.y


# ── Extent (bounding rectangle) ───────────────────────────────────
@dataclass(frozen=True, slots=True)
class Extent:
    """A rectangle in map (or layer) units."""

    x_min: float = 0.0
    y_min: float = 0.0
    x_max: float = 0.0
    y_max: float = 0.0

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def minimal(cls) -> Extent:
        """The union sentinel: every real rectangle unions over it."""
        return cls(_DOUBLE_MAX, _DOUBLE_MAX, -_DOUBLE_MAX, -_DOUBLE_MAX)

    @classmethod
    def from_bounds(cls, bounds: Iterable[float]) -> Extent:
        """Build from ``(x_min, y_min, x_max, y_max)``, e.g. shapely ``.bounds``."""
        x_min, y_min, x_max, y_max = (float(v) for v in bounds)
        return cls(x_min, y_min, x_max, y_max)

    @classmethod
    def from_center(cls, x: float, y: float, width: float, height: float) -> Extent:
        return cls(x - width / 2, y - height / 2, x + width / 2, y + height / 2)

    # ── Dimensions ────────────────────────────────────────────

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return Point((self.x_min + self.x_max) * 0.5, (self.y_min + self.y_max) * 0.5)

    def is_empty(self) -> bool:
        return self.x_max <= self.x_min or self.y_max <= self.y_min

    def is_null(self) -> bool:
        """No data at all: inverted on some axis.  A single point is not null."""
        return self.x_max < self.x_min or self.y_max < self.y_min

    def is_minimal(self) -> bool:
        return self == Extent.minimal()

    # ── Set operations ────────────────────────────────────────

    def union(self, other: Extent) -> Extent:
        """Smallest rectangle covering both ``self`` and ``other``."""
        return Extent(
            min(self.x_min, other.x_min),
            min(self.y_min, other.y_min),
            max(self.x_max, other.x_max),
            max(self.y_max, other.y_max),
        )

    def contains_point(self, x: float, y: float) -> bool:
        return (
            self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max
        )

    def contains(self, other: Extent) -> bool:
        return (
            self.x_min <= other.x_min
            and self.y_min <= other.y_min
            and self.x_max >= other.x_max
            and self.y_max >= other.y_max
        )

    def buffered(self, dx: float, dy: float) -> Extent:
        """Grow by ``dx`` on both x sides and ``dy`` on both y sides."""
        return Extent(
            self.x_min - dx, self.y_min - dy, self.x_max + dx, self.y_max + dy
        )

    # ── Conversion ────────────────────────────────────────────

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x_min, self.y_min, self.x_max, self.y_max

    def corners(self) -> tuple[Point, Point, Point, Point]:
        """Corners counter-clockwise from the lower-left."""
        return (
            Point(self.x_min, self.y_min),
            Point(self.x_max, self.y_min),
            Point(self.x_max, self.y_max),
            Point(self.x_min, self.y_max),
        )

    def to_shapely(self) -> Polygon:
        """Return a Shapely box for geometric predicates."""
        return box(self.x_min, self.y_min, self.x_max, self.y_max)

    def to_wkt(self) -> str:
        return self.to_shapely().wkt

    def __str__(self) -> str:
        return f"{self.x_min!r},{self.y_min!r} : {self.x_max!r},{self.y_max!r}"
