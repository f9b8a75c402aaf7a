"""
Coordinate Transformation Engine
================================
Thin, failure-tolerant wrappers around pyproj transformers.

Two pieces live here:

1. **CoordinateTransform** — one ``source → destination`` transform able
   to move points and rectangles in either direction.
2. **TransformCache**     — process-wide, keyed by the ordered pair of
   authority ids, so every viewport reuses the same transformer objects.

Nothing in this module raises on a failed projection.  Every operation
returns a :class:`TransformResult`, which is either a value or a reason.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pyproj import Transformer
from pyproj.enums import TransformDirection as _ProjDirection
from pyproj.exceptions import CRSError, ProjError

from mapframe.spatial.extent import Extent, Point

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DENSIFY_POINTS = 21


class TransformDirection(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"

    def to_pyproj(self) -> _ProjDirection:
        if self is TransformDirection.FORWARD:
            return _ProjDirection.FORWARD
        return _ProjDirection.INVERSE


# ── Result type ───────────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class TransformResult(Generic[T]):
    """Outcome of a single transform call."""

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> TransformResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> TransformResult[T]:
        return cls(error=reason)

    def unwrap_or(self, fallback: T) -> T:
        return self.value if self.ok else fallback


# ── Coordinate Transformer ───────────────────────────────────────
class CoordinateTransform:
    """
    A transform between two CRSs identified by authority id.

    Parameters
    ----------
    source_authid, dest_authid : str
        Anything ``pyproj.CRS.from_user_input`` accepts.
    densify_points : int
        Extra points sampled along each rectangle edge by
        :meth:`transform_bounds`.

    If pyproj cannot build the transformer the handle is still created;
    every operation on it then fails with the construction error.
    """

    def __init__(
        self,
        source_authid: str,
        dest_authid: str,
        densify_points: int = DEFAULT_DENSIFY_POINTS,
    ) -> None:
        self.source_authid = source_authid
        self.dest_authid = dest_authid
        self.densify_points = densify_points
        self._transformer: Transformer | None = None
        self._init_error: str | None = None
        try:
            self._transformer = Transformer.from_crs(
                source_authid, dest_authid, always_xy=True
            )
        except (CRSError, ProjError) as exc:
            self._init_error = (
                f"cannot create transform {source_authid} -> {dest_authid}: {exc}"
            )
            logger.warning(self._init_error)

    @property
    def is_valid(self) -> bool:
        return self._transformer is not None

    # ── Points ────────────────────────────────────────────────

    def transform_point(
        self,
        point: Point,
        direction: TransformDirection = TransformDirection.FORWARD,
    ) -> TransformResult[Point]:
        if self._transformer is None:
            return TransformResult.failure(self._init_error or "invalid transform")
        try:
            x, y = self._transformer.transform(
                point.x, point.y, direction=direction.to_pyproj(), errcheck=True
            )
        except ProjError as exc:
            return TransformResult.failure(self._describe(point, direction, exc))
        if not (math.isfinite(x) and math.isfinite(y)):
            return TransformResult.failure(
                self._describe(point, direction, "non-finite result")
            )
        return TransformResult.success(Point(x, y))

    # ── Rectangles ────────────────────────────────────────────

    def transform_bounds(
        self,
        extent: Extent,
        direction: TransformDirection = TransformDirection.FORWARD,
        densify_points: int | None = None,
    ) -> TransformResult[Extent]:
        """Bounding box of ``extent`` after transformation, edges densified."""
        if self._transformer is None:
            return TransformResult.failure(self._init_error or "invalid transform")
        densify = self.densify_points if densify_points is None else densify_points
        try:
            bounds = self._transformer.transform_bounds(
                *extent.as_tuple(),
                densify_pts=densify,
                errcheck=True,
                direction=direction.to_pyproj(),
            )
        except ProjError as exc:
            return TransformResult.failure(self._describe(extent, direction, exc))
        if not all(math.isfinite(v) for v in bounds):
            return TransformResult.failure(
                self._describe(extent, direction, "non-finite result")
            )
        return TransformResult.success(Extent.from_bounds(bounds))

    def transform_corners(
        self,
        extent: Extent,
        direction: TransformDirection = TransformDirection.FORWARD,
    ) -> TransformResult[Extent]:
        """Rectangle spanned by the two transformed corner points only."""
        lower = self.transform_point(Point(extent.x_min, extent.y_min), direction)
        if not lower.ok:
            return TransformResult.failure(lower.error)
        upper = self.transform_point(Point(extent.x_max, extent.y_max), direction)
        if not upper.ok:
            return TransformResult.failure(upper.error)
        return TransformResult.success(
            Extent(lower.value.x, lower.value.y, upper.value.x, upper.value.y)
        )

    def _describe(self, what: object, direction: TransformDirection, exc: object) -> str:
        return (
            f"{direction.value} transform of {what} "
            f"({self.source_authid} -> {self.dest_authid}) failed: {exc}"
        )

    def __repr__(self) -> str:
        return f"CoordinateTransform({self.source_authid!r}, {self.dest_authid!r})"


# ── Cache ─────────────────────────────────────────────────────────
class TransformCache:
    """
    Bounded LRU cache of :class:`CoordinateTransform` objects.

    Lookups are serialised by a lock, so several viewports may resolve
    transforms from different threads.  The transform objects themselves
    are only read after construction.
    """

    def __init__(
        self,
        max_size: int = 64,
        densify_points: int = DEFAULT_DENSIFY_POINTS,
    ) -> None:
        self.max_size = max_size
        self.densify_points = densify_points
        self._entries: OrderedDict[tuple[str, str], CoordinateTransform] = OrderedDict()
        self._lock = threading.Lock()

    def lookup(self, source_authid: str, dest_authid: str) -> CoordinateTransform:
        key = (source_authid, dest_authid)
        with self._lock:
            handle = self._entries.get(key)
            if handle is not None:
                self._entries.move_to_end(key)
                return handle
            handle = CoordinateTransform(
                source_authid, dest_authid, densify_points=self.densify_points
            )
            self._entries[key] = handle
            if len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted transform %s -> %s", *evicted)
            logger.debug("Cached transform %s -> %s", source_authid, dest_authid)
            return handle

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
