"""
Transform Router
================
Moves points and rectangles between a source's native CRS and the
destination CRS of a :class:`MapSettings`.

Policy (identical for every operation):

* projections disabled → the input is returned untouched;
* projections enabled  → the cached transform is applied;
* transform failed     → the failure is reported to the diagnostic sink
  and the *untransformed* input is returned.

Callers therefore always get a usable value, possibly in the wrong CRS,
never an exception.  The router keeps no state of its own: the
destination CRS and the projections flag are read from the settings on
every call.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from mapframe.services.diagnostics import CATEGORY_CRS, DiagnosticSink
from mapframe.services.map_settings import MapSettings
from mapframe.spatial.crs import CrsRecord
from mapframe.spatial.extent import Extent, Point
from mapframe.spatial.transform import (
    CoordinateTransform,
    TransformCache,
    TransformDirection,
    TransformResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", Point, Extent)

FORWARD = TransformDirection.FORWARD
REVERSE = TransformDirection.REVERSE


class TransformRouter:
    """
    Parameters
    ----------
    map_settings : MapSettings
        Supplies ``destination_crs`` and ``projections_enabled``.
    cache : TransformCache
        Shared source of transform handles.
    sink : DiagnosticSink
        Receives a message for every failed transform.
    """

    def __init__(
        self,
        map_settings: MapSettings,
        cache: TransformCache,
        sink: DiagnosticSink,
    ) -> None:
        self.map_settings = map_settings
        self.cache = cache
        self.sink = sink

    def transform_for(self, source_crs: CrsRecord | str) -> CoordinateTransform:
        return self.cache.lookup(
            _authid(source_crs), self.map_settings.destination_crs.authid
        )

    # ── Bounding boxes (edges densified) ──────────────────────

    def to_map_extent(self, source_crs: CrsRecord | str, extent: Extent) -> Extent:
        """Source-CRS rectangle → bounding box in the destination CRS."""
        return self._route(
            source_crs,
            extent,
            lambda tr: tr.transform_bounds(extent, FORWARD),
        )

    def to_source_extent(self, source_crs: CrsRecord | str, extent: Extent) -> Extent:
        """Destination-CRS rectangle → bounding box in the source CRS."""
        return self._route(
            source_crs,
            extent,
            lambda tr: tr.transform_bounds(extent, REVERSE),
        )

    # ── Points ────────────────────────────────────────────────

    def to_map_point(self, source_crs: CrsRecord | str, point: Point) -> Point:
        return self._route(
            source_crs, point, lambda tr: tr.transform_point(point, FORWARD)
        )

    def to_source_point(self, source_crs: CrsRecord | str, point: Point) -> Point:
        return self._route(
            source_crs, point, lambda tr: tr.transform_point(point, REVERSE)
        )

    # ── Point-or-rectangle convenience ────────────────────────

    def layer_to_map_coordinates(self, source_crs: CrsRecord | str, value: T) -> T:
        """
        Forward-transform a point, or a rectangle by its two corners.

        Unlike :meth:`to_map_extent` rectangle edges are not densified.
        """
        return self._dispatch(source_crs, value, FORWARD)

    def map_to_layer_coordinates(self, source_crs: CrsRecord | str, value: T) -> T:
        return self._dispatch(source_crs, value, REVERSE)

    # ── Internals ─────────────────────────────────────────────

    def _dispatch(
        self, source_crs: CrsRecord | str, value: T, direction: TransformDirection
    ) -> T:
        if isinstance(value, Point):
            return self._route(
                source_crs, value, lambda tr: tr.transform_point(value, direction)
            )
        if isinstance(value, Extent):
            return self._route(
                source_crs, value, lambda tr: tr.transform_corners(value, direction)
            )
        raise TypeError(f"Expected Point or Extent, got {type(value).__name__}")

    def _route(self, source_crs, value, apply) -> object:
        if not self.map_settings.projections_enabled:
            return value
        transform = self.transform_for(source_crs)
        result: TransformResult = apply(transform)
        if not result.ok:
            self.sink.log(f"Transform error caught: {result.error}", CATEGORY_CRS)
            return value
        logger.debug(
            "%s -> %s: %s => %s",
            transform.source_authid,
            transform.dest_authid,
            value,
            result.value,
        )
        return result.value


def _authid(crs: CrsRecord | str) -> str:
    return crs.authid if isinstance(crs, CrsRecord) else crs
