"""
Extent Aggregator
=================
Computes the *full extent* of a layer set: every source's native extent
projected into the destination CRS and unioned.  Sources without an
extent (``None`` or inverted) are skipped; a single-point source is not.

A zero-area union cannot be used as a requested extent (derivation would
reject it), so it is padded:

* exactly the origin point  → the unit box ``[-1, -1] × [1, 1]``;
* anything else             → each axis grows by ``|min| × pad_factor``
  on both sides (by ``pad_factor`` itself when that minimum is 0).
"""

from __future__ import annotations

import logging
from typing import Iterable

from mapframe.config import get_settings
from mapframe.services.diagnostics import CATEGORY_LAYERS, DiagnosticSink
from mapframe.services.registry import SourceRegistry
from mapframe.services.transform_router import TransformRouter
from mapframe.spatial.extent import Extent

logger = logging.getLogger(__name__)
settings = get_settings()

ORIGIN_FALLBACK_EXTENT = Extent(-1.0, -1.0, 1.0, 1.0)


class ExtentAggregator:
    """
    Parameters
    ----------
    router : TransformRouter
        Also supplies the default layer set (``router.map_settings.layers``).
    registry : SourceRegistry
    sink : DiagnosticSink
    pad_factor : float, optional
        Defaults to ``settings.full_extent_pad_factor``.
    """

    def __init__(
        self,
        router: TransformRouter,
        registry: SourceRegistry,
        sink: DiagnosticSink,
        pad_factor: float | None = None,
    ) -> None:
        self.router = router
        self.registry = registry
        self.sink = sink
        self.pad_factor = (
            settings.full_extent_pad_factor if pad_factor is None else pad_factor
        )

    def full_extent(self, layers: Iterable[str] | None = None) -> Extent:
        if layers is None:
            layers = self.router.map_settings.layers
        layers = list(layers)
        logger.debug("Computing full extent over %d layers", len(layers))

        full = Extent.minimal()
        for source_id in layers:
            source = self.registry.resolve(source_id)
            if source is None:
                self.sink.log(
                    f"Layer {source_id!r} not found in source registry",
                    CATEGORY_LAYERS,
                )
                continue
            # Zero-area extents (single features) still count.
            if source.extent is None or source.extent.is_null():
                logger.debug("Skipping %s: no extent", source_id)
                continue
            projected = self.router.to_map_extent(source.crs, source.extent)
            logger.debug("%s: %s -> %s", source_id, source.extent, projected)
            full = full.union(projected)

        if full.is_minimal():
            logger.debug("No layer contributed to the full extent")
            return full

        if full.width == 0.0 or full.height == 0.0:
            full = self._pad_degenerate(full)

        logger.debug("Full extent: %s", full)
        return full

    def zoom_to_full_extent(self, layers: Iterable[str] | None = None) -> Extent:
        """Compute the full extent and make it the requested extent."""
        full = self.full_extent(layers)
        self.router.map_settings.set_extent(full)
        return full

    def _pad_degenerate(self, extent: Extent) -> Extent:
        if extent.as_tuple() == (0.0, 0.0, 0.0, 0.0):
            return ORIGIN_FALLBACK_EXTENT
        # abs() keeps negative minima padding outward; a zero minimum pads by
        # the factor itself.
        width_pad = abs(extent.x_min) * self.pad_factor or self.pad_factor
        height_pad = abs(extent.y_min) * self.pad_factor or self.pad_factor
        return extent.buffered(width_pad, height_pad)
