"""
Viewport Derivation
===================
``MapSettings`` owns the inputs that describe one rendered view and the
quantities derived from them:

    inputs   extent, output size, dpi, destination CRS, map units,
             projections flag, layer set, render flags
    derived  valid, visible extent, map units per pixel, scale,
             map-to-pixel transform

Every mutator replaces one input and re-derives *everything* before it
returns.  There is no lazy or partial invalidation: after any call either
``valid`` is false or all derived values agree with the current inputs.

When a derivation ends with ``valid = False`` the derived attributes keep
whatever they held before; they must not be read until the settings are
valid again.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from mapframe.config import get_settings
from mapframe.spatial.crs import CrsRecord
from mapframe.spatial.extent import Extent
from mapframe.spatial.map_to_pixel import MapToPixel
from mapframe.spatial.scale import ScaleCalculator
from mapframe.spatial.units import MapUnit, RenderFlag, RenderFlags

logger = logging.getLogger(__name__)
settings = get_settings()


class MapSettings:
    """
    Parameters
    ----------
    destination_crs : CrsRecord | str, optional
        Rendering CRS.  Defaults to ``settings.default_destination_crs``.
    map_units : MapUnit, optional
    dpi : float, optional
    projections_enabled : bool, optional
    min_extent_proportion : float, optional
        Defaults to ``settings.min_extent_proportion``
        (:data:`~mapframe.config.MIN_EXTENT_PROPORTION` unless configured).
    """

    def __init__(
        self,
        *,
        destination_crs: CrsRecord | str | None = None,
        map_units: MapUnit | str | None = None,
        dpi: float | None = None,
        projections_enabled: bool | None = None,
        min_extent_proportion: float | None = None,
    ) -> None:
        if min_extent_proportion is None:
            min_extent_proportion = settings.min_extent_proportion
        self.min_extent_proportion = min_extent_proportion

        # ── Inputs ──
        self._extent = Extent()
        self._size: tuple[float, float] = (0, 0)
        self._dpi = float(dpi if dpi is not None else settings.default_dpi)
        if not 0 < self._dpi < math.inf:
            raise ValueError(f"DPI must be a finite number > 0, got {dpi}")
        self._destination_crs = _as_crs(
            destination_crs or settings.default_destination_crs
        )
        self._projections_enabled = bool(
            settings.projections_enabled
            if projections_enabled is None
            else projections_enabled
        )
        self._map_units = MapUnit(map_units or settings.default_map_units)
        self._flags = RenderFlags()
        self._layers: list[str] = []

        # ── Derived ──
        self._valid = False
        self._visible_extent = Extent()
        self._map_units_per_pixel = 1.0
        self._scale = 0.0
        self._map_to_pixel = MapToPixel()

        self._update_derived()

    # ══════════════════════════════════════════════════════════
    # Inputs
    # ══════════════════════════════════════════════════════════

    @property
    def extent(self) -> Extent:
        """The requested extent, exactly as last set."""
        return self._extent

    def set_extent(self, extent: Extent) -> None:
        self._extent = extent
        self._update_derived()

    @property
    def output_size(self) -> tuple[float, float]:
        return self._size

    def set_output_size(self, width: float, height: float) -> None:
        if not (0 <= width < math.inf and 0 <= height < math.inf):
            raise ValueError(
                f"Output size must be finite and non-negative, got {width}x{height}"
            )
        self._size = (width, height)
        self._update_derived()

    @property
    def output_dpi(self) -> float:
        return self._dpi

    def set_output_dpi(self, dpi: float) -> None:
        if not 0 < dpi < math.inf:
            raise ValueError(f"DPI must be a finite number > 0, got {dpi}")
        self._dpi = float(dpi)
        self._update_derived()

    @property
    def destination_crs(self) -> CrsRecord:
        return self._destination_crs

    def set_destination_crs(self, crs: CrsRecord | str) -> None:
        self._destination_crs = _as_crs(crs)
        self._update_derived()

    @property
    def map_units(self) -> MapUnit:
        return self._map_units

    def set_map_units(self, units: MapUnit | str) -> None:
        self._map_units = MapUnit(units)
        self._update_derived()

    @property
    def projections_enabled(self) -> bool:
        return self._projections_enabled

    def set_projections_enabled(self, enabled: bool) -> None:
        self._projections_enabled = bool(enabled)
        self._update_derived()

    def has_crs_transform_enabled(self) -> bool:
        return self._projections_enabled

    @property
    def layers(self) -> list[str]:
        return list(self._layers)

    def set_layers(self, layers: Iterable[str]) -> None:
        self._layers = list(layers)
        self._update_derived()

    # ── Render flags ──────────────────────────────────────────

    @property
    def flags(self) -> RenderFlags:
        return self._flags

    def set_flags(self, flags: RenderFlags) -> None:
        self._flags = flags
        self._update_derived()

    def set_flag(self, flag: RenderFlag | str, on: bool = True) -> None:
        self._flags = self._flags.with_flag(flag, on)
        self._update_derived()

    def test_flag(self, flag: RenderFlag | str) -> bool:
        return self._flags.test(flag)

    # ══════════════════════════════════════════════════════════
    # Derived outputs
    # ══════════════════════════════════════════════════════════

    @property
    def valid(self) -> bool:
        return self._valid

    def has_valid_settings(self) -> bool:
        return self._valid

    @property
    def visible_extent(self) -> Extent:
        """Requested extent grown to the output aspect ratio."""
        return self._visible_extent

    @property
    def map_units_per_pixel(self) -> float:
        return self._map_units_per_pixel

    @property
    def scale(self) -> float:
        """Scale denominator ("1:scale")."""
        return self._scale

    @property
    def map_to_pixel(self) -> MapToPixel:
        return self._map_to_pixel

    # ══════════════════════════════════════════════════════════
    # Derivation
    # ══════════════════════════════════════════════════════════

    def _update_derived(self) -> None:
        extent = self._extent

        if extent.is_empty():
            self._valid = False
            return

        # A width or height that overflows (or a NaN corner) has no usable
        # map units per pixel.
        if not (math.isfinite(extent.width) and math.isfinite(extent.height)):
            logger.debug("Extent %s is not finite", extent)
            self._valid = False
            return

        # Refuse zooms so deep that the extent is no longer representable
        # in a double: compare width with the mean |x| (height with mean
        # |y|).  Only sub-unit extents need the check; zero was already
        # rejected as empty above.
        if 0 < extent.width < 1 and 0 < extent.height < 1:
            x_mean = (abs(extent.x_min) + abs(extent.x_max)) * 0.5
            y_mean = (abs(extent.y_min) + abs(extent.y_max)) * 0.5
            x_range = extent.width / x_mean
            y_range = extent.height / y_mean
            if (
                x_range < self.min_extent_proportion
                or y_range < self.min_extent_proportion
            ):
                logger.debug("Extent %s too small for double precision", extent)
                self._valid = False
                return

        width, height = self._size
        if not width or not height:
            self._valid = False
            return

        mupp_x = extent.width / width
        mupp_y = extent.height / height
        mupp = mupp_y if mupp_y > mupp_x else mupp_x

        x_min, y_min, x_max, y_max = extent.as_tuple()
        if mupp_y > mupp_x:
            whitespace = (width * mupp - extent.width) * 0.5
            x_min -= whitespace
            x_max += whitespace
        else:
            whitespace = (height * mupp - extent.height) * 0.5
            y_min -= whitespace
            y_max += whitespace
        visible = Extent(x_min, y_min, x_max, y_max)

        scale = ScaleCalculator(self._map_units, self._dpi).calculate(visible, width)
        if not (
            math.isfinite(mupp)
            and mupp > 0
            and math.isfinite(scale)
            and all(math.isfinite(v) for v in visible.as_tuple())
        ):
            logger.debug("Derived values for %s are not finite", extent)
            self._valid = False
            return

        self._map_units_per_pixel = mupp
        self._visible_extent = visible
        self._scale = scale
        self._map_to_pixel = MapToPixel(mupp, height, visible.y_min, visible.x_min)
        self._valid = True

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Map units per pixel (x,y): %r, %r", mupp_x, mupp_y)
            logger.debug("Output dimensions (x,y): %r, %r", width, height)
            logger.debug("Extent: %s -> visible %s", extent, visible)
            logger.debug(
                "Adjusted map units per pixel (x,y): %r, %r",
                visible.width / width,
                visible.height / height,
            )
            logger.debug("Scale (%s) = 1:%r", self._map_units.value, scale)

    def __repr__(self) -> str:
        return (
            f"MapSettings(extent={self._extent}, size={self._size}, "
            f"dpi={self._dpi}, crs={self._destination_crs.authid}, "
            f"valid={self._valid})"
        )


def _as_crs(crs: CrsRecord | str) -> CrsRecord:
    if isinstance(crs, CrsRecord):
        return crs
    return CrsRecord.from_user_input(crs)
