"""
Shared fixtures for the Mapframe test suite.

This conftest provides:
- A recording diagnostic sink
- A scripted transform cache (pure offsets, optional failures) so router
  and aggregator tests do not depend on PROJ behaviour
- Sample source factories
"""
from __future__ import annotations

import pytest

from mapframe.services.map_settings import MapSettings
from mapframe.services.registry import InMemorySourceRegistry, MapSource
from mapframe.spatial.extent import Extent, Point
from mapframe.spatial.transform import TransformDirection, TransformResult


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------
class RecordingSink:
    """DiagnosticSink that keeps every message."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def log(self, message: str, category: str) -> None:
        self.messages.append((message, category))

    def categories(self) -> list[str]:
        return [c for _, c in self.messages]


# ---------------------------------------------------------------------------
# Scripted transforms
# ---------------------------------------------------------------------------
class OffsetTransform:
    """Adds (dx, dy) forward and subtracts it in reverse."""

    def __init__(self, source_authid, dest_authid, dx=0.0, dy=0.0, fail=False):
        self.source_authid = source_authid
        self.dest_authid = dest_authid
        self.dx = dx
        self.dy = dy
        self.fail = fail

    def _shift(self, direction):
        sign = 1.0 if direction is TransformDirection.FORWARD else -1.0
        return sign * self.dx, sign * self.dy

    def transform_point(self, point, direction=TransformDirection.FORWARD):
        if self.fail:
            return TransformResult.failure("scripted failure")
        dx, dy = self._shift(direction)
        return TransformResult.success(Point(point.x + dx, point.y + dy))

    def transform_bounds(self, extent, direction=TransformDirection.FORWARD, densify_points=None):
        if self.fail:
            return TransformResult.failure("scripted failure")
        dx, dy = self._shift(direction)
        return TransformResult.success(Extent(
            extent.x_min + dx, extent.y_min + dy, extent.x_max + dx, extent.y_max + dy
        ))

    def transform_corners(self, extent, direction=TransformDirection.FORWARD):
        return self.transform_bounds(extent, direction)


class ScriptedTransformCache:
    """
    TransformCache stand-in.  ``offsets`` maps a source authid to
    ``(dx, dy)``; sources listed in ``failing`` always fail.
    """

    def __init__(self, offsets=None, failing=()):
        self.offsets = dict(offsets or {})
        self.failing = set(failing)
        self.lookups: list[tuple[str, str]] = []

    def lookup(self, source_authid, dest_authid):
        self.lookups.append((source_authid, dest_authid))
        dx, dy = self.offsets.get(source_authid, (0.0, 0.0))
        return OffsetTransform(
            source_authid, dest_authid, dx, dy, fail=source_authid in self.failing
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def map_settings() -> MapSettings:
    ms = MapSettings(destination_crs="EPSG:3857", map_units="meters")
    ms.set_output_size(800, 600)
    return ms


def make_source(
    id: str = "roads",
    extent: Extent | None = None,
    crs: str = "EPSG:3857",
    name: str | None = None,
) -> MapSource:
    return MapSource(
        id=id,
        extent=extent if extent is not None else Extent(0, 0, 1000, 500),
        crs=crs,
        name=name or id.title(),
    )


@pytest.fixture()
def registry() -> InMemorySourceRegistry:
    return InMemorySourceRegistry(
        [
            make_source("roads", Extent(0, 0, 1000, 500)),
            make_source("rivers", Extent(-200, 100, 300, 900)),
            MapSource(id="empty", extent=None, crs="EPSG:3857", name="Empty"),
        ]
    )
