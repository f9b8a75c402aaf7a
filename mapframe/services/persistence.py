"""
Persisted map canvas record
===========================
Reads and writes the four elements that describe a view in a project
file::

    <units>degrees</units>
    <extent><xmin/><ymin/><xmax/><ymax/></extent>
    <projections>0</projections>
    <destinationsrs><spatialrefsys>…</spatialrefsys></destinationsrs>

Only inputs are stored; derived values are recomputed on read.
"""

from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET

from pyproj.exceptions import CRSError

from mapframe.services.map_settings import MapSettings
from mapframe.spatial.crs import CrsRecord
from mapframe.spatial.extent import Extent
from mapframe.spatial.units import MapUnit

logger = logging.getLogger(__name__)

ROOT_TAG = "mapcanvas"
_EXTENT_FIELDS = ("xmin", "ymin", "xmax", "ymax")


class PersistenceError(ValueError):
    """Raised when a persisted record cannot be parsed."""


# ── Element helpers ───────────────────────────────────────────────

def _text_element(tag: str, text: str) -> ET.Element:
    elem = ET.Element(tag)
    elem.text = text
    return elem


def write_extent(extent: Extent) -> ET.Element:
    node = ET.Element("extent")
    for tag, value in zip(_EXTENT_FIELDS, extent.as_tuple()):
        node.append(_text_element(tag, repr(float(value))))
    return node


def read_extent(node: ET.Element) -> Extent:
    values = []
    for tag in _EXTENT_FIELDS:
        text = node.findtext(tag)
        if text is None:
            raise PersistenceError(f"<extent> is missing <{tag}>")
        try:
            values.append(float(text))
        except ValueError as exc:
            raise PersistenceError(f"<{tag}> is not a number: {text!r}") from exc
        if not math.isfinite(values[-1]):
            raise PersistenceError(f"<{tag}> is not finite: {text!r}")
    return Extent(*values)


def write_crs(crs: CrsRecord) -> ET.Element:
    node = ET.Element("spatialrefsys")
    node.append(_text_element("proj4", crs.proj4))
    node.append(_text_element("authid", crs.authid))
    node.append(_text_element("description", crs.description))
    node.append(_text_element("geographicflag", "true" if crs.is_geographic else "false"))
    return node


def read_crs(node: ET.Element) -> CrsRecord | None:
    """Resolve a ``<spatialrefsys>`` by authid, then by PROJ string."""
    srs = node if node.tag == "spatialrefsys" else node.find("spatialrefsys")
    if srs is None:
        return None
    for tag in ("authid", "proj4"):
        value = (srs.findtext(tag) or "").strip()
        if not value:
            continue
        try:
            return CrsRecord.from_user_input(value)
        except CRSError as exc:
            logger.warning("Cannot resolve <%s>%s</%s>: %s", tag, value, tag, exc)
    return None


# ── MapSettings <-> XML ───────────────────────────────────────────

def write_xml(map_settings: MapSettings, parent: ET.Element) -> ET.Element:
    """Append units, extent, projections and destination CRS to ``parent``."""
    parent.append(_text_element("units", map_settings.map_units.value))
    parent.append(write_extent(map_settings.extent))
    parent.append(
        _text_element("projections", str(int(map_settings.projections_enabled)))
    )
    srs_node = ET.SubElement(parent, "destinationsrs")
    srs_node.append(write_crs(map_settings.destination_crs))
    return parent


def read_xml(map_settings: MapSettings, node: ET.Element) -> MapSettings:
    """
    Apply a persisted record to ``map_settings``.

    Every element is parsed before any input changes, so a malformed
    record raises :class:`PersistenceError` and leaves ``map_settings``
    untouched.  Missing elements leave the corresponding input unchanged.
    The extent is applied last so the final derivation sees every other
    input.
    """
    units = None
    units_node = node.find("units")
    if units_node is not None:
        units = MapUnit.decode(units_node.text)

    projections = None
    proj_node = node.find("projections")
    if proj_node is not None:
        try:
            projections = bool(int((proj_node.text or "0").strip()))
        except ValueError as exc:
            raise PersistenceError(
                f"<projections> must be 0 or 1, got {proj_node.text!r}"
            ) from exc

    crs = None
    srs_node = node.find("destinationsrs")
    if srs_node is not None:
        crs = read_crs(srs_node)
        if crs is None:
            logger.warning("Destination CRS record unusable; keeping %s",
                           map_settings.destination_crs)

    extent = None
    extent_node = node.find("extent")
    if extent_node is not None:
        extent = read_extent(extent_node)

    if units is not None:
        map_settings.set_map_units(units)
    if projections is not None:
        map_settings.set_projections_enabled(projections)
    if crs is not None:
        map_settings.set_destination_crs(crs)
    if extent is not None:
        map_settings.set_extent(extent)
    return map_settings


def to_xml_string(map_settings: MapSettings) -> str:
    root = write_xml(map_settings, ET.Element(ROOT_TAG))
    ET.indent(root)
    return ET.tostring(root, encoding="unicode")


def from_xml_string(text: str | bytes, map_settings: MapSettings | None = None) -> MapSettings:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise PersistenceError(f"Malformed map canvas XML: {exc}") from exc
    return read_xml(map_settings if map_settings is not None else MapSettings(), root)
