"""
Viewport Endpoints
==================
Create viewport sessions, mutate their inputs, and read the derived
state, full extent, point transforms, pixel batches and persisted
record.
"""

from __future__ import annotations

import uuid

import numpy as np
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pyproj.exceptions import CRSError

from mapframe.schemas.viewport import (
    ExtentModel,
    FullExtentResponse,
    OutputSize,
    PixelBatchRequest,
    PixelBatchResponse,
    PixelTransformModel,
    PointModel,
    RenderFlagsModel,
    TransformPointRequest,
    TransformPointResponse,
    ViewportInputs,
    ViewportState,
)
from mapframe.services.map_settings import MapSettings
from mapframe.services.persistence import PersistenceError, from_xml_string, to_xml_string
from mapframe.services.sessions import (
    ViewportSession,
    ViewportSessionStore,
    get_session_store,
)
from mapframe.spatial.transform import TransformDirection

router = APIRouter(prefix="/viewports", tags=["Viewports"])


# ── Helpers ───────────────────────────────────────────────────────
def _get_session(
    session_id: uuid.UUID,
    store: ViewportSessionStore = Depends(get_session_store),
) -> ViewportSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(404, "Viewport session not found")
    return session


def apply_inputs(map_settings: MapSettings, inputs: ViewportInputs) -> None:
    """
    Apply every provided input through its mutator.  The extent goes
    last so the final derivation runs against the complete input set.
    """
    if inputs.destination_crs is not None:
        try:
            map_settings.set_destination_crs(inputs.destination_crs)
        except CRSError as exc:
            raise HTTPException(400, f"Unknown CRS {inputs.destination_crs!r}: {exc}")
    if inputs.map_units is not None:
        map_settings.set_map_units(inputs.map_units)
    if inputs.projections_enabled is not None:
        map_settings.set_projections_enabled(inputs.projections_enabled)
    if inputs.dpi is not None:
        map_settings.set_output_dpi(inputs.dpi)
    if inputs.output_size is not None:
        map_settings.set_output_size(inputs.output_size.width, inputs.output_size.height)
    if inputs.layers is not None:
        map_settings.set_layers(inputs.layers)
    if inputs.flags is not None:
        map_settings.set_flags(inputs.flags.to_flags())
    if inputs.extent is not None:
        map_settings.set_extent(inputs.extent.to_extent())


def to_state(session: ViewportSession) -> ViewportState:
    ms = session.map_settings
    width, height = ms.output_size
    state = ViewportState(
        id=session.id,
        valid=ms.valid,
        extent=ExtentModel.from_extent(ms.extent),
        output_size=OutputSize(width=width, height=height),
        dpi=ms.output_dpi,
        destination_crs=ms.destination_crs.authid,
        map_units=ms.map_units,
        projections_enabled=ms.projections_enabled,
        layers=ms.layers,
        flags=RenderFlagsModel.from_flags(ms.flags),
    )
    if ms.valid:
        m2p = ms.map_to_pixel
        state.visible_extent = ExtentModel.from_extent(ms.visible_extent)
        state.map_units_per_pixel = ms.map_units_per_pixel
        state.scale = ms.scale
        state.pixel_transform = PixelTransformModel(
            map_units_per_pixel=m2p.map_units_per_pixel,
            height=m2p.height,
            x_min=m2p.x_min,
            y_min=m2p.y_min,
            matrix=m2p.matrix.tolist(),
        )
    return state


# ── Session lifecycle ─────────────────────────────────────────────
@router.post("", response_model=ViewportState, status_code=201)
async def create_viewport(
    inputs: ViewportInputs | None = None,
    store: ViewportSessionStore = Depends(get_session_store),
):
    """Open a new viewport session, optionally seeded with inputs."""
    map_settings = MapSettings()
    if inputs is not None:
        apply_inputs(map_settings, inputs)
    session = store.create(map_settings)
    return to_state(session)


@router.get("/{session_id}", response_model=ViewportState)
async def get_viewport(session: ViewportSession = Depends(_get_session)):
    return to_state(session)


@router.patch("/{session_id}", response_model=ViewportState)
async def update_viewport(
    inputs: ViewportInputs,
    session: ViewportSession = Depends(_get_session),
):
    apply_inputs(session.map_settings, inputs)
    return to_state(session)


@router.delete("/{session_id}", status_code=204)
async def delete_viewport(
    session_id: uuid.UUID,
    store: ViewportSessionStore = Depends(get_session_store),
):
    if not store.delete(session_id):
        raise HTTPException(404, "Viewport session not found")
    return Response(status_code=204)


# ── Full extent ───────────────────────────────────────────────────
@router.get("/{session_id}/full-extent", response_model=FullExtentResponse)
async def full_extent(session: ViewportSession = Depends(_get_session)):
    """Union of every layer's extent in the destination CRS."""
    extent = session.aggregator.full_extent()
    return FullExtentResponse(
        extent=ExtentModel.from_extent(extent),
        empty=extent.is_minimal(),
    )


@router.post("/{session_id}/zoom-full", response_model=ViewportState)
async def zoom_full(session: ViewportSession = Depends(_get_session)):
    session.aggregator.zoom_to_full_extent()
    return to_state(session)


# ── Point transform ───────────────────────────────────────────────
@router.post("/{session_id}/transform", response_model=TransformPointResponse)
async def transform_point(
    req: TransformPointRequest,
    session: ViewportSession = Depends(_get_session),
):
    """
    Move a point between ``source_crs`` and the viewport's destination
    CRS.  A failed transform returns the point unchanged.
    """
    point = req.point.to_point()
    if req.direction is TransformDirection.FORWARD:
        out = session.router.to_map_point(req.source_crs, point)
    else:
        out = session.router.to_source_point(req.source_crs, point)
    return TransformPointResponse(
        source_crs=req.source_crs,
        destination_crs=session.map_settings.destination_crs.authid,
        direction=req.direction,
        point=PointModel(x=out.x, y=out.y),
    )


# ── Pixel batch ───────────────────────────────────────────────────
@router.post("/{session_id}/pixels", response_model=PixelBatchResponse)
async def to_pixels(
    req: PixelBatchRequest,
    session: ViewportSession = Depends(_get_session),
):
    """
    Map coordinates → device pixels for the current view.  Points given
    in another CRS are routed to the destination CRS first.
    """
    ms = session.map_settings
    if not ms.valid:
        raise HTTPException(409, "Viewport settings are not valid")
    points = [p.to_point() for p in req.points]
    if req.source_crs is not None:
        points = [session.router.to_map_point(req.source_crs, p) for p in points]
    coords = np.array([p.as_tuple() for p in points], dtype=float).reshape(-1, 2)
    pixels = ms.map_to_pixel.transform_points(coords)
    if not np.isfinite(pixels).all():
        raise HTTPException(422, "Points fall outside the representable pixel range")
    return PixelBatchResponse(
        pixels=[PointModel(x=px, y=py) for px, py in pixels.tolist()]
    )


# ── Persisted record ──────────────────────────────────────────────
@router.get("/{session_id}/project")
async def export_project(session: ViewportSession = Depends(_get_session)):
    return Response(
        content=to_xml_string(session.map_settings),
        media_type="application/xml",
    )


@router.put("/{session_id}/project", response_model=ViewportState)
async def import_project(
    request: Request,
    session: ViewportSession = Depends(_get_session),
):
    body = await request.body()
    try:
        from_xml_string(body, session.map_settings)
    except PersistenceError as exc:
        raise HTTPException(400, str(exc))
    return to_state(session)
