"""
Source Endpoints
================
Read-only view of the source registry.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from mapframe.schemas.viewport import ExtentModel, SourceOut
from mapframe.services.registry import MapSource, SourceRegistry
from mapframe.services.sessions import get_source_registry

router = APIRouter(prefix="/sources", tags=["Sources"])


def _to_out(source: MapSource) -> SourceOut:
    if source.extent is None:
        return SourceOut(id=source.id, name=source.name, crs=source.crs)
    return SourceOut(
        id=source.id,
        name=source.name,
        crs=source.crs,
        extent=ExtentModel.from_extent(source.extent),
        wkt=source.extent.to_wkt(),
    )


@router.get("", response_model=list[SourceOut])
async def list_sources(registry: SourceRegistry = Depends(get_source_registry)):
    sources = (registry.resolve(i) for i in registry.ids())
    return [_to_out(s) for s in sources if s is not None]


@router.get("/{source_id}", response_model=SourceOut)
async def get_source(
    source_id: str,
    registry: SourceRegistry = Depends(get_source_registry),
):
    source = registry.resolve(source_id)
    if source is None:
        raise HTTPException(404, "Source not found")
    return _to_out(source)
