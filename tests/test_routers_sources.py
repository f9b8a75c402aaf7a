"""
Tests for mapframe.routers.sources — read-only source registry endpoints.
"""
from __future__ import annotations

import pytest
import shapely.wkt
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from mapframe.routers.sources import router
from mapframe.services.sessions import get_source_registry


def _create_test_app() -> FastAPI:
    app = FastAPI()
    app.include_router(router, prefix="/api")
    return app


@pytest.fixture()
def client(registry):
    app = _create_test_app()
    app.dependency_overrides[get_source_registry] = lambda: registry
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://testserver")


# ═══════════════════════════════════════════════════════════════════
# GET /sources
# ═══════════════════════════════════════════════════════════════════
class TestListSources:
    @pytest.mark.asyncio
    async def test_lists_in_registry_order(self, client):
        resp = await client.get("/api/sources")
        assert resp.status_code == 200
        assert [s["id"] for s in resp.json()] == ["roads", "rivers", "empty"]

    @pytest.mark.asyncio
    async def test_source_without_extent(self, client):
        resp = await client.get("/api/sources")
        empty = resp.json()[2]
        assert empty["extent"] is None
        assert empty["wkt"] is None
        assert empty["name"] == "Empty"


# ═══════════════════════════════════════════════════════════════════
# GET /sources/{id}
# ═══════════════════════════════════════════════════════════════════
class TestGetSource:
    @pytest.mark.asyncio
    async def test_get(self, client):
        resp = await client.get("/api/sources/rivers")
        assert resp.status_code == 200
        data = resp.json()
        assert (data["id"], data["name"], data["crs"]) == ("rivers", "Rivers", "EPSG:3857")
        assert data["extent"] == {
            "x_min": -200.0, "y_min": 100.0, "x_max": 300.0, "y_max": 900.0,
        }
        assert shapely.wkt.loads(data["wkt"]).bounds == (-200.0, 100.0, 300.0, 900.0)

    @pytest.mark.asyncio
    async def test_unknown(self, client):
        resp = await client.get("/api/sources/ghost")
        assert resp.status_code == 404
