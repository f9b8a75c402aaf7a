"""
Tests for mapframe.main — configure_logging, create_app and lifespan.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from starlette.testclient import TestClient

from mapframe.main import configure_logging, create_app


# ═══════════════════════════════════════════════════════════════════
# configure_logging
# ═══════════════════════════════════════════════════════════════════
class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def restore_level(self):
        log = logging.getLogger("mapframe")
        before = log.level
        yield
        log.setLevel(before)

    def test_sets_package_logger_level(self):
        configure_logging("debug")
        assert logging.getLogger("mapframe").level == logging.DEBUG

    def test_child_loggers_inherit(self):
        configure_logging("WARNING")
        child = logging.getLogger("mapframe.services.map_settings")
        assert child.getEffectiveLevel() == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, caplog):
        with caplog.at_level(logging.WARNING, logger="mapframe.main"):
            configure_logging("chatty")
        assert logging.getLogger("mapframe").level == logging.INFO
        assert "Unknown log level" in caplog.text


# ═══════════════════════════════════════════════════════════════════
# create_app
# ═══════════════════════════════════════════════════════════════════
class TestCreateApp:
    def test_returns_fastapi_instance(self):
        app = create_app()
        assert isinstance(app, FastAPI)

    def test_app_title(self):
        app = create_app()
        assert app.title == "Mapframe"

    def test_app_version(self):
        app = create_app()
        assert app.version == "0.1.0"

    def test_routes_registered(self):
        app = create_app()
        paths = [r.path for r in app.routes]
        assert "/api/viewports" in paths
        assert "/api/viewports/{session_id}" in paths
        assert "/api/viewports/{session_id}/full-extent" in paths
        assert "/api/viewports/{session_id}/zoom-full" in paths
        assert "/api/viewports/{session_id}/transform" in paths
        assert "/api/viewports/{session_id}/pixels" in paths
        assert "/api/viewports/{session_id}/project" in paths
        assert "/api/sources" in paths
        assert "/api/sources/{source_id}" in paths
        assert "/health" in paths


# ═══════════════════════════════════════════════════════════════════
# Health endpoint (no lifespan needed)
# ═══════════════════════════════════════════════════════════════════
class TestHealthEndpoint:
    """Test /health without triggering lifespan."""

    @pytest.fixture()
    def client(self):
        app = create_app()

        @asynccontextmanager
        async def noop_lifespan(app):
            yield

        app.router.lifespan_context = noop_lifespan
        return TestClient(app)

    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "Mapframe"


# ═══════════════════════════════════════════════════════════════════
# Lifespan
# ═══════════════════════════════════════════════════════════════════
class TestLifespan:
    """Test the lifespan function with mocked factories."""

    @pytest.mark.asyncio
    async def test_lifespan_loads_registry_and_store(self):
        from mapframe.main import lifespan

        registry = MagicMock()
        registry.ids.return_value = ["roads", "rivers"]
        cache = MagicMock()

        with (
            patch("mapframe.services.sessions.get_source_registry", return_value=registry),
            patch("mapframe.services.sessions.get_session_store") as get_store,
            patch("mapframe.services.sessions.get_transform_cache", return_value=cache),
        ):
            async with lifespan(FastAPI()):
                get_store.assert_called_once()
                cache.clear.assert_not_called()

        registry.ids.assert_called_once()
        cache.clear.assert_called_once()

    @pytest.mark.asyncio
    async def test_lifespan_debug_forces_debug_logging(self):
        from mapframe.main import lifespan

        with (
            patch("mapframe.main.settings") as mock_settings,
            patch("mapframe.main.configure_logging") as configure,
            patch("mapframe.services.sessions.get_source_registry"),
            patch("mapframe.services.sessions.get_session_store"),
            patch("mapframe.services.sessions.get_transform_cache"),
        ):
            mock_settings.debug = True
            mock_settings.log_level = "WARNING"
            async with lifespan(FastAPI()):
                pass

        configure.assert_called_once_with("DEBUG")

    @pytest.mark.asyncio
    async def test_lifespan_bad_sources_file_fails_startup(self):
        from mapframe.main import lifespan
        from mapframe.services.registry import SourceRegistryError

        with patch(
            "mapframe.services.sessions.get_source_registry",
            side_effect=SourceRegistryError("broken"),
        ):
            with pytest.raises(SourceRegistryError, match="broken"):
                async with lifespan(FastAPI()):
                    pass
