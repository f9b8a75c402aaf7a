"""
Mapframe — FastAPI Application
==============================
Viewport sessions over a shared CRS transform cache and source registry.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mapframe.config import get_settings
from mapframe.routers import sources, viewports

logger = logging.getLogger(__name__)
settings = get_settings()


def configure_logging(level: str) -> None:
    """Set the level of the ``mapframe`` logger tree."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        logger.warning("Unknown log level %r, using INFO", level)
        numeric = logging.INFO
    logging.getLogger("mapframe").setLevel(numeric)


# ── Lifespan (startup / shutdown) ─────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
        - Apply the configured log level.
        - Load the source registry (fails fast on a bad sources file).
        - Create the shared transform cache and session store.
    Shutdown:
        - Drop cached transforms.
    """
    configure_logging("DEBUG" if settings.debug else settings.log_level)
    logger.info("Mapframe starting up...")

    from mapframe.services.sessions import (
        get_session_store,
        get_source_registry,
        get_transform_cache,
    )

    registry = get_source_registry()
    logger.info("Source registry ready (%d sources)", len(registry.ids()))
    get_session_store()

    yield

    get_transform_cache().clear()
    logger.info("Mapframe shut down.")


# ── App factory ───────────────────────────────────────────────────
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description=(
            "Viewport derivation, CRS routing and full-extent aggregation "
            "for map rendering sessions."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(viewports.router, prefix="/api")
    app.include_router(sources.router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": settings.app_name}

    return app


# ── Module-level app instance (for `uvicorn mapframe.main:app`) ──
app = create_app()
