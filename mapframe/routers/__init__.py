"""Routers subpackage — FastAPI endpoint modules."""

from mapframe.routers import sources, viewports

__all__ = ["sources", "viewports"]
