"""
Mapframe — Configuration via pydantic-settings.

Environment variables override defaults.  The two numeric policy constants
(``min_extent_proportion`` and ``full_extent_pad_factor``) are tuned for
double precision; change them only together with the boundary tests.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import ClassVar

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mapframe.spatial.units import MapUnit

# Smallest width/|mean x| (and height/|mean y|) ratio accepted for a
# sub-unit extent.  Below this a double cannot resolve the view.
MIN_EXTENT_PROPORTION = 1e-12
# Relative padding applied to a zero-area full extent.
FULL_EXTENT_PAD_FACTOR = 1e-8


class Settings(BaseSettings):
    env_path: ClassVar[str] = str(Path(__file__).resolve().parents[1] / ".env")
    model_config = SettingsConfigDict(
        env_file=env_path,
        env_file_encoding="utf-8",
        env_prefix="MAPFRAME_",
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────
    app_name: str = "Mapframe"
    debug: bool = False
    log_level: str = "INFO"

    # ── Viewport defaults ──────────────────────────────────────────
    default_dpi: float = 96.0
    default_destination_crs: str = "EPSG:4326"
    default_map_units: MapUnit = MapUnit.DEGREES
    projections_enabled: bool = False

    # ── Numeric policy ─────────────────────────────────────────────
    min_extent_proportion: float = MIN_EXTENT_PROPORTION
    full_extent_pad_factor: float = FULL_EXTENT_PAD_FACTOR

    # ── CRS transforms ─────────────────────────────────────────────
    bbox_densify_points: int = 21
    transform_cache_size: int = 64

    # ── Sources ────────────────────────────────────────────────────
    # JSON file listing the available data sources (format documented in
    # mapframe.services.registry).  Empty registry when unset.
    sources_file: Path | None = None

    # ── Sessions ───────────────────────────────────────────────────
    max_sessions: int = 256

    # ── CORS ───────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    @field_validator("default_dpi")
    @classmethod
    def dpi_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("default_dpi must be > 0")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse the comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
