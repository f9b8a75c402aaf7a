"""
Source Registry
===============
Resolves a source identifier to its native extent and CRS.

The viewport core only ever *reads* from a registry.  The bundled
implementation is an in-memory mapping, optionally loaded from a JSON
file of the form::

    [
      {"id": "roads", "name": "Roads", "crs": "EPSG:3857",
       "extent": [xmin, ymin, xmax, ymax]},
      ...
    ]

``"extent": null`` marks a source that has no data yet.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

from mapframe.spatial.extent import Extent

logger = logging.getLogger(__name__)


class SourceRegistryError(ValueError):
    """Raised when a sources file cannot be turned into a registry."""


@dataclass(frozen=True, slots=True)
class MapSource:
    id: str
    extent: Extent | None
    crs: str
    name: str = ""


class SourceRegistry(Protocol):
    def resolve(self, source_id: str) -> MapSource | None: ...

    def ids(self) -> list[str]: ...


class InMemorySourceRegistry:
    """Registry backed by a plain dict, insertion-ordered."""

    def __init__(self, sources: Iterable[MapSource] = ()) -> None:
        self._sources: dict[str, MapSource] = {}
        for source in sources:
            if source.id in self._sources:
                raise SourceRegistryError(f"Duplicate source id: {source.id!r}")
            self._sources[source.id] = source

    def resolve(self, source_id: str) -> MapSource | None:
        return self._sources.get(source_id)

    def ids(self) -> list[str]:
        return list(self._sources)

    def __iter__(self):
        return iter(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    # ── Loading ───────────────────────────────────────────────

    @classmethod
    def from_records(cls, records: list[dict]) -> InMemorySourceRegistry:
        sources = []
        for i, rec in enumerate(records):
            try:
                bounds = rec["extent"]
                extent = None if bounds is None else Extent.from_bounds(bounds)
                if extent is not None and not all(map(math.isfinite, extent.as_tuple())):
                    raise ValueError(f"non-finite extent {bounds!r}")
                sources.append(
                    MapSource(
                        id=str(rec["id"]),
                        extent=extent,
                        crs=str(rec["crs"]),
                        name=str(rec.get("name", rec["id"])),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise SourceRegistryError(
                    f"Invalid source record #{i}: {exc!r}"
                ) from exc
        return cls(sources)

    @classmethod
    def from_file(cls, path: str | Path) -> InMemorySourceRegistry:
        path = Path(path)
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SourceRegistryError(f"Cannot read sources file {path}: {exc}") from exc
        if not isinstance(records, list):
            raise SourceRegistryError(f"{path}: expected a JSON list of sources")
        registry = cls.from_records(records)
        logger.info("Loaded %d sources from %s", len(registry), path)
        return registry
