"""Services subpackage — viewport derivation, CRS routing and aggregation."""

from mapframe.services.diagnostics import DiagnosticSink, LoggingDiagnosticSink
from mapframe.services.extent import ExtentAggregator
from mapframe.services.map_settings import MapSettings
from mapframe.services.persistence import (
    PersistenceError,
    from_xml_string,
    read_xml,
    to_xml_string,
    write_xml,
)
from mapframe.services.registry import (
    InMemorySourceRegistry,
    MapSource,
    SourceRegistry,
    SourceRegistryError,
)
from mapframe.services.sessions import ViewportSession, ViewportSessionStore
from mapframe.services.transform_router import TransformRouter

__all__ = [
    "DiagnosticSink",
    "ExtentAggregator",
    "InMemorySourceRegistry",
    "LoggingDiagnosticSink",
    "MapSettings",
    "MapSource",
    "PersistenceError",
    "SourceRegistry",
    "SourceRegistryError",
    "TransformRouter",
    "ViewportSession",
    "ViewportSessionStore",
    "from_xml_string",
    "read_xml",
    "to_xml_string",
    "write_xml",
]
