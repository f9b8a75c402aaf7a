"""
Viewport Sessions
=================
One :class:`ViewportSession` per client view.  Each session owns its own
:class:`MapSettings`; only the transform cache, source registry and
diagnostic sink are shared between sessions.

``MapSettings`` is not synchronised.  The store's lock protects the
session table, not the sessions themselves; callers must not mutate one
session from several threads at once.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from functools import lru_cache

from mapframe.config import get_settings
from mapframe.services.diagnostics import DiagnosticSink, LoggingDiagnosticSink
from mapframe.services.extent import ExtentAggregator
from mapframe.services.map_settings import MapSettings
from mapframe.services.registry import InMemorySourceRegistry, SourceRegistry
from mapframe.services.transform_router import TransformRouter
from mapframe.spatial.transform import TransformCache

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class ViewportSession:
    id: uuid.UUID
    map_settings: MapSettings
    router: TransformRouter
    aggregator: ExtentAggregator


@dataclass
class ViewportSessionStore:
    """Bounded table of sessions; the oldest session is evicted first."""

    cache: TransformCache
    registry: SourceRegistry
    sink: DiagnosticSink
    max_sessions: int = 256
    _sessions: OrderedDict[uuid.UUID, ViewportSession] = field(
        default_factory=OrderedDict, init=False, repr=False
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def create(self, map_settings: MapSettings | None = None) -> ViewportSession:
        map_settings = map_settings if map_settings is not None else MapSettings()
        router = TransformRouter(map_settings, self.cache, self.sink)
        session = ViewportSession(
            id=uuid.uuid4(),
            map_settings=map_settings,
            router=router,
            aggregator=ExtentAggregator(router, self.registry, self.sink),
        )
        with self._lock:
            self._sessions[session.id] = session
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Evicted viewport session %s", evicted)
        logger.debug("Created viewport session %s", session.id)
        return session

    def get(self, session_id: uuid.UUID) -> ViewportSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def delete(self, session_id: uuid.UUID) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


# ── Cached factories ──────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_transform_cache() -> TransformCache:
    return TransformCache(
        max_size=settings.transform_cache_size,
        densify_points=settings.bbox_densify_points,
    )


@lru_cache(maxsize=1)
def get_source_registry() -> SourceRegistry:
    if settings.sources_file is None:
        return InMemorySourceRegistry()
    return InMemorySourceRegistry.from_file(settings.sources_file)


@lru_cache(maxsize=1)
def get_diagnostic_sink() -> DiagnosticSink:
    return LoggingDiagnosticSink()


@lru_cache(maxsize=1)
def get_session_store() -> ViewportSessionStore:
    return ViewportSessionStore(
        cache=get_transform_cache(),
        registry=get_source_registry(),
        sink=get_diagnostic_sink(),
        max_sessions=settings.max_sessions,
    )
