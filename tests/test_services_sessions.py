"""
Tests for mapframe.services.sessions — ViewportSessionStore.
"""
from __future__ import annotations

import uuid

import pytest

from mapframe.services.map_settings import MapSettings
from mapframe.services.sessions import ViewportSessionStore
from tests.conftest import ScriptedTransformCache


@pytest.fixture()
def store(registry, sink) -> ViewportSessionStore:
    return ViewportSessionStore(
        cache=ScriptedTransformCache(),
        registry=registry,
        sink=sink,
        max_sessions=3,
    )


class TestViewportSessionStore:

    def test_create_wires_session(self, store, registry, sink):
        session = store.create()
        assert isinstance(session.id, uuid.UUID)
        assert session.router.map_settings is session.map_settings
        assert session.aggregator.router is session.router
        assert session.aggregator.registry is registry
        assert session.router.sink is sink

    def test_create_uses_given_settings(self, store, map_settings):
        session = store.create(map_settings)
        assert session.map_settings is map_settings

    def test_sessions_do_not_share_settings(self, store):
        a = store.create()
        b = store.create()
        assert a.map_settings is not b.map_settings
        assert a.router.cache is b.router.cache

    def test_get(self, store):
        session = store.create()
        assert store.get(session.id) is session
        assert store.get(uuid.uuid4()) is None

    def test_delete(self, store):
        session = store.create()
        assert store.delete(session.id) is True
        assert store.get(session.id) is None
        assert store.delete(session.id) is False

    def test_oldest_is_evicted(self, store):
        sessions = [store.create() for _ in range(4)]
        assert len(store) == 3
        assert store.get(sessions[0].id) is None
        assert all(store.get(s.id) is s for s in sessions[1:])

    def test_default_settings_are_invalid(self, store):
        session = store.create()
        assert isinstance(session.map_settings, MapSettings)
        assert not session.map_settings.valid
