# Data Fair MCP Server
# File: tests/test_sessions.py
# Version: v1

from __future__ import annotations

import pytest

from datafair_mcp.sessions import (
    ClosedSessionError,
    MissingSessionError,
    SessionError,
    SessionRegistry,
    UnknownSessionError,
)


def test_open_get_close_lifecycle():
    registry: SessionRegistry[str] = SessionRegistry()
    writer = "writer-1"

    session_id = registry.open(writer)

    assert session_id in registry
    assert len(registry) == 1
    assert registry.get(session_id) == writer

    registry.close(session_id)

    assert session_id not in registry
    assert len(registry) == 0
    with pytest.raises(ClosedSessionError):
        registry.get(session_id)


def test_session_ids_are_unique():
    registry: SessionRegistry[object] = SessionRegistry()
    ids = {registry.open(object()) for _ in range(50)}
    assert len(ids) == 50


def test_never_opened_session_is_unknown():
    registry: SessionRegistry[str] = SessionRegistry()

    with pytest.raises(UnknownSessionError) as info:
        registry.get("deadbeef")

    assert "No transport found for sessionId" in str(info.value)
    assert info.value.session_id == "deadbeef"


def test_missing_session_id():
    registry: SessionRegistry[str] = SessionRegistry()

    for value in (None, ""):
        with pytest.raises(MissingSessionError):
            registry.get(value)


def test_all_session_errors_are_lookup_errors():
    assert issubclass(SessionError, LookupError)
    for cls in (MissingSessionError, UnknownSessionError, ClosedSessionError):
        assert issubclass(cls, SessionError)


def test_close_is_idempotent():
    registry: SessionRegistry[str] = SessionRegistry()
    session_id = registry.open("w")

    registry.close(session_id)
    registry.close(session_id)
    registry.close("never-opened")

    assert registry.stats() == {"open": 0, "tombstones": 1, "max_tombstones": 1024}


def test_tombstones_are_bounded():
    registry: SessionRegistry[str] = SessionRegistry(max_tombstones=2)
    ids = [registry.open(f"w{i}") for i in range(3)]
    for session_id in ids:
        registry.close(session_id)

    # Oldest tombstone was forgotten: it is now merely unknown.
    with pytest.raises(UnknownSessionError):
        registry.get(ids[0])
    with pytest.raises(ClosedSessionError):
        registry.get(ids[2])
    assert registry.stats()["tombstones"] == 2
