# Data Fair MCP Server
# File: tests/test_http_transport.py
# Version: v1

"""Tests for the HTTP application (SSE streams, companion endpoints, stateless /mcp)."""

from __future__ import annotations

import json
import math

import anyio
import httpx
import pytest
from mcp.server.streamable_http import StreamableHTTPServerTransport
from starlette.testclient import TestClient

from datafair_mcp.client import CatalogHTTPError
from datafair_mcp.config import DataFairConfig
from datafair_mcp.models import Column, DatasetDetail, DatasetPage, DatasetSummary
from datafair_mcp.server import SERVER_NAME
from datafair_mcp.sessions import SessionRegistry
from datafair_mcp.tools import tasks
from datafair_mcp.transports import streamable_http
from datafair_mcp.transports.http_server import create_app

CONFIG = DataFairConfig(url="https://df.example.org", transport="http")

_LIST_TOOLS = {"jsonrpc": "2.0", "id": 1, "method": "tools/list", "params": {}}
_PING = {"jsonrpc": "2.0", "id": 2, "method": "ping"}
_INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "tests", "version": "0"},
    },
}
_MCP_HEADERS = {"accept": "application/json, text/event-stream"}


class _CatalogClient:
    """Canned catalog answers for the tools and the dataset server."""

    async def list_datasets(self, query=None, select=None, size=10) -> DatasetPage:
        return DatasetPage(
            count=1,
            datasets=[DatasetSummary(id="abc", title="Élus municipaux", link="https://p/abc")],
        )

    async def get_dataset(self, dataset_id: str) -> DatasetDetail:
        if dataset_id != "abc":
            raise CatalogHTTPError(
                url=f"https://df.example.org/data-fair/api/v1/datasets/{dataset_id}",
                status_code=404,
                body="Dataset not found",
            )
        return DatasetDetail(
            id="abc",
            title="Élus municipaux",
            link="https://p/abc",
            count=2,
            schema=[Column(key="nom", type="string", title="Nom")],
        )


@pytest.fixture
def no_catalog(monkeypatch):
    """Fail loudly if anything tries to reach the catalog."""

    def _boom(*args, **kwargs):
        raise AssertionError("the catalog client must not be used")

    monkeypatch.setattr(tasks, "_make_client", _boom)


@pytest.fixture
def catalog(monkeypatch):
    fake = _CatalogClient()
    monkeypatch.setattr(tasks, "_make_client", lambda *args, **kwargs: fake)
    return fake


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def client(registry, no_catalog):
    return TestClient(create_app(CONFIG, registry=registry))


# ---------------------------------------------------------------------------
# Stateless /mcp
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("method", ["get", "delete"])
def test_stateless_endpoint_refuses_get_and_delete(client, method):
    response = getattr(client, method)("/mcp")

    assert response.status_code == 405
    assert response.json() == {
        "jsonrpc": "2.0",
        "error": {"code": -32000, "message": "Method not allowed."},
        "id": None,
    }


def test_stateless_post_lists_tools(client):
    response = client.post("/mcp", json=_LIST_TOOLS, headers=_MCP_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 1
    names = {tool["name"] for tool in body["result"]["tools"]}
    assert names == {"search_datasets", "describe_dataset", "search_data", "aggregate_data"}


def test_stateless_tool_call_returns_both_encodings(registry, catalog):
    client = TestClient(create_app(CONFIG, registry=registry))
    call = {
        "jsonrpc": "2.0",
        "id": 7,
        "method": "tools/call",
        "params": {"name": "search_datasets", "arguments": {"query": "élus"}},
    }

    response = client.post("/mcp", json=call, headers=_MCP_HEADERS)

    assert response.status_code == 200
    result = response.json()["result"]
    assert result.get("isError") is not True
    assert result["structuredContent"] == json.loads(result["content"][0]["text"])
    assert result["structuredContent"]["datasets"][0]["id"] == "abc"


class _FailingTransport(StreamableHTTPServerTransport):
    async def handle_request(self, scope, receive, send):
        raise RuntimeError("handler failed")


def test_uncaught_error_before_response_yields_internal_error(client, monkeypatch):
    monkeypatch.setattr(streamable_http, "StreamableHTTPServerTransport", _FailingTransport)

    response = client.post("/mcp", json=_LIST_TOOLS, headers=_MCP_HEADERS)

    assert response.status_code == 500
    assert response.json() == {
        "jsonrpc": "2.0",
        "error": {"code": -32603, "message": "Internal server error"},
        "id": None,
    }


# ---------------------------------------------------------------------------
# POST /messages
# ---------------------------------------------------------------------------


def test_post_without_session_id_is_rejected(client):
    response = client.post("/messages", json=_LIST_TOOLS)

    assert response.status_code == 400
    assert "sessionId" in response.text


def test_post_to_never_opened_session_is_rejected(client):
    response = client.post("/messages?sessionId=deadbeef", json=_LIST_TOOLS)

    assert response.status_code == 400
    assert "No transport found for sessionId" in response.text


def test_post_to_open_session_is_delivered(client, registry):
    send_stream, receive_stream = anyio.create_memory_object_stream(1)
    session_id = registry.open(send_stream)

    response = client.post(f"/messages?sessionId={session_id}", json=_LIST_TOOLS)

    assert response.status_code == 202
    delivered = receive_stream.receive_nowait()
    assert delivered.message.root.method == "tools/list"


def test_unparsable_message_is_rejected(client, registry):
    send_stream, receive_stream = anyio.create_memory_object_stream(1)
    session_id = registry.open(send_stream)

    response = client.post(
        f"/messages?sessionId={session_id}",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.text == "Could not parse message"


# ---------------------------------------------------------------------------
# SSE streams, driven through the ASGI interface
# ---------------------------------------------------------------------------


def _get_scope(path: str) -> dict:
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver"), (b"accept", b"text/event-stream")],
        "server": ("testserver", 80),
        "client": ("testclient", 50000),
    }


class _SseStream:
    """Runs one GET against the app and exposes its events."""

    def __init__(self, app, path: str) -> None:
        self.app = app
        self.path = path
        self.disconnected = anyio.Event()
        self.status = None
        self._send, self._messages = anyio.create_memory_object_stream(math.inf)

    async def receive(self):
        await self.disconnected.wait()
        return {"type": "http.disconnect"}

    async def send(self, message) -> None:
        await self._send.send(message)

    async def run(self) -> None:
        await self.app(_get_scope(self.path), self.receive, self.send)

    async def next_event(self):
        while True:
            message = await self._messages.receive()
            if message["type"] == "http.response.start":
                self.status = message["status"]
                continue
            chunk = message.get("body", b"").decode()
            event, data = None, []
            for line in chunk.splitlines():
                if line.startswith("event:"):
                    event = line[len("event:"):].strip()
                elif line.startswith("data:"):
                    data.append(line[len("data:"):].strip())
            if event is not None:
                return event, "\n".join(data)


async def _stream_lifecycle(app, sse_path: str, messages_prefix: str) -> dict:
    stream = _SseStream(app, sse_path)
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")

    async with http, anyio.create_task_group() as tg:
        tg.start_soon(stream.run)
        with anyio.fail_after(5):
            event, endpoint = await stream.next_event()
            assert stream.status == 200
            assert event == "endpoint"
            assert endpoint.startswith(f"{messages_prefix}?sessionId=")

            accepted = await http.post(endpoint, json=_INITIALIZE)
            assert accepted.status_code == 202

            event, data = await stream.next_event()
            assert event == "message"
            initialized = json.loads(data)

            stream.disconnected.set()

        with anyio.fail_after(5):
            while True:
                response = await http.post(endpoint, json=_PING)
                if "is closed" in response.text:
                    break
                await anyio.sleep(0.01)
        assert response.status_code == 400

    return initialized


@pytest.mark.asyncio
async def test_sse_session_lifecycle(registry, no_catalog):
    app = create_app(CONFIG, registry=registry)

    initialized = await _stream_lifecycle(app, "/sse", "/messages")

    assert initialized["id"] == 1
    assert initialized["result"]["serverInfo"]["name"] == SERVER_NAME
    assert registry.stats()["open"] == 0
    assert registry.stats()["tombstones"] == 1


@pytest.mark.asyncio
async def test_dataset_sse_serves_single_dataset_server(registry, catalog):
    app = create_app(CONFIG, registry=registry)

    initialized = await _stream_lifecycle(
        app, "/api/datasets/abc/sse", "/api/datasets/abc/messages"
    )

    assert initialized["result"]["serverInfo"]["name"] == "Élus municipaux"
    assert registry.stats()["open"] == 0


def test_dataset_sse_surfaces_upstream_error(registry, catalog):
    client = TestClient(create_app(CONFIG, registry=registry))

    response = client.get("/api/datasets/missing/sse")

    assert response.status_code == 404
    assert response.text == "Dataset not found"
    assert len(registry) == 0
