"""Integration tests for the FastAPI application."""

from __future__ import annotations

import math

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    """Test client over the offline catalogs (network providers and Redis disabled)."""
    from cosmos_engine.main import create_app

    with TestClient(create_app()) as c:
        yield c


def test_health_endpoint(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_ready_endpoint(client):
    data = client.get("/api/v1/ready").json()
    assert data["status"] == "ready"
    assert data["cache"] is None
    assert data["generation"] == 0
    assert data["providers"] == [
        "content-gallery", "model-repository", "code-host", "web-search", "local-index",
    ]


def test_nothing_published_yet(client):
    assert client.get("/api/v1/graph").status_code == 404
    assert client.get("/api/v1/layout/frame").status_code == 404
    assert client.get("/api/v1/graph/export").status_code == 404


def test_search_builds_positioned_graph(client):
    resp = client.post("/api/v1/search", json={"query": "  helmet ", "sources": ["all"]})
    assert resp.status_code == 200
    data = resp.json()

    assert data["status"] == "completed"
    assert data["generation"] == 1
    assert data["query"] == "helmet"
    nodes = data["graph"]["nodes"]
    assert [n["id"] for n in nodes] == [
        "gallery-damaged-helmet", "gallery-flight-helmet", "objaverse-helmet-001",
    ]
    # the two artworks are chained by type
    assert data["link_count"] == 1
    assert data["graph"]["links"][0]["strength"] == 0.5
    for node in nodes:
        assert node["relevance"] == pytest.approx(0.8)
        assert 50 <= math.sqrt(sum(c * c for c in node["spatial_position"])) < 80

    assert client.get("/api/v1/graph").json()["graph_id"] == data["graph"]["graph_id"]


def test_search_restricted_to_sources(client):
    data = client.post("/api/v1/search", json={"query": "three", "sources": ["github"]}).json()
    assert data["node_count"] > 0
    assert {n["source_tag"] for n in data["graph"]["nodes"]} == {"code-host"}


def test_search_without_sources_uses_default_sources(monkeypatch):
    from cosmos_engine.main import create_app

    monkeypatch.setenv("DEFAULT_SOURCES", '["content-gallery"]')
    with TestClient(create_app()) as c:
        data = c.post("/api/v1/search", json={"query": "helmet"}).json()
        explicit = c.post("/api/v1/search", json={"query": "helmet", "sources": ["all"]}).json()

    assert data["node_count"] == 2
    assert {n["source_tag"] for n in data["graph"]["nodes"]} == {"content-gallery"}
    assert "model-repository" in {n["source_tag"] for n in explicit["graph"]["nodes"]}


def test_search_rejects_empty_query(client):
    assert client.post("/api/v1/search", json={"query": ""}).status_code == 422


def test_frame_and_tick(client):
    client.post("/api/v1/search", json={"query": "helmet"})

    frame = client.get("/api/v1/layout/frame").json()
    assert frame["time"] == 0.0
    assert len(frame["nodes"]) == 3
    assert len(frame["links"][0]["points"]) == 21
    assert frame["nodes"][0]["color"] == "#FF6B6B"
    assert frame["nodes"][0]["size"] == 5.0

    assert client.post("/api/v1/layout/tick").json()["time"] == pytest.approx(0.01)
    resp = client.post("/api/v1/layout/tick", json={"delta_time": 0.5})
    assert resp.json()["time"] == pytest.approx(0.51)
    assert client.post("/api/v1/layout/tick", json={"delta_time": -1}).status_code == 422


def test_import_graph(client):
    resp = client.post("/api/v1/graph/import", json={
        "nodes": [
            {"id": "a", "name": "Repo", "source": "github", "type": "repository"},
            {"id": "b", "name": "Owner", "source": "github", "type": "user"},
        ],
        "links": [{"source": "b", "target": "a", "value": 0.3}, {"source": "a", "target": "zzz"}],
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["node_count"] == 2
    assert data["link_count"] == 1
    assert data["generation"] == 1
    assert all(n["spatial_position"] is not None for n in data["nodes"])


def test_import_rejects_bad_payload(client):
    resp = client.post("/api/v1/graph/import", json="not a graph")
    assert resp.status_code == 400


def test_export_formats(client):
    client.post("/api/v1/graph/import", json=[{"id": "a", "name": "A & B"}])

    resp = client.get("/api/v1/graph/export?format=json")
    assert resp.status_code == 200
    assert resp.json()["node_count"] == 1

    resp = client.get("/api/v1/graph/export?format=graphml")
    assert resp.status_code == 200
    assert "<graphml" in resp.text
    assert "A &amp; B" in resp.text
