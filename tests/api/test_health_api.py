"""Tests for health endpoints and request plumbing."""

from stockledger import __version__


async def test_health(client):
    response = await client.get("/health")
    body = response.json()

    assert response.status_code == 200
    assert body["status"] == "healthy"
    assert body["version"] == __version__
    assert body["uptime_seconds"] >= 0


async def test_db_health(client):
    body = (await client.get("/health/db")).json()
    assert body["status"] == "healthy"
    assert body["database"]["name"] == "sqlite"
    assert body["database"]["available"] is True


async def test_health_is_not_under_api_prefix(client):
    response = await client.get("/api/health")
    assert response.status_code == 404


async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


async def test_unknown_route_is_404(client):
    response = await client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"
