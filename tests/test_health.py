"""Health check endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "cityfix-api"
    assert data["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_readiness_checks_database(client):
    response = await client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "ok"


@pytest.mark.asyncio
async def test_trace_id_header_present(client):
    response = await client.get("/api/health/live")
    assert response.status_code == 200
    assert "X-Trace-Id" in response.headers


@pytest.mark.asyncio
async def test_readiness_fails_without_upload_dir(client, tmp_path, monkeypatch):
    from cityfix.config import settings

    monkeypatch.setattr(settings, "image_store", "filesystem")
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path / "missing"))
    response = await client.get("/api/health/ready")
    assert response.status_code == 503
    assert response.json()["checks"]["image_store"].startswith("error")
