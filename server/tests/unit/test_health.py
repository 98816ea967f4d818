"""Unit tests for health endpoints."""

import pytest


@pytest.mark.asyncio
async def test_health_ping_rpc(test_client):
    """Test the RPC-style health ping endpoint."""
    response = await test_client.post("/v1/health/ping", json={})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"]["database"] == "ok"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_ping_reports_service_name(test_client):
    response = await test_client.post("/v1/health/ping")
    assert response.json()["service"] == "wildlife-tour-coordinator"


@pytest.mark.asyncio
async def test_metrics_exposes_coordinator_counters(test_client):
    response = await test_client.get("/metrics")
    assert response.status_code == 200
    for name in (
        "tours_created_total",
        "tour_staff_assigned_total",
        "tour_staff_released_total",
        "tour_rejections_total",
        "tour_assignment_conflicts_total",
    ):
        assert name in response.text
