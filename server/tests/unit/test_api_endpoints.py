"""Integration tests for API endpoints."""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from tour_coordinator.core.dependencies import ROLE_ADMIN, ROLE_TOUR_GUIDE, ROLE_WILDLIFE_OFFICER


async def _register(client, role, first_name, email):
    response = await client.post(
        "/v1/staff/create",
        json={"role": role, "first_name": first_name, "last_name": "Test", "email": email}
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_tour_endpoint(test_client, sample_tour_data):
    """Test the tour creation endpoint."""
    response = await test_client.post("/v1/tour/create", json=sample_tour_data)

    assert response.status_code == 201
    data = response.json()
    assert data["booking_id"] == sample_tour_data["booking_id"]
    assert data["preferred_date"] == sample_tour_data["preferred_date"]
    assert data["status"] == "Pending"
    assert data["assigned_tour_guide"] is None
    assert "id" in data


@pytest.mark.asyncio
async def test_create_tour_duplicate_booking(test_client, sample_tour_data):
    await test_client.post("/v1/tour/create", json=sample_tour_data)

    response = await test_client.post("/v1/tour/create", json=sample_tour_data)

    assert response.status_code == 409
    assert response.headers["content-type"].startswith("application/problem+json")
    data = response.json()
    assert data["code"] == "DUPLICATE_TOUR"
    assert data["instance"] == "/v1/tour/create"


@pytest.mark.asyncio
async def test_create_tour_in_the_past(test_client, sample_tour_data):
    sample_tour_data["preferred_date"] = (date.today() - timedelta(days=3)).isoformat()

    response = await test_client.post("/v1/tour/create", json=sample_tour_data)

    assert response.status_code == 400
    assert response.json()["title"] == "Validation Error"


@pytest.mark.asyncio
async def test_create_tour_invalid_data(test_client):
    """Test tour creation with invalid data."""
    response = await test_client.post("/v1/tour/create", json={"booking_id": "", "preferred_date": "soon"})

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == 422
    paths = {violation["path"] for violation in data["violations"]}
    assert "body.booking_id" in paths
    assert "body.preferred_date" in paths


@pytest.mark.asyncio
async def test_create_tour_with_staff(test_client, sample_tour_data, sample_guide_data):
    guide = await _register(test_client, "tourGuide", "Amani", sample_guide_data["email"])
    driver = await _register(test_client, "safariDriver", "Ruwan", "ruwan@example.com")
    sample_tour_data.update(assigned_tour_guide=guide["id"], assigned_driver=driver["id"])

    response = await test_client.post("/v1/tour/create", json=sample_tour_data)

    assert response.status_code == 201
    assert response.json()["status"] == "Confirmed"

    guide_state = (await test_client.get(f"/v1/staff/{guide['id']}")).json()
    assert guide_state["availability"] == "Busy"
    assert guide_state["current_tour_status"] == "Processing"


@pytest.mark.asyncio
async def test_assign_endpoint(test_client, sample_tour_data):
    guide = await _register(test_client, "tourGuide", "Amani", "amani@example.com")
    await test_client.post("/v1/tour/create", json=sample_tour_data)

    response = await test_client.put(
        "/v1/tour/assign",
        json={"booking_id": sample_tour_data["booking_id"], "assigned_tour_guide": guide["id"]}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Confirmed"
    assert data["assigned_tour_guide"] == guide["id"]


@pytest.mark.asyncio
async def test_assign_busy_guide_conflicts(test_client, sample_tour_data, tour_date):
    guide = await _register(test_client, "tourGuide", "Amani", "amani@example.com")
    await test_client.post("/v1/tour/create", json={**sample_tour_data, "assigned_tour_guide": guide["id"]})
    await test_client.post("/v1/tour/create", json={"booking_id": "BK-2", "preferred_date": tour_date.isoformat()})

    response = await test_client.put(
        "/v1/tour/assign",
        json={"booking_id": "BK-2", "assigned_tour_guide": guide["id"]}
    )

    assert response.status_code == 409
    assert response.json()["code"] == "STAFF_UNAVAILABLE"


@pytest.mark.asyncio
async def test_assign_unknown_staff(test_client, sample_tour_data):
    await test_client.post("/v1/tour/create", json=sample_tour_data)

    response = await test_client.put(
        "/v1/tour/assign",
        json={"booking_id": sample_tour_data["booking_id"], "assigned_driver": str(uuid4())}
    )

    assert response.status_code == 404
    assert response.json()["resource_type"] == "safari driver"


@pytest.mark.asyncio
async def test_accept_reject_and_status_flow(test_client, sample_tour_data):
    guide = await _register(test_client, "tourGuide", "Amani", "amani@example.com")
    created = await test_client.post(
        "/v1/tour/create", json={**sample_tour_data, "assigned_tour_guide": guide["id"]}
    )
    tour_id = created.json()["id"]

    accepted = await test_client.put(f"/v1/tour/{tour_id}/accept")
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "Accepted"

    started = await test_client.put(f"/v1/tour/{tour_id}/status", json={"status": "Started"})
    assert started.status_code == 200

    backwards = await test_client.put(f"/v1/tour/{tour_id}/status", json={"status": "Processing"})
    assert backwards.status_code == 409
    assert backwards.json()["code"] == "INVALID_TRANSITION"

    ended = await test_client.put(f"/v1/tour/{tour_id}/status", json={"status": "Ended"})
    assert ended.status_code == 200
    guide_state = (await test_client.get(f"/v1/staff/{guide['id']}")).json()
    assert guide_state["availability"] == "Available"

    rejected = await test_client.put(f"/v1/tour/{tour_id}/reject", json={"reason": "Too late"})
    assert rejected.status_code == 409


@pytest.mark.asyncio
async def test_reject_with_blank_reason(test_client, sample_tour_data):
    created = await test_client.post("/v1/tour/create", json=sample_tour_data)

    response = await test_client.put(f"/v1/tour/{created.json()['id']}/reject", json={"reason": "  "})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_status_value(test_client, sample_tour_data):
    created = await test_client.post("/v1/tour/create", json=sample_tour_data)

    response = await test_client.put(f"/v1/tour/{created.json()['id']}/status", json={"status": "Paused"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_tour(test_client, sample_tour_data):
    created = await test_client.post("/v1/tour/create", json=sample_tour_data)
    tour_id = created.json()["id"]

    response = await test_client.get(f"/v1/tour/{tour_id}")
    assert response.status_code == 200
    assert response.json()["tour_notes"] == sample_tour_data["tour_notes"]

    missing = await test_client.get(f"/v1/tour/{uuid4()}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_submit_rejection_endpoint(test_client, sample_tour_data):
    guide = await _register(test_client, "tourGuide", "Amani", "amani@example.com")
    created = await test_client.post(
        "/v1/tour/create", json={**sample_tour_data, "assigned_tour_guide": guide["id"]}
    )
    tour_id = created.json()["id"]

    response = await test_client.post(
        "/v1/tour-rejection/submit",
        json={"tour_id": tour_id, "tour_guide_id": guide["id"], "reason": "Vehicle breakdown"}
    )

    assert response.status_code == 201
    assert response.json()["reason"] == "Vehicle breakdown"

    tour = (await test_client.get(f"/v1/tour/{tour_id}")).json()
    assert tour["status"] == "Pending"
    assert tour["assigned_tour_guide"] is None

    guide_tours = (await test_client.get(f"/v1/tour/guide/{guide['id']}")).json()
    assert guide_tours == []


@pytest.mark.asyncio
async def test_submit_rejection_unknown_tour(test_client):
    guide = await _register(test_client, "tourGuide", "Amani", "amani@example.com")

    response = await test_client.post(
        "/v1/tour-rejection/submit",
        json={"tour_id": str(uuid4()), "tour_guide_id": guide["id"], "reason": "Sick"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_tours_requires_auth(test_client):
    response = await test_client.get("/v1/tour")

    assert response.status_code == 401
    data = response.json()
    assert data["status"] == 401
    assert "authentication" in data["title"].lower()


@pytest.mark.asyncio
async def test_list_tours_by_caller_role(test_client, auth_headers, sample_tour_data, tour_date):
    guide = await _register(test_client, "tourGuide", "Amani", "amani@example.com")
    await test_client.post("/v1/tour/create", json={**sample_tour_data, "assigned_tour_guide": guide["id"]})
    await test_client.post("/v1/tour/create", json={"booking_id": "BK-2", "preferred_date": tour_date.isoformat()})

    officer_view = await test_client.get("/v1/tour", headers=auth_headers(ROLE_WILDLIFE_OFFICER))
    guide_view = await test_client.get("/v1/tour", headers=auth_headers(ROLE_TOUR_GUIDE, guide["id"]))

    assert officer_view.status_code == 200
    assert len(officer_view.json()) == 2
    assert [t["booking_id"] for t in guide_view.json()] == [sample_tour_data["booking_id"]]


@pytest.mark.asyncio
async def test_list_tours_with_bad_token(test_client):
    response = await test_client.get("/v1/tour", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_reset_ended_availability_is_admin_only(test_client, auth_headers):
    missing = await test_client.post("/v1/tour/reset-ended-availability")
    forbidden = await test_client.post(
        "/v1/tour/reset-ended-availability", headers=auth_headers(ROLE_TOUR_GUIDE)
    )
    allowed = await test_client.post(
        "/v1/tour/reset-ended-availability", headers=auth_headers(ROLE_ADMIN)
    )

    assert missing.status_code == 401
    assert forbidden.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json() == {"ended_tours": 0, "reset_staff": 0, "staff_details": []}


@pytest.mark.asyncio
async def test_staff_endpoints(test_client, sample_guide_data, tour_date):
    created = await test_client.post("/v1/staff/create", json=sample_guide_data)
    assert created.status_code == 201
    staff_id = created.json()["id"]

    duplicate = await test_client.post("/v1/staff/create", json=sample_guide_data)
    assert duplicate.status_code == 409

    blocked = await test_client.put(
        f"/v1/staff/{staff_id}/daily-availability",
        json={"day": tour_date.isoformat(), "is_available": False}
    )
    assert blocked.status_code == 200
    assert blocked.json()["daily_availability"][tour_date.isoformat()]["is_available"] is False

    on_day = await test_client.get("/v1/staff/available", params={"role": "tourGuide", "on": tour_date.isoformat()})
    any_day = await test_client.get("/v1/staff/available", params={"role": "tourGuide"})
    assert on_day.json() == []
    assert [s["id"] for s in any_day.json()] == [staff_id]

    missing = await test_client.get(f"/v1/staff/{uuid4()}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_register_staff_invalid_role(test_client, sample_guide_data):
    response = await test_client.post("/v1/staff/create", json={**sample_guide_data, "role": "ranger"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_notification_endpoints(test_client, sample_tour_data):
    driver = await _register(test_client, "safariDriver", "Ruwan", "ruwan@example.com")
    await test_client.post("/v1/tour/create", json={**sample_tour_data, "assigned_driver": driver["id"]})

    listed = await test_client.get(f"/v1/notification/Driver/{driver['id']}")
    assert listed.status_code == 200
    [notification] = listed.json()
    assert notification["recipient"] == {"user_type": "Driver", "user_id": driver["id"]}
    assert notification["type"] == "ASSIGNED_TOUR"
    assert notification["is_read"] is False

    read = await test_client.put(f"/v1/notification/{notification['id']}/read")
    assert read.status_code == 200
    assert read.json()["is_read"] is True

    unread = await test_client.get(f"/v1/notification/Driver/{driver['id']}", params={"unread_only": True})
    assert unread.json() == []

    as_guide = await test_client.get(f"/v1/notification/TourGuide/{driver['id']}")
    assert as_guide.json() == []

    missing = await test_client.put(f"/v1/notification/{uuid4()}/read")
    assert missing.status_code == 404
