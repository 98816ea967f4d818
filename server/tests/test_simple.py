"""Smoke test for the application factory's route table."""

from tour_coordinator.main import create_app


def test_app_exposes_coordinator_routes():
    app = create_app()
    routes = {
        (method, route.path)
        for route in app.routes
        for method in getattr(route, "methods", None) or ()
    }

    expected = {
        ("POST", "/v1/tour/create"),
        ("PUT", "/v1/tour/assign"),
        ("PUT", "/v1/tour/{tour_id}/accept"),
        ("PUT", "/v1/tour/{tour_id}/reject"),
        ("PUT", "/v1/tour/{tour_id}/status"),
        ("POST", "/v1/tour/reset-ended-availability"),
        ("GET", "/v1/tour"),
        ("POST", "/v1/tour-rejection/submit"),
        ("POST", "/v1/staff/create"),
        ("GET", "/v1/staff/available"),
        ("GET", "/v1/notification/{user_type}/{user_id}"),
        ("GET", "/health"),
        ("GET", "/ready"),
        ("GET", "/metrics"),
    }
    assert expected <= routes
