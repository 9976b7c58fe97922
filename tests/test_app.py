"""Smoke tests for the FastAPI application."""

from fastapi.testclient import TestClient

from clinic_finder.main import app
from clinic_finder.utils.config import get_settings


client = TestClient(app)


def test_health_endpoint() -> None:
    """Health endpoint should report the service as up."""

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_version_endpoint_reports_configured_version() -> None:
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": get_settings().app_version}
    assert app.version == get_settings().app_version


def test_routes_are_mounted_under_api_prefix() -> None:
    prefix = get_settings().api_prefix
    paths = {route.path for route in app.routes}

    assert f"{prefix}/clinics" in paths
    assert f"{prefix}/appointments" in paths
    assert client.get("/clinics").status_code == 404
