"""
Tests for the application shell: root, health check and error format.
"""

from fastapi import status
from fastapi.testclient import TestClient

from reviewhub.services.rate_limiter import get_client_ip


def test_root(client: TestClient):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["docs"] == "/docs"


def test_health(client: TestClient):
    data = client.get("/health").json()

    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}
    assert data["rate_limiting"]["enabled"] is False


def test_unknown_route_uses_error_shape(client: TestClient):
    response = client.get("/api/v1/nothing-here")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Not Found"}


def test_bad_path_parameter_is_400(client: TestClient):
    response = client.get("/api/v1/reviews/not-a-number")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["details"][0]["loc"] == ["path", "review_id"]


class _FakeRequest:
    def __init__(self, headers: dict, host: str = "10.0.0.1"):
        self.headers = headers
        self.client = type("Client", (), {"host": host})()


def test_client_ip_prefers_forwarded_for():
    request = _FakeRequest({"X-Forwarded-For": "203.0.113.5, 10.0.0.2"})

    assert get_client_ip(request) == "203.0.113.5"


def test_client_ip_real_ip_then_peer():
    assert get_client_ip(_FakeRequest({"X-Real-IP": " 198.51.100.7 "})) == "198.51.100.7"
    assert get_client_ip(_FakeRequest({})) == "10.0.0.1"
