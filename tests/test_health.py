"""
Liveness and readiness probe tests.
"""
from marketplace.core.config import get_settings
from marketplace.main import app


def test_liveness(client):
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_readiness(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["checks"] == {"database": "ok", "jwt_secret": "ok"}


def test_readiness_without_jwt_secret(client, settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"jwt_secret": None})
    response = client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["checks"]["jwt_secret"] == "not configured"


def test_api_banner(client):
    response = client.get("/api")
    assert response.status_code == 200
