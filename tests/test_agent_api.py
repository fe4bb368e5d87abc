import pytest
from fastapi.testclient import TestClient
from src.agent import AgentStatus


@pytest.fixture
def client(api_app):
    return TestClient(api_app)


def test_get_status_defaults_to_offline(client):
    response = client.get("/agent/status")

    assert response.status_code == 200
    assert response.json() == {"status": "offline"}


@pytest.mark.parametrize("value", ["online", "offline"])
def test_post_status_then_get_returns_new_value(client, value):
    response = client.post("/agent/status", json={"status": value})

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get("/agent/status").json() == {"status": value}


@pytest.mark.parametrize("value", ["ONLINE", "away", "", None, 1, ["online"]])
def test_post_invalid_status_is_rejected(client, api_app, value):
    api_app.state.status_register.set("online")

    response = client.post("/agent/status", json={"status": value})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid status"}
    assert api_app.state.status_register.get() is AgentStatus.ONLINE


def test_post_without_status_field_is_rejected(client):
    response = client.post("/agent/status", json={})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_post_malformed_body_is_a_client_error(client):
    response = client.post(
        "/agent/status", content="status=online", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_status_register_missing_is_unavailable(api_app):
    api_app.state.status_register = None

    response = TestClient(api_app).get("/agent/status")

    assert response.status_code == 503
    assert response.json() == {"success": False, "message": "Status register not initialised"}


def test_unknown_route_uses_api_envelope(client):
    response = client.get("/agent/unknown")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}
