"""
Tests for the healing record API endpoints.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from healing_records.api.healing_endpoints import router as healing_router, get_healing_service


@pytest.fixture
def app(healing_service):
    """Create FastAPI app with the healing router bound to the test service."""
    app = FastAPI()
    app.include_router(healing_router)
    app.dependency_overrides[get_healing_service] = lambda: healing_service
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def selector_payload():
    return {
        "class_name": "LoginTest",
        "method_name": "testLogin",
        "locator": {"type": "css", "value": "#login-button"},
        "command": "findElement",
        "url": "https://example.com/login"
    }


@pytest.fixture
def healing_payload():
    return {
        "locator": {"type": "css", "value": "#login-button"},
        "url": "https://example.com/login",
        "command": "findElement",
        "page_content": "<html>A</html>",
        "results": [
            {"locator": {"type": "css", "value": "#login-btn"}, "score": 0.8},
            {"locator": {"type": "css", "value": "button[type=submit]"}, "score": 0.6}
        ],
        "used_result": {"locator": {"type": "css", "value": "button[type=submit]"}, "score": 0.6},
        "screenshot": "base64-png",
        "metrics": "{\"duration\": 12}"
    }


class TestSelectorEndpoint:

    def test_register_selector(self, client, selector_payload):
        response = client.post("/healenium/selector", json=selector_payload)

        assert response.status_code == 200
        assert len(response.json()["selector_id"]) == 64

    def test_register_selector_is_idempotent(self, client, selector_payload):
        first = client.post("/healenium/selector", json=selector_payload).json()
        second = client.post("/healenium/selector", json=selector_payload).json()

        assert first["selector_id"] == second["selector_id"]


class TestSaveHealingEndpoint:
    """Tests for saving healing attempts over HTTP."""

    def test_save_healing(self, client, selector_payload, healing_payload):
        client.post("/healenium/selector", json=selector_payload)

        response = client.post("/healenium/healing", json=healing_payload, headers={"sessionkey": "session-1"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["healing_result"]["locator"]["value"] == "button[type=submit]"
        assert data["healing_result"]["state"] == "unknown"

        report = client.get("/healenium/report/session-1").json()
        assert report["records"][0]["healing_result_id"] == data["healing_result"]["id"]

    def test_unknown_selector_returns_404(self, client, healing_payload):
        response = client.post("/healenium/healing", json=healing_payload)

        assert response.status_code == 404
        assert "not registered" in response.json()["detail"]

    def test_lost_selection_returns_500(self, client, selector_payload, healing_payload):
        client.post("/healenium/selector", json=selector_payload)
        healing_payload["used_result"] = {"locator": {"type": "css", "value": "#elsewhere"}, "score": 0.1}

        response = client.post("/healenium/healing", json=healing_payload)

        assert response.status_code == 500

    def test_empty_results_rejected(self, client, healing_payload):
        healing_payload["results"] = []

        response = client.post("/healenium/healing", json=healing_payload)

        assert response.status_code == 422


class TestReadEndpoints:
    """Tests for ranked views and result reads."""

    def test_get_healings(self, client, selector_payload, healing_payload):
        client.post("/healenium/selector", json=selector_payload)
        client.post("/healenium/healing", json=healing_payload)

        response = client.get("/healenium/healing", params={"class_name": "LoginTest"})

        assert response.status_code == 200
        views = response.json()
        assert len(views) == 1
        assert views[0]["locator"] == "#login-button"
        assert [r["locator"] for r in views[0]["results"]] == ["#login-btn", "button[type=submit]"]

    def test_get_healings_with_no_match(self, client):
        response = client.get("/healenium/healing", params={"class_name": "Nothing"})

        assert response.status_code == 200
        assert response.json() == []

    def test_get_healing_results(self, client, selector_payload, healing_payload):
        client.post("/healenium/selector", json=selector_payload)
        client.post("/healenium/healing", json=healing_payload)

        response = client.post("/healenium/healing/results", json={
            "locator": {"type": "css", "value": "#login-button"},
            "url": "https://example.com/login",
            "command": "findElement"
        })

        assert response.status_code == 200
        assert [r["score"] for r in response.json()] == [0.8, 0.6]


class TestFeedbackEndpoint:
    """Tests for healing feedback."""

    def test_feedback_updates_result(self, client, selector_payload, healing_payload):
        client.post("/healenium/selector", json=selector_payload)
        saved = client.post("/healenium/healing", json=healing_payload).json()
        result_id = saved["healing_result"]["id"]

        response = client.post("/healenium/healing/success",
                               json={"healing_result_id": result_id, "success_healing": True})

        assert response.status_code == 200
        assert response.json()["updated"] is True

    def test_feedback_for_unknown_result(self, client):
        response = client.post("/healenium/healing/success",
                               json={"healing_result_id": 4242, "success_healing": False})

        assert response.status_code == 200
        assert response.json()["updated"] is False


def test_health(client):
    assert client.get("/healenium/health").json() == {"status": "success"}
