"""Integration tests for the FastAPI router."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from steer_ops_gateway.errors import BackendError
from steer_ops_gateway.http import create_router


@pytest.fixture
def client(gateway):
    app = FastAPI()
    app.include_router(create_router(gateway), prefix="/gateway")
    return TestClient(app)


@pytest.mark.integration
class TestHTTPAPI:
    """Test the HTTP surface over a faked gateway."""

    def test_invoke_success(self, client, executor):
        response = client.post(
            "/gateway/operations/listUsers",
            json={"tenant": "t1", "args": {"maxResults": 10}}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"op": "listUsers", "args": {"maxResults": 10}},
        }
        assert executor.calls[0][1].tenant_id == "t1"

    def test_invoke_failure_is_still_200(self, client, executor):
        """Test failures are reported in the envelope rather than as HTTP errors."""
        executor.script["createUser"] = [BackendError("email taken", code="auth/email-already-exists")]

        response = client.post("/gateway/operations/createUser", json={"args": {"email": "a@b.com"}})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error"]["category"] == "Auth"
        assert body["error"]["type"] == "Duplicate"
        assert "data" not in body

    def test_invoke_unknown_operation(self, client):
        response = client.post("/gateway/operations/launchRockets", json={})

        assert response.status_code == 200
        assert response.json()["error"]["type"] == "Generic"

    def test_bypass_cache_flag(self, client, executor):
        client.post("/gateway/operations/listSites", json={"tenant": "t1"})
        client.post("/gateway/operations/listSites", json={"tenant": "t1", "bypass_cache": True})

        assert executor.calls_for("listSites") == 2

    def test_invalid_timeout_rejected(self, client):
        response = client.post("/gateway/operations/listSites", json={"timeout_ms": -5})

        assert response.status_code == 422

    def test_list_operations(self, client):
        response = client.get("/gateway/operations")

        names = [entry["name"] for entry in response.json()["operations"]]
        assert "listUsers" in names
        assert names == sorted(names)

    def test_get_operation(self, client):
        response = client.get("/gateway/operations/listUsers")

        assert response.status_code == 200
        assert response.json()["category"] == "authOps"
        assert response.json()["cacheable"] is True

    def test_get_unknown_operation(self, client):
        assert client.get("/gateway/operations/launchRockets").status_code == 404

    def test_stats(self, client):
        client.post("/gateway/operations/listUsers", json={"tenant": "t1"})
        client.post("/gateway/operations/listUsers", json={"tenant": "t1"})

        stats = client.get("/gateway/stats").json()

        assert stats["cache_hits"] == 1
        assert stats["tenants"] == 1
