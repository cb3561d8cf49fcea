"""Integration tests for the FastAPI generation endpoints.

The app is built with an orchestrator wired to fake collaborators and an
in-memory database, so requests exercise routing, validation, error
handlers and the background worker without network access.
"""

import time

import pytest
from fastapi.testclient import TestClient

from planvision.main import create_app
from planvision.services.ai_providers import AuthenticationError

API = "/api/v1"


@pytest.fixture
def test_client(orchestrator):
    with TestClient(create_app(orchestrator=orchestrator)) as client:
        yield client


def wait_for_terminal(client, config_id, attempts=100):
    """Poll the latest-generation endpoint until the job finishes."""
    for _ in range(attempts):
        body = client.get(f"{API}/render-configs/{config_id}/generation").json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.01)
    raise AssertionError(f"generation for {config_id} did not finish")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealth:
    """Test GET /health."""

    def test_health(self, test_client):
        resp = test_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert "X-Process-Time" in resp.headers

    def test_request_id_is_echoed(self, test_client):
        resp = test_client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"


# ---------------------------------------------------------------------------
# Render configs
# ---------------------------------------------------------------------------


class TestRenderConfigs:
    """Test POST /render-configs and GET /render-configs/{id}."""

    def test_create_triggers_generation(self, test_client):
        resp = test_client.post(
            f"{API}/render-configs",
            json={
                "inputImageUrl": "https://images.test/living.jpg",
                "imageTypeLabel": "Living Room",
                "styleName": "Industrial",
                "colorPrimaryHex": "#222222",
            },
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["styleName"] == "Industrial"
        assert data["generation"]["status"] == "pending"

        final = wait_for_terminal(test_client, data["id"])
        assert final["status"] == "completed"
        assert final["id"] == data["generation"]["id"]
        assert "Industrial" in final["promptUsed"]

    def test_invalid_perspective_is_rejected(self, test_client):
        resp = test_client.post(
            f"{API}/render-configs",
            json={"inputImageUrl": "https://images.test/plan.png", "perspectiveX": 1.5},
        )
        assert resp.status_code == 422

    def test_get_config(self, test_client, render_config):
        resp = test_client.get(f"{API}/render-configs/c1")
        assert resp.status_code == 200
        assert resp.json()["imageTypeLabel"] == "Kitchen"

    def test_get_unknown_config(self, test_client):
        resp = test_client.get(f"{API}/render-configs/missing")
        assert resp.status_code == 404
        assert resp.json()["code"] == 404


# ---------------------------------------------------------------------------
# Generations
# ---------------------------------------------------------------------------


class TestGenerations:
    """Test the generation job endpoints."""

    def test_latest_without_jobs_is_placeholder(self, test_client, render_config):
        resp = test_client.get(f"{API}/render-configs/c1/generation")

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == ""
        assert data["status"] == "pending"

    def test_create_generation(self, test_client, render_config):
        resp = test_client.post(f"{API}/render-configs/c1/generations")

        assert resp.status_code == 202
        job = resp.json()
        assert job["status"] == "pending"
        assert set(job) >= {"id", "status", "promptUsed", "outputImageUrl", "errorMessage", "createdAt"}

        final = wait_for_terminal(test_client, "c1")
        assert final["outputImageUrl"] == f"https://storage.test/gen-{job['id']}.jpg"

    def test_create_generation_for_unknown_config(self, test_client):
        resp = test_client.post(f"{API}/render-configs/missing/generations")
        assert resp.status_code == 404

    def test_failed_generation_reports_message(self, test_client, render_config, provider):
        provider.outcomes = [AuthenticationError("Gemini authentication failed: API key not valid")]

        test_client.post(f"{API}/render-configs/c1/generations")
        final = wait_for_terminal(test_client, "c1")

        assert final["status"] == "failed"
        assert final["errorMessage"] == "Gemini authentication failed: API key not valid"

    def test_history(self, test_client, render_config):
        test_client.post(f"{API}/render-configs/c1/generations")
        wait_for_terminal(test_client, "c1")

        resp = test_client.get(f"{API}/render-configs/c1/generations")

        assert resp.status_code == 200
        assert len(resp.json()) == 1
        assert resp.json()[0]["status"] == "completed"

    def test_history_for_unknown_config(self, test_client):
        assert test_client.get(f"{API}/render-configs/missing/generations").status_code == 404


# ---------------------------------------------------------------------------
# Refinements
# ---------------------------------------------------------------------------


class TestRefinements:
    """Test POST /render-configs/{id}/refinements."""

    def test_refine(self, test_client, render_config):
        resp = test_client.post(
            f"{API}/render-configs/c1/refinements",
            json={"customInstructions": "warmer lighting"},
        )

        assert resp.status_code == 201
        child = resp.json()
        assert child["parentConfigId"] == "c1"
        final = wait_for_terminal(test_client, child["id"])
        assert "ADDITIONAL REQUIREMENTS: warmer lighting" in final["promptUsed"]

    def test_refine_requires_instructions(self, test_client, render_config):
        resp = test_client.post(f"{API}/render-configs/c1/refinements", json={"customInstructions": ""})
        assert resp.status_code == 422
