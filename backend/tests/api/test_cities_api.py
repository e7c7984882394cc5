"""Integration tests for city and health routes."""
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestHealth:
    def test_health(self, api_client):
        response = api_client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "x-request-id" in response.headers

    def test_health_while_shutting_down(self, api_client):
        api_client.app.state.shutting_down = True
        assert api_client.get("/api/health").status_code == 503

    def test_ready(self, api_client):
        response = api_client.get("/api/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] is True


class TestCities:
    def test_seeded_cities(self, api_client):
        names = {c["name"] for c in api_client.get("/api/cities").json()}
        assert names == {"Silicon Valley", "Sunset Boulevard", "Neon District"}

    def test_get_city(self, api_client, city_id):
        response = api_client.get(f"/api/cities/{city_id}")
        assert response.status_code == 200
        assert response.json()["vibe"] == "edgy"

    def test_create_city(self, api_client):
        response = api_client.post("/api/cities", json={"name": "Pixel Harbor", "theme": "retro", "vibe": "cozy"})
        assert response.status_code == 201
        assert response.json()["name_key"] == "pixel-harbor"

    def test_duplicate_city(self, api_client):
        response = api_client.post("/api/cities", json={"name": "neon district", "theme": "retro", "vibe": "cozy"})
        assert response.status_code == 409

    def test_invalid_city(self, api_client):
        response = api_client.post("/api/cities", json={"name": "NY", "theme": "retro", "vibe": "cozy"})
        assert response.status_code == 400

    def test_unknown_city(self, api_client):
        assert api_client.get(f"/api/cities/{uuid.uuid4()}").status_code == 404
