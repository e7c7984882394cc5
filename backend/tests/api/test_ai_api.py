"""Integration tests for ambient content routes."""
import uuid

import pytest

from geocities.llm.fake import FakeLanguageModel

pytestmark = pytest.mark.integration


class TestAmbientRoutes:
    def test_generate_then_cached(self, api_client, city_id):
        first = api_client.post(f"/api/ai/announcement/{city_id}")
        second = api_client.post(f"/api/ai/announcement/{city_id}")

        assert first.status_code == 200
        assert first.json()["cached"] is False
        assert second.json()["cached"] is True
        assert second.json()["text"] == first.json()["text"]

    def test_cached_snapshot(self, api_client, city_id):
        empty = api_client.get(f"/api/ai/cached/{city_id}").json()
        assert empty == {"announcement": None, "newsletter": None, "radio": None}

        radio = api_client.post(f"/api/ai/radio/{city_id}").json()
        snapshot = api_client.get(f"/api/ai/cached/{city_id}").json()
        assert snapshot["radio"] == radio["text"]
        assert snapshot["announcement"] is None

    def test_context_override_body(self, api_client, city_id):
        response = api_client.post(f"/api/ai/radio/{city_id}", json={"vibe": "dreamy"})
        assert response.status_code == 200
        assert "dreamy vibe" in api_client.app.state.llm.prompts[-1]

    def test_unknown_kind(self, api_client, city_id):
        assert api_client.post(f"/api/ai/weather/{city_id}").status_code == 422

    def test_unknown_city(self, api_client):
        assert api_client.post(f"/api/ai/newsletter/{uuid.uuid4()}").status_code == 404

    def test_model_failure(self, make_api_client):
        client = make_api_client(FakeLanguageModel(scenario="llm_failure"))
        city_id = client.get("/api/cities").json()[0]["id"]

        response = client.post(f"/api/ai/newsletter/{city_id}")

        assert response.status_code == 502
        assert client.get(f"/api/ai/cached/{city_id}").json()["newsletter"] is None
