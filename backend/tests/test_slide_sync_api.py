"""Tests for the slide sync preview API and the unified application."""

import pytest
from fastapi.testclient import TestClient

from app import app as backend_app
from services.slide_sync.app import app


@pytest.fixture
def client():
    """Test client for the slide sync service."""
    return TestClient(app)


@pytest.fixture
def backend_client():
    """Test client for the unified backend."""
    return TestClient(backend_app)


class TestSlideSyncEndpoints:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "OK"

    def test_normalize(self, client):
        response = client.post("/normalize", json={"content": "A<br><br>B"})

        assert response.status_code == 200
        assert response.json() == {"normalized": "A\n\nB", "segments": ["A", "B"]}

    def test_segment_applies_pipeline(self, client):
        response = client.post("/segment", json={"content": "<p>Verse</p><p>Chorus</p>"})

        assert response.json()["segments"] == ["Verse", "Chorus"]

    def test_preview_builds_slides_without_persisting(self, client):
        response = client.post(
            "/preview",
            json={
                "ownerId": "song-1",
                "ownerTitle": "Amazing Grace",
                "content": "Verse one\n\nVerse two",
                "backgroundUrl": "https://bg/cross.jpg",
            },
        )

        assert response.status_code == 200
        slides = response.json()["slides"]
        assert [s["title"] for s in slides] == ["Amazing Grace - Slide 1", "Amazing Grace - Slide 2"]
        assert all(s["html"].startswith("<!--BACKGROUND:https://bg/cross.jpg-->") for s in slides)
        assert slides[0]["id"].startswith("slide-song-1-")
        assert "createdAt" in slides[0]

    def test_preview_of_empty_content(self, client):
        response = client.post("/preview", json={"ownerId": "song-1", "ownerTitle": "Song", "content": ""})
        assert response.json() == {"slides": []}


class TestUnifiedApp:
    def test_root_lists_services(self, backend_client):
        body = backend_client.get("/").json()
        assert set(body["services"]) == {"storage", "slide_sync"}

    def test_storage_mounted_under_api(self, backend_client):
        assert backend_client.get("/api/health").json()["status"] == "OK"
        backend_client.post("/api/songs", json={"id": "song-1", "title": "Song"})
        assert [row["id"] for row in backend_client.get("/api/songs").json()] == ["song-1"]

    def test_slide_sync_mounted_under_prefix(self, backend_client):
        response = backend_client.post("/api/v1/slide-sync/normalize", json={"content": "x<br>y"})
        assert response.json()["normalized"] == "x\ny"

    def test_gateway_health(self, backend_client):
        body = backend_client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["services"]["storage"] == "operational"
