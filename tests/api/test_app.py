"""Tests for the application factory."""

from fastapi.testclient import TestClient

from chatter import __version__
from chatter.api.app import create_app
from chatter.config import settings


def test_health_check():
    client = TestClient(create_app())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": __version__}


def test_graphql_is_served():
    client = TestClient(create_app())

    response = client.post("/graphql", json={"query": "{ __typename }"})

    assert response.status_code == 200
    assert response.json()["data"] == {"__typename": "Query"}


def test_upload_rejects_malformed_credentials():
    client = TestClient(create_app())

    response = client.post(
        "/upload_single",
        files={"inputFile": ("photo.png", b"png", "image/png")},
        data={"dir": "avatars"},
        headers={"Authorization": "Basic abc"},
    )

    assert response.status_code == 401


def test_uploads_are_served(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "storage_base_path", str(tmp_path))
    (tmp_path / "avatars").mkdir()
    (tmp_path / "avatars" / "photo.png").write_bytes(b"png")
    client = TestClient(create_app())

    response = client.get("/uploads/avatars/photo.png")

    assert response.status_code == 200
    assert response.content == b"png"
