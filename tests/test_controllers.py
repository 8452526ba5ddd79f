"""HTTP tests for the image and file endpoints, without CDN credentials."""

import pytest
from litestar.testing import TestClient

from easel.asgi import create_app
from easel.config import CloudinaryConfig, DatabaseConfig, MediaConfig, Settings


@pytest.fixture
def client(tmp_path):
    settings = Settings(
        db=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'app.db'}"),
        media=MediaConfig(cloudinary=CloudinaryConfig(cloud_name="", api_key="", api_secret="")),
    )
    with TestClient(app=create_app(settings)) as test_client:
        yield test_client


def _upload(client, png_bytes, name="sunset.png", category="artwork"):
    return client.post(
        "/api/images/upload",
        files={"file": (name, png_bytes, "image/png")},
        data={"category": category},
    )


class TestUploadEndpoint:
    def test_upload_and_serve(self, client, png_bytes):
        response = _upload(client, png_bytes)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["backend"] == "local"
        assert body["url"].startswith("/api/files/")

        served = client.get(body["url"])
        assert served.status_code == 200
        assert served.content == png_bytes
        assert served.headers["content-type"].startswith("image/png")

    def test_rejects_non_image(self, client):
        response = client.post(
            "/api/images/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_metadata(self, client, png_bytes):
        url = _upload(client, png_bytes, category="hero_image").json()["url"]

        metadata = client.get(f"{url}/metadata").json()

        assert metadata["original_name"] == "sunset.png"
        assert metadata["category"] == "hero"
        assert metadata["width"] == 60
        assert metadata["migration_status"] == "local"


class TestUploadMultipleEndpoint:
    def test_partial_success(self, client, png_bytes):
        response = client.post(
            "/api/images/upload-multiple",
            files=[
                ("files", ("one.png", png_bytes, "image/png")),
                ("files", ("two.txt", b"plain text", "text/plain")),
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total_uploaded"] == 1
        assert body["total_errors"] == 1
        assert body["errors"][0]["filename"] == "two.txt"


class TestOtherEndpoints:
    def test_missing_file(self, client):
        assert client.get("/api/files/999").status_code == 404
        assert client.get("/api/files/999/metadata").status_code == 404

    def test_delete(self, client, png_bytes):
        url = _upload(client, png_bytes).json()["url"]

        response = client.delete("/api/images", params={"ref": url})

        assert response.status_code == 200
        assert response.json() == {"success": True, "backend": "local", "error": None}
        assert client.get(url).status_code == 404

    def test_optimized_local_is_plain_url(self, client):
        response = client.get("/api/images/optimized", params={"ref": "/api/files/3", "width": 200})

        assert response.json() == {"url": "/api/files/3", "optimized": False}

    def test_migrate_without_credentials(self, client, png_bytes):
        url = _upload(client, png_bytes).json()["url"]
        file_id = url.rsplit("/", 1)[-1]

        response = client.post(f"/api/images/migrate/{file_id}")

        assert response.status_code == 400
        assert "not configured" in response.json()["error"]

    def test_stats(self, client, png_bytes):
        _upload(client, png_bytes, category="artist")

        stats = client.get("/api/files/stats").json()

        assert stats == [{"category": "artist", "count": 1, "total_size": len(png_bytes)}]
