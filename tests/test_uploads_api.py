"""API tests for image upload and retrieval."""

import pytest

from cityfix.config import settings
from cityfix.models.enums import ImageStoreBackend


@pytest.mark.asyncio
async def test_upload_and_fetch(client, alice, png_bytes):
    response = await client.post(
        "/api/uploads",
        files={"file": ("photo.png", png_bytes, "image/png")},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["imagePath"].startswith("/api/uploads/")

    # retrieval is public
    image = await client.get(body["imagePath"])
    assert image.status_code == 200
    assert image.content == png_bytes
    assert image.headers["content-type"] == "image/png"


@pytest.mark.asyncio
async def test_upload_requires_auth(client, png_bytes):
    response = await client.post("/api/uploads", files={"file": ("photo.png", png_bytes, "image/png")})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_upload_rejects_non_image(client, alice):
    response = await client.post(
        "/api/uploads",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=alice["headers"],
    )
    assert response.status_code == 415
    assert response.json()["error"]["code"] == "UNSUPPORTED_MEDIA_TYPE"


@pytest.mark.asyncio
async def test_upload_rejects_exe_extension(client, alice):
    response = await client.post(
        "/api/uploads",
        files={"file": ("tool.exe", b"MZ", "image/png")},
        headers=alice["headers"],
    )
    assert response.status_code == 415


@pytest.mark.asyncio
async def test_upload_rejects_oversized(client, alice):
    big = b"\0" * (12 * 1024 * 1024)
    response = await client.post(
        "/api/uploads",
        files={"file": ("big.jpg", big, "image/jpeg")},
        headers=alice["headers"],
    )
    assert response.status_code == 413
    assert response.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"


@pytest.mark.asyncio
async def test_missing_image_is_404(client):
    response = await client.get("/api/uploads/img_nope")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_filesystem_store(client, alice, png_bytes, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "image_store", ImageStoreBackend.FILESYSTEM.value)
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path))

    response = await client.post(
        "/api/uploads",
        files={"file": ("photo.png", png_bytes, "image/png")},
        headers=alice["headers"],
    )
    assert response.status_code == 200
    path = response.json()["imagePath"]
    assert path.startswith("/uploads/image-")
    assert len(list(tmp_path.iterdir())) == 1

    image = await client.get(path)
    assert image.status_code == 200
    assert image.content == png_bytes
