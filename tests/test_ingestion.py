"""Tests for image validation and the two image stores."""

import pytest

from cityfix.errors.exceptions import NotFoundError, PayloadTooLargeError, UnsupportedMediaTypeError
from cityfix.services.ingestion import (
    DatabaseImageStore,
    FilesystemImageStore,
    ImageIngestionService,
    validate_image,
)

MiB = 1024 * 1024


class TestValidateImage:
    def test_accepts_jpeg(self):
        validate_image(b"x" * 10, "image/jpeg", "photo.jpg")

    def test_rejects_non_image_content_type(self):
        with pytest.raises(UnsupportedMediaTypeError):
            validate_image(b"x", "application/pdf", "doc.jpg")

    def test_rejects_disallowed_extension(self):
        with pytest.raises(UnsupportedMediaTypeError):
            validate_image(b"x", "image/png", "malware.exe")

    def test_extension_check_is_case_insensitive(self):
        validate_image(b"x", "image/png", "PHOTO.PNG")

    def test_missing_filename_skips_extension_check(self):
        validate_image(b"x", "image/webp", None)

    def test_rejects_oversized_payload(self):
        with pytest.raises(PayloadTooLargeError) as exc_info:
            validate_image(b"\0" * (12 * MiB), "image/jpeg", "big.jpg", max_bytes=10 * MiB)
        assert exc_info.value.status_code == 413

    def test_exactly_at_limit_is_accepted(self):
        validate_image(b"\0" * 100, "image/jpeg", "ok.jpg", max_bytes=100)


@pytest.mark.asyncio
async def test_database_store_round_trip(db_session, png_bytes):
    service = ImageIngestionService(DatabaseImageStore(db_session))
    path = await service.ingest(png_bytes, "image/png", "photo.png")
    assert path.startswith("/api/uploads/img_")

    image = await service.retrieve(path)
    assert image.data == png_bytes
    assert image.content_type == "image/png"
    assert image.reference == path


@pytest.mark.asyncio
async def test_database_store_keys_are_unique(db_session, png_bytes):
    service = ImageIngestionService(DatabaseImageStore(db_session))
    first = await service.ingest(png_bytes, "image/png", "same.png")
    second = await service.ingest(png_bytes, "image/png", "same.png")
    assert first != second


@pytest.mark.asyncio
async def test_rejected_upload_is_not_stored(db_session, png_bytes):
    store = DatabaseImageStore(db_session)
    service = ImageIngestionService(store, max_bytes=10)
    with pytest.raises(PayloadTooLargeError):
        await service.ingest(png_bytes, "image/png", "big.png")
    assert await store.repo.count() == 0


@pytest.mark.asyncio
async def test_retrieve_missing_raises_not_found(db_session):
    service = ImageIngestionService(DatabaseImageStore(db_session))
    with pytest.raises(NotFoundError):
        await service.retrieve("/api/uploads/img_missing")


@pytest.mark.asyncio
async def test_filesystem_store_writes_generated_key(tmp_path, png_bytes):
    service = ImageIngestionService(FilesystemImageStore(tmp_path))
    path = await service.ingest(png_bytes, "image/png", "../../etc/passwd.png")

    assert path.startswith("/uploads/image-")
    assert path.endswith(".png")
    key = path.removeprefix("/uploads/")
    assert (tmp_path / key).read_bytes() == png_bytes
    # client filename never becomes the storage key
    assert "passwd" not in key


@pytest.mark.asyncio
async def test_filesystem_store_retrieve(tmp_path, png_bytes):
    service = ImageIngestionService(FilesystemImageStore(tmp_path))
    path = await service.ingest(png_bytes, "image/png", "a.png")
    image = await service.retrieve(path)
    assert image.data == png_bytes
    assert image.content_type == "image/png"


@pytest.mark.asyncio
async def test_filesystem_store_refuses_path_traversal(tmp_path):
    (tmp_path / "secret.txt").write_text("nope")
    service = ImageIngestionService(FilesystemImageStore(tmp_path / "uploads"))
    with pytest.raises(NotFoundError):
        await service.retrieve("../secret.txt")
