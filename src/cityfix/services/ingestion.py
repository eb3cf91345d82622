"""Image ingestion: validate an uploaded image, store it, hand back its path.

Two storage backends produce the two canonical path forms accepted by
:mod:`cityfix.services.image_refs`:

* :class:`DatabaseImageStore` keeps the binary in the ``images`` table and
  returns ``/api/uploads/<image_id>``.
* :class:`FilesystemImageStore` writes under the upload directory and returns
  ``/uploads/<key>``.

Stored images are never overwritten or deleted.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from cityfix.errors.exceptions import (
    NotFoundError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
)
from cityfix.repositories.image_repo import ImageRepository
from cityfix.services.id_generator import IMAGE_PREFIX, generate_id

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")

_EXTENSION_FOR_TYPE = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class StoredImage:
    data: bytes
    content_type: str
    reference: str


def _extension(filename: str | None) -> str:
    if not filename:
        return ""
    return Path(filename).suffix.lstrip(".").lower()


def validate_image(
    data: bytes,
    content_type: str | None,
    filename: str | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    allowed_extensions: tuple[str, ...] | list[str] = DEFAULT_EXTENSIONS,
) -> None:
    """Reject anything that is not an accepted image within the size limit."""
    if not content_type or not content_type.lower().startswith("image/"):
        raise UnsupportedMediaTypeError(
            f"Only image files are allowed (got content type '{content_type}')"
        )
    if filename and _extension(filename) not in allowed_extensions:
        raise UnsupportedMediaTypeError(
            f"File extension of '{filename}' is not one of: {', '.join(allowed_extensions)}"
        )
    if len(data) > max_bytes:
        raise PayloadTooLargeError(len(data), max_bytes)


class ImageStore(Protocol):
    """Storage backend for ingested images."""

    path_prefix: str

    async def save(
        self, data: bytes, content_type: str, filename: str | None, uploader_id: str | None
    ) -> str:
        """Persist the image durably and return its storage key."""
        ...

    async def load(self, key: str) -> StoredImage | None:
        ...


class DatabaseImageStore:
    """Images as binary rows; keys are store-assigned ids."""

    path_prefix = "/api/uploads/"

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = ImageRepository(session)

    async def save(
        self, data: bytes, content_type: str, filename: str | None, uploader_id: str | None
    ) -> str:
        image_id = generate_id(IMAGE_PREFIX)
        await self.repo.create(
            image_id=image_id,
            data=data,
            content_type=content_type,
            file_name=filename,
            size=len(data),
            uploaded_by=uploader_id,
        )
        await self.session.commit()
        return image_id

    async def load(self, key: str) -> StoredImage | None:
        row = await self.repo.get(key)
        if row is None:
            return None
        return StoredImage(
            data=row.data,
            content_type=row.content_type,
            reference=f"{self.path_prefix}{row.image_id}",
        )


class FilesystemImageStore:
    """Images as files under *upload_dir*; keys are generated file names."""

    path_prefix = "/uploads/"

    def __init__(self, upload_dir: str | Path):
        self.upload_dir = Path(upload_dir)

    @staticmethod
    def _make_key(content_type: str, filename: str | None) -> str:
        ext = _extension(filename)
        suffix = f".{ext}" if ext else _EXTENSION_FOR_TYPE.get(content_type.lower(), ".jpg")
        return f"image-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"

    def _write(self, key: str, data: bytes) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        # "x" mode: an existing file is never overwritten
        with open(self.upload_dir / key, "xb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())

    async def save(
        self, data: bytes, content_type: str, filename: str | None, uploader_id: str | None
    ) -> str:
        while True:
            key = self._make_key(content_type, filename)
            try:
                await asyncio.to_thread(self._write, key, data)
                return key
            except FileExistsError:
                continue

    async def load(self, key: str) -> StoredImage | None:
        # Keys are bare file names; anything with a directory part is not ours.
        if not key or Path(key).name != key:
            return None
        path = self.upload_dir / key
        if not path.is_file():
            return None
        data = await asyncio.to_thread(path.read_bytes)
        content_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
        return StoredImage(data=data, content_type=content_type, reference=f"{self.path_prefix}{key}")


class ImageIngestionService:
    """Validates and stores uploaded images, and reads them back."""

    def __init__(
        self,
        store: ImageStore,
        max_bytes: int = DEFAULT_MAX_BYTES,
        allowed_extensions: tuple[str, ...] | list[str] = DEFAULT_EXTENSIONS,
    ):
        self.store = store
        self.max_bytes = max_bytes
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)

    async def ingest(
        self,
        data: bytes,
        content_type: str | None,
        filename: str | None = None,
        uploader_id: str | None = None,
    ) -> str:
        """Store *data* and return its canonical server-relative path.

        The client-supplied *filename* is kept as metadata only; the storage
        key is always generated.
        """
        validate_image(data, content_type, filename, self.max_bytes, self.allowed_extensions)
        key = await self.store.save(data, content_type.lower(), filename, uploader_id)
        path = f"{self.store.path_prefix}{key}"
        logger.info("Image ingested: %s (%d bytes, uploader=%s)", path, len(data), uploader_id)
        return path

    async def retrieve(self, reference: str) -> StoredImage:
        """Load an image by canonical path or bare key."""
        key = reference
        if key.startswith(self.store.path_prefix):
            key = key[len(self.store.path_prefix):]
        image = await self.store.load(key)
        if image is None:
            raise NotFoundError("Image", reference)
        return image
