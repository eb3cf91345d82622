"""Image upload and retrieval routes."""

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import Response

from cityfix.config import settings
from cityfix.dependencies import CurrentUser, DBSession, Ingestion
from cityfix.models.upload import UploadResponse
from cityfix.services.ingestion import (
    DatabaseImageStore,
    FilesystemImageStore,
    ImageIngestionService,
)

router = APIRouter(tags=["Uploads"])

# Mounted at the application root: serves /uploads/<key> from the filesystem store.
files_router = APIRouter(tags=["Uploads"])


async def read_upload(file: UploadFile, service: ImageIngestionService) -> bytes:
    # One byte past the limit is enough to trip the size check
    return await file.read(service.max_bytes + 1)


@router.post("/uploads", response_model=UploadResponse)
async def upload_image(current: CurrentUser, service: Ingestion, file: UploadFile = File(...)):
    data = await read_upload(file, service)
    image_path = await service.ingest(data, file.content_type, file.filename, current["sub"])
    return UploadResponse(image_path=image_path)


@router.get("/uploads/{image_id}")
async def get_uploaded_image(image_id: str, db: DBSession):
    """Public: stream a database-stored image with its stored content type."""
    service = ImageIngestionService(DatabaseImageStore(db))
    image = await service.retrieve(image_id)
    return Response(content=image.data, media_type=image.content_type)


@files_router.get("/uploads/{key}", include_in_schema=False)
async def get_file_image(key: str):
    """Public: serve an image written by the filesystem store."""
    service = ImageIngestionService(FilesystemImageStore(settings.upload_dir))
    image = await service.retrieve(key)
    return Response(content=image.data, media_type=image.content_type)
