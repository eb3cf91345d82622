"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cityfix.config import settings
from cityfix.errors.exceptions import AuthenticationError
from cityfix.models.enums import ImageStoreBackend
from cityfix.services.classification import ClassificationGateway
from cityfix.services.ingestion import (
    DatabaseImageStore,
    FilesystemImageStore,
    ImageIngestionService,
)


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


async def get_current_user(request: Request) -> dict:
    """Return the authenticated user claims or raise 401."""
    user = getattr(request.state, "user", {})
    if "_auth_error" in user:
        raise AuthenticationError("Invalid or expired token")
    if not user or user.get("sub") in ("anonymous", ""):
        raise AuthenticationError("Authentication required")
    return user


def get_ingestion_service(db: AsyncSession = Depends(get_db)) -> ImageIngestionService:
    """Ingestion service over the configured image store."""
    if settings.image_store == ImageStoreBackend.FILESYSTEM:
        store = FilesystemImageStore(settings.upload_dir)
    else:
        store = DatabaseImageStore(db)
    return ImageIngestionService(
        store,
        max_bytes=settings.max_upload_bytes,
        allowed_extensions=settings.allowed_image_extensions,
    )


def get_classifier(request: Request) -> ClassificationGateway:
    return request.app.state.classifier


# Type aliases for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
Ingestion = Annotated[ImageIngestionService, Depends(get_ingestion_service)]
Classifier = Annotated[ClassificationGateway, Depends(get_classifier)]
