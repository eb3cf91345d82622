"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cityfix.config import settings
from cityfix.db.engine import create_db_engine, create_session_factory
from cityfix.logging_config import configure_logging
from cityfix.models.enums import ImageStoreBackend
from cityfix.services.classification import ClassificationGateway

# Configure logging at import time
configure_logging(log_level=settings.log_level, json_output=not settings.local_mode)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    # Auto-create tables for SQLite (local dev, no migrations)
    if "sqlite" in db_url:
        from cityfix.db.base import Base
        import cityfix.db.models  # noqa: F401 register all ORM models

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite tables created (local mode)")

    if settings.image_store == ImageStoreBackend.FILESYSTEM:
        Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
        logger.info("Filesystem image store at %s", Path(settings.upload_dir).resolve())

    app.state.db_engine = engine
    app.state.db_session_factory = create_session_factory(engine)

    logger.info("CityFix API started (db=%s, images=%s)", "sqlite" if "sqlite" in db_url else "postgresql", settings.image_store)
    yield

    await engine.dispose()
    logger.info("CityFix API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="CityFix API",
        version="1.0.0",
        description="Civic issue reporting: image upload, issue classification and report tracking.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Trace-Id"],
    )

    # Add middleware (order matters: last added = first executed)
    from cityfix.api.middleware.auth import AuthMiddleware
    from cityfix.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(AuthMiddleware)
    app.add_middleware(TraceIdMiddleware)

    from cityfix.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    app.state.classifier = ClassificationGateway(
        settings.classifier_url,
        timeout=settings.classifier_timeout_seconds,
    )

    from cityfix.api.router import api_router
    from cityfix.api.routes.uploads import files_router
    app.include_router(api_router)
    app.include_router(files_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"message": "CityFix API is running"}

    return app


app = create_app()
