"""Health check endpoints."""

import os
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from cityfix.config import settings
from cityfix.models.enums import ImageStoreBackend

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "cityfix-api", "version": "1.0.0"}


@router.get("/health/live")
async def liveness():
    return {"status": "alive"}


def _image_store_check() -> str:
    if settings.image_store != ImageStoreBackend.FILESYSTEM:
        return "ok"
    upload_dir = Path(settings.upload_dir)
    if not upload_dir.is_dir():
        return f"error: {upload_dir} does not exist"
    if not os.access(upload_dir, os.W_OK):
        return f"error: {upload_dir} is not writable"
    return "ok"


@router.get("/health/ready")
async def readiness(request: Request):
    """Ready once the database answers and the image store can be written."""
    checks: dict[str, str] = {}
    try:
        async with request.app.state.db_session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"
    checks["image_store"] = _image_store_check()

    ok = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=200 if ok else 503,
        content={"status": "ready" if ok else "not_ready", "checks": checks},
    )
