"""Master API router mounted at /api."""

from fastapi import APIRouter

from cityfix.api.routes import ai, auth, health, reports, uploads

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router)
api_router.include_router(uploads.router)
api_router.include_router(ai.router)
api_router.include_router(reports.router)
