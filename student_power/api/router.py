"""API router factory with core endpoints."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from student_power.middleware.auth import AdminAuthMiddleware
from student_power.utils.db import db_manager

logger = logging.getLogger(__name__)


def create_api_router() -> APIRouter:
    """Create router with every catalog endpoint under /api.

    Reads are public; writes are gated by AdminAuthMiddleware.

    Returns:
        APIRouter with catalog, auth, AI and health endpoints.
    """
    from student_power.api.ai import router as ai_router
    from student_power.api.auth import router as auth_router
    from student_power.api.courses import router as courses_router
    from student_power.api.pdfs import router as pdfs_router
    from student_power.api.semesters import router as semesters_router
    from student_power.api.subjects import router as subjects_router
    from student_power.api.universities import router as universities_router

    router = APIRouter(prefix=AdminAuthMiddleware.PROTECTED_PREFIX)

    @router.get("/health", tags=["Health"], status_code=status.HTTP_200_OK)
    async def health_check() -> dict:
        """Health check endpoint - basic application health."""
        return {"status": "healthy", "service": "student-power"}

    @router.get(
        "/health/db",
        tags=["Health"],
        status_code=status.HTTP_200_OK,
        response_model=None,
    )
    async def health_check_db() -> JSONResponse:
        """Deep health check - includes database connectivity check."""
        try:
            await db_manager.verify_connection()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "unhealthy",
                    "database": "disconnected",
                    "error": str(e),
                },
            )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "healthy", "database": "connected"},
        )

    router.include_router(universities_router)
    router.include_router(courses_router)
    router.include_router(semesters_router)
    router.include_router(subjects_router)
    router.include_router(pdfs_router)
    router.include_router(auth_router)
    router.include_router(ai_router)

    return router
