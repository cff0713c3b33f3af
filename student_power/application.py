"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from student_power.api.router import create_api_router
from student_power.config import get_settings
from student_power.middleware.auth import AdminAuthMiddleware
from student_power.utils.db import close_db, init_db
from student_power.utils.exception_handlers import register_exception_handlers
from student_power.utils.rate_limit import create_sweeper
from student_power.utils.s3 import close_s3, init_s3

logger = logging.getLogger(__name__)

# Create main router
router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint."""
    settings = get_settings()
    return {"message": settings.API_TITLE, "version": settings.API_VERSION}


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    await init_db()
    init_s3()
    sweeper = create_sweeper()
    sweeper.start()
    logger.info("Application started")
    yield
    # Shutdown
    await sweeper.stop()
    close_s3()
    await close_db()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.API_TITLE,
        description="Catalog of university study material: courses, "
        "semesters, subjects and PDFs",
        version=settings.API_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(AdminAuthMiddleware)
    register_exception_handlers(app)

    # Setup routes
    app.include_router(router)
    app.include_router(create_api_router())

    return app
