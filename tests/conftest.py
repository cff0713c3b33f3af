"""Pytest configuration and shared fixtures."""

import os
from datetime import datetime, timezone
from typing import AsyncGenerator, Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

# Settings are cached on first use, so the environment is fixed up front
os.environ["API_KEY"] = "test-api-key"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["PERPLEXITY_API_KEY"] = ""
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("DB_HOST", "localhost")
os.environ.setdefault("DB_USER", "test_user")
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("DB_NAME", "test_db")

from student_power.application import create_app  # noqa: E402
from student_power.config import get_settings  # noqa: E402
from student_power.models.course import Course  # noqa: E402
from student_power.models.pdf import Pdf, PdfCategory  # noqa: E402
from student_power.models.semester import Semester  # noqa: E402
from student_power.models.subject import Subject  # noqa: E402
from student_power.models.university import University  # noqa: E402
from student_power.utils.rate_limit import rate_limiter  # noqa: E402

TEST_API_KEY = "test-api-key"
NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> Generator[None, None, None]:
    """Start every test with an empty process-wide limiter."""
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Re-read settings for tests that patch the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app() -> Generator[FastAPI, None, None]:
    """Create FastAPI application with startup hooks patched out."""
    sweeper = MagicMock()
    sweeper.stop = AsyncMock()
    with (
        patch("student_power.application.init_db", new_callable=AsyncMock),
        patch("student_power.application.close_db", new_callable=AsyncMock),
        patch("student_power.application.init_s3"),
        patch("student_power.application.close_s3"),
        patch("student_power.application.create_sweeper", return_value=sweeper),
    ):
        application = create_app()
        yield application
        application.dependency_overrides.clear()


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI application."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Headers that pass the admin check for write routes."""
    return {"X-API-KEY": TEST_API_KEY}


def make_university(**overrides) -> University:
    fields = dict(
        id=1,
        name="Delhi University",
        slug="delhi-university",
        description="Public central university in Delhi",
        location="Delhi",
        logo=None,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return University(**fields)


def make_course(**overrides) -> Course:
    fields = dict(
        id=10,
        university_id=1,
        name="Bachelor of Computer Applications",
        slug="bachelor-of-computer-applications",
        code="BCA",
        description="Three year undergraduate programme",
        duration="3 years",
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Course(**fields)


def make_semester(**overrides) -> Semester:
    fields = dict(
        id=100,
        course_id=10,
        number=1,
        name="Semester 1",
        slug="semester-1",
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Semester(**fields)


def make_subject(**overrides) -> Subject:
    fields = dict(
        id=1000,
        course_id=10,
        semester_id=100,
        name="Data Structures",
        slug="data-structures",
        code="CS201",
        credits=4,
        description="Lists, trees, graphs and hashing",
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Subject(**fields)


def make_pdf(**overrides) -> Pdf:
    fields = dict(
        id=5000,
        subject_id=1000,
        title="Unit 1 Notes",
        description="Handwritten notes for unit one",
        file_name="unit-1.pdf",
        file_url="http://localhost:9000/student-power/pdfs/abc__unit-1.pdf",
        file_size=2048,
        storage_key="pdfs/abc__unit-1.pdf",
        category=PdfCategory.NOTES,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Pdf(**fields)
