"""Dependency injection functions for FastAPI routes.

Uses descriptor pattern to automatically create dependency functions
for all services, eliminating code duplication.
"""

from typing import Any, Optional, Type, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from student_power.config import get_settings
from student_power.services.ai_service import AIService
from student_power.services.cascade import CascadeDeleteCoordinator, SqlHierarchyStore
from student_power.services.course_service import CourseService
from student_power.services.pdf_service import PdfService
from student_power.services.semester_service import SemesterService
from student_power.services.subject_service import SubjectService
from student_power.services.university_service import UniversityService
from student_power.utils.db import get_db_session
from student_power.utils.s3 import S3Storage, s3_manager

T = TypeVar("T")


class ServiceDependency:
    """Descriptor that creates a dependency injection function for a service.

    Caches the dependency function to ensure the same function object is returned
    each time, enabling proper use of FastAPI's dependency_overrides.
    """

    def __init__(self, service_class: Type[T]) -> None:
        """Initialize service dependency descriptor.

        Args:
            service_class: The service class to create instances of.
        """
        self.service_class = service_class
        self._cached_func: Any = None

    def __get__(self, instance: Any, owner: type) -> Any:
        """Create and return cached dependency function when accessed."""
        if self._cached_func is None:

            def dependency_func(
                db: AsyncSession = Depends(get_db_session),
            ) -> T:
                """Get service instance for dependency injection."""
                return self.service_class(db)

            self._cached_func = dependency_func
        return self._cached_func


class ServiceDependencies:
    """Container for all service dependency injection functions."""

    university = ServiceDependency(UniversityService)
    course = ServiceDependency(CourseService)
    semester = ServiceDependency(SemesterService)
    subject = ServiceDependency(SubjectService)
    pdf = ServiceDependency(PdfService)


# Create singleton instance for easy access
dependencies = ServiceDependencies()


def get_optional_storage() -> Optional[S3Storage]:
    """Storage client if it was initialized at startup, else None."""
    return s3_manager.storage


def get_cascade_coordinator(
    db: AsyncSession = Depends(get_db_session),
    storage: Optional[S3Storage] = Depends(get_optional_storage),
) -> CascadeDeleteCoordinator:
    """Coordinator wired to the request's database session."""
    return CascadeDeleteCoordinator(SqlHierarchyStore(db), storage)


def get_ai_service() -> AIService:
    """AI service configured from settings."""
    return AIService.from_settings(get_settings())
