"""Course service with automatic semester generation."""

import logging
import math
import re
from typing import Any

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from student_power.exceptions import ValidationFailedError
from student_power.models.course import Course
from student_power.models.semester import Semester
from student_power.models.university import University
from student_power.services.base import BaseService
from student_power.services.university_service import derive_slug

logger = logging.getLogger(__name__)

_YEARS_PATTERN = re.compile(r"(\d+\.?\d*)")

# Ten years keeps generated semesters within the 1-24 range of SemesterCreate
MAX_COURSE_YEARS = 10


def calculate_semester_count(duration: str) -> int:
    """Number of semesters implied by a duration such as "3 years".

    The first decimal number in the string is read as years, two semesters
    per year, rounded down. Strings without a number yield 0.

    Examples:
        >>> calculate_semester_count("4 years")
        8
        >>> calculate_semester_count("2.5 years")
        5
        >>> calculate_semester_count("abc")
        0
    """
    match = _YEARS_PATTERN.search(duration or "")
    if not match:
        return 0
    return math.floor(float(match.group(1)) * 2)


def duration_errors(duration: str) -> list[str]:
    """Violations for a course duration, empty when it is acceptable."""
    match = _YEARS_PATTERN.search(duration or "")
    if match and float(match.group(1)) > MAX_COURSE_YEARS:
        return [f"Duration must be at most {MAX_COURSE_YEARS} years"]
    return []


def build_semesters(course_id: int, count: int) -> list[Semester]:
    """Semester rows 1..count for a course."""
    return [
        Semester(
            course_id=course_id,
            number=number,
            name=f"Semester {number}",
            slug=f"semester-{number}",
        )
        for number in range(1, count + 1)
    ]


class CourseService(BaseService[Course]):
    """Service for managing Course entities.

    Usage:
        service = CourseService(db_session)
        course, semesters = await service.create_course(
            university_id=1, name="BCA", code="BCA", description="...",
            duration="3 years",
        )
    """

    model = Course
    default_order = (Course.created_at.desc(), Course.id.desc())

    async def create_course(self, **fields: Any) -> tuple[Course, int]:
        """Create a course and its generated semesters in one transaction.

        Returns:
            The course and the number of semesters created.

        Raises:
            ValidationFailedError: If the duration exceeds MAX_COURSE_YEARS.
            RelatedRecordNotFoundError: If the university does not exist.
            DuplicateRecordError: If the slug is taken within the university.
            DatabaseConnectionError: If database operation fails.
        """
        errors = duration_errors(fields["duration"])
        if errors:
            raise ValidationFailedError(errors)
        await self.ensure_related(University, "university_id", fields["university_id"])
        semester_count = calculate_semester_count(fields["duration"])

        try:
            course = Course(slug=derive_slug(fields["name"]), **fields)
            self.db.add(course)
            await self.db.flush()
            self.db.add_all(build_semesters(course.id, semester_count))
            await self.db.flush()
            await self.db.refresh(course)
            await self.db.commit()
        except (IntegrityError, DBAPIError, SQLAlchemyError) as e:
            await self._fail_write("create", e)

        logger.info(
            "Course created",
            extra={
                "course_id": course.id,
                "university_id": course.university_id,
                "semesters_created": semester_count,
            },
        )
        return course, semester_count

    async def update_course(self, course_id: int, **fields: Any) -> Course:
        """Apply a partial update; a new name re-derives the slug.

        Changing the duration does not add or remove existing semesters.
        """
        errors = duration_errors(fields.get("duration", ""))
        if errors:
            raise ValidationFailedError(errors)
        if fields.get("name"):
            fields["slug"] = derive_slug(fields["name"])
        return await self.update(course_id, **fields)
