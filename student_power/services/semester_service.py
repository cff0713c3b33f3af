"""Semester service providing business logic for Semester model operations."""

from student_power.models.course import Course
from student_power.models.semester import Semester
from student_power.services.base import BaseService


class SemesterService(BaseService[Semester]):
    """Service for managing Semester entities.

    Semesters are normally generated with their course; create_semester adds
    one by hand (e.g. after a course's duration was extended).
    """

    model = Semester
    default_order = (Semester.course_id, Semester.number)

    async def create_semester(self, course_id: int, number: int) -> Semester:
        """Create ``Semester {number}`` under a course.

        Raises:
            RelatedRecordNotFoundError: If the course does not exist.
            DuplicateRecordError: If the course already has this semester.
            DatabaseConnectionError: If database operation fails.
        """
        await self.ensure_related(Course, "course_id", course_id)
        return await self.create(
            course_id=course_id,
            number=number,
            name=f"Semester {number}",
            slug=f"semester-{number}",
        )
