"""Subject service providing business logic for Subject model operations."""

import logging
from typing import Any

from student_power.exceptions import ValidationFailedError
from student_power.models.course import Course
from student_power.models.semester import Semester
from student_power.models.subject import Subject
from student_power.services.base import BaseService
from student_power.services.university_service import derive_slug

logger = logging.getLogger(__name__)


class SubjectService(BaseService[Subject]):
    """Service for managing Subject entities.

    A subject references both its semester and the course that semester
    belongs to; create_subject checks that the two agree.

    Usage:
        service = SubjectService(db_session)
        subject = await service.create_subject(
            course_id=1, semester_id=2, name="Data Structures", code="CS201",
            credits=4, description="...",
        )
        subjects = await service.find(semester_id=2)
    """

    model = Subject
    default_order = (Subject.name, Subject.id)

    async def create_subject(self, **fields: Any) -> Subject:
        """Create a subject after checking both parents.

        Raises:
            RelatedRecordNotFoundError: If the course or semester is missing.
            ValidationFailedError: If the semester belongs to another course.
            DuplicateRecordError: If the slug is taken within the semester.
            DatabaseConnectionError: If database operation fails.
        """
        await self.ensure_related(Course, "course_id", fields["course_id"])
        semester = await self.ensure_related(
            Semester, "semester_id", fields["semester_id"]
        )
        if semester.course_id != fields["course_id"]:
            raise ValidationFailedError(
                ["Semester does not belong to the given course"]
            )

        subject = await self.create(slug=derive_slug(fields["name"]), **fields)
        logger.info(
            "Subject created",
            extra={"subject_id": subject.id, "semester_id": subject.semester_id},
        )
        return subject

    async def update_subject(self, subject_id: int, **fields: Any) -> Subject:
        """Apply a partial update; a new name re-derives the slug."""
        if fields.get("name"):
            fields["slug"] = derive_slug(fields["name"])
        return await self.update(subject_id, **fields)
