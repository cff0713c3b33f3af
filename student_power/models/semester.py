"""Semester model belonging to a course."""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from student_power.models.base import BaseModel


class Semester(BaseModel):
    """Semester model.

    Semesters are usually generated alongside their course (see
    CourseService.create_course) with slugs ``semester-1`` .. ``semester-N``.

    Attributes:
        course_id: Foreign key to courses table
        number: Ordinal within the course, starting at 1
        name: Display name (e.g., "Semester 3")
        slug: URL-safe name, unique within the course
    """

    __tablename__ = "semesters"

    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("course_id", "slug", name="uq_semester_course_slug"),
    )
