"""Subject model representing academic subjects."""

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from student_power.models.base import BaseModel


class Subject(BaseModel):
    """Subject model for storing academic subjects taught in a semester.

    Each combination of semester and slug must be unique.

    Attributes:
        course_id: Foreign key to courses table
        semester_id: Foreign key to semesters table
        name: Name of the subject (e.g., "Mathematics", "Physics")
        slug: URL-safe name
        code: Upper-cased subject code
        credits: Credit value (1-20)
        description: Free-text description
        created_at: Timestamp when record was created (inherited)
        updated_at: Timestamp when record was last updated (inherited)
    """

    __tablename__ = "subjects"

    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id"), nullable=False, index=True
    )
    semester_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("semesters.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("semester_id", "slug", name="uq_subject_semester_slug"),
    )

    def __repr__(self) -> str:
        """String representation of the subject."""
        return f"Subject(id={self.id}, name={self.name!r}, code={self.code!r})"
