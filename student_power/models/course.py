"""Course model belonging to a university."""

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from student_power.models.base import BaseModel


class Course(BaseModel):
    """Course model.

    A course's slug is unique within its university only.

    Attributes:
        university_id: Foreign key to universities table
        name: Display name (e.g., "Bachelor of Computer Applications")
        slug: URL-safe name
        code: Upper-cased course code (e.g., "BCA")
        description: Free-text description
        duration: Human duration string (e.g., "3 years")
    """

    __tablename__ = "courses"

    university_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("universities.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duration: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("university_id", "slug", name="uq_course_university_slug"),
    )
