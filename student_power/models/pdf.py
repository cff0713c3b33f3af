"""PDF model representing study material files attached to a subject."""

import enum
from typing import Optional

from sqlalchemy import BigInteger, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from student_power.models.base import BaseModel


class PdfCategory(str, enum.Enum):
    """Closed set of PDF categories.

    Attributes:
        NOTES: Lecture or study notes
        ASSIGNMENTS: Assignment sheets
        PAPERS: Previous exam papers
        OTHER: Anything else (default)
    """

    NOTES = "notes"
    ASSIGNMENTS = "assignments"
    PAPERS = "papers"
    OTHER = "other"


class Pdf(BaseModel):
    """PDF model storing file metadata and its object storage binding.

    Attributes:
        subject_id: Foreign key to subjects table
        title: Display title
        description: Free-text description
        file_name: Original file name, ends with ``.pdf``
        file_url: Public URL of the stored file
        file_size: Size in bytes
        storage_key: Object storage key; None when the file lives elsewhere
        category: Material category (enum)
    """

    __tablename__ = "pdfs"

    subject_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subjects.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    storage_key: Mapped[Optional[str]] = mapped_column(
        String(512), nullable=True, index=True
    )
    category: Mapped[PdfCategory] = mapped_column(
        Enum(
            PdfCategory,
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=PdfCategory.OTHER,
    )

    def __repr__(self) -> str:
        """String representation of the PDF."""
        return (
            f"Pdf(id={self.id}, title={self.title!r}, "
            f"category={self.category.value}, storage_key={self.storage_key!r})"
        )
