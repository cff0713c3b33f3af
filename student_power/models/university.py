"""University model, the root of the catalog hierarchy."""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from student_power.models.base import BaseModel


class University(BaseModel):
    """University model.

    Attributes:
        name: Display name (e.g., "Delhi University")
        slug: URL-safe name, unique across all universities
        description: Free-text description
        location: City or region
        logo: Optional logo URL
    """

    __tablename__ = "universities"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    logo: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    def __repr__(self) -> str:
        """String representation of the university."""
        return f"University(id={self.id}, slug={self.slug!r})"
