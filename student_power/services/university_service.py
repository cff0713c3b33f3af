"""University service providing business logic for University model operations."""

import logging
from typing import Any

from student_power.exceptions import ValidationFailedError
from student_power.models.university import University
from student_power.services.base import BaseService
from student_power.utils.slugify import slugify

logger = logging.getLogger(__name__)


def derive_slug(name: str) -> str:
    """Slugify a display name, rejecting names with no usable characters."""
    slug = slugify(name)
    if not slug:
        raise ValidationFailedError(["Name must contain letters or digits"])
    return slug


class UniversityService(BaseService[University]):
    """Service for managing University entities.

    Universities are the roots of the catalog. Deleting one goes through
    CascadeDeleteCoordinator, never through delete() directly.

    Usage:
        service = UniversityService(db_session)
        university = await service.create_university(
            name="Delhi University", description="...", location="Delhi"
        )
    """

    model = University
    default_order = (University.created_at.desc(), University.id.desc())

    async def create_university(self, **fields: Any) -> University:
        """Create a university whose slug derives from its name.

        Raises:
            ValidationFailedError: If the name has no slug-able characters.
            DuplicateRecordError: If a university with this slug exists.
            DatabaseConnectionError: If database operation fails.
        """
        university = await self.create(slug=derive_slug(fields["name"]), **fields)
        logger.info(
            "University created",
            extra={"university_id": university.id, "slug": university.slug},
        )
        return university

    async def update_university(self, university_id: int, **fields: Any) -> University:
        """Apply a partial update; a new name re-derives the slug."""
        if fields.get("name"):
            fields["slug"] = derive_slug(fields["name"])
        return await self.update(university_id, **fields)
