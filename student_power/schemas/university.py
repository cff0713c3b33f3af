"""University schemas for API request/response models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from student_power.schemas.common import Description, Location, Name, OptionalUrl


class UniversityCreate(BaseModel):
    """Schema for creating a university."""

    name: Name
    description: Description
    location: Location
    logo: OptionalUrl = None


class UniversityUpdate(BaseModel):
    """Schema for updating university fields. Renaming re-derives the slug."""

    name: Optional[Name] = None
    description: Optional[Description] = None
    location: Optional[Location] = None
    logo: OptionalUrl = None


class UniversityResponse(BaseModel):
    """Response schema for university."""

    id: int
    name: str
    slug: str
    description: str
    location: str
    logo: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
