"""Course schemas for API request/response models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from student_power.schemas.common import (
    Code,
    Description,
    Duration,
    Name,
    camel_alias,
)


class CourseCreate(BaseModel):
    """Schema for creating a course.

    Attributes:
        university_id: Parent university (also accepted as ``universityId``).
        name: Course name.
        code: Course code, stored upper-cased.
        description: Free-text description.
        duration: Duration such as "3 years"; drives semester generation.
    """

    university_id: int = camel_alias("university_id", "universityId")
    name: Name
    code: Code
    description: Description
    duration: Duration

    model_config = {"populate_by_name": True}


class CourseUpdate(BaseModel):
    """Schema for updating course fields. Renaming re-derives the slug."""

    name: Optional[Name] = None
    code: Optional[Code] = None
    description: Optional[Description] = None
    duration: Optional[Duration] = None


class CourseResponse(BaseModel):
    """Response schema for course."""

    id: int
    university_id: int
    name: str
    slug: str
    code: str
    description: str
    duration: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CourseCreatedResponse(CourseResponse):
    """Course response including the number of generated semesters."""

    semesters_created: int = Field(default=0, ge=0)
