"""Semester schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from student_power.schemas.common import camel_alias


class SemesterCreate(BaseModel):
    """Schema for creating a semester.

    Attributes:
        course_id: Parent course (also accepted as ``courseId``).
        number: Semester number within the course (1-24).
    """

    course_id: int = camel_alias("course_id", "courseId")
    number: int = Field(..., ge=1, le=24)

    model_config = {"populate_by_name": True}


class SemesterResponse(BaseModel):
    """Response schema for semester."""

    id: int
    course_id: int
    number: int
    name: str
    slug: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
