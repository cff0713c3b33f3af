"""Subject schemas for API request/response models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from student_power.schemas.common import Code, Description, Name, camel_alias


class SubjectCreate(BaseModel):
    """Schema for creating a subject.

    Attributes:
        course_id: Owning course (also accepted as ``courseId``).
        semester_id: Parent semester (also accepted as ``semesterId``).
        name: Name of the subject.
        code: Subject code, stored upper-cased.
        credits: Credit value (1-20).
        description: Free-text description.
    """

    course_id: int = camel_alias("course_id", "courseId")
    semester_id: int = camel_alias("semester_id", "semesterId")
    name: Name
    code: Code
    credits: int = Field(..., ge=1, le=20)
    description: Description

    model_config = {"populate_by_name": True}


class SubjectUpdate(BaseModel):
    """Schema for updating subject fields. Renaming re-derives the slug."""

    name: Optional[Name] = None
    code: Optional[Code] = None
    credits: Optional[int] = Field(default=None, ge=1, le=20)
    description: Optional[Description] = None


class SubjectResponse(BaseModel):
    """Response schema for subject."""

    id: int
    course_id: int
    semester_id: int
    name: str
    slug: str
    code: str
    credits: int
    description: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
