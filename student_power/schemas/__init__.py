"""Pydantic schemas for API request/response models."""

from student_power.schemas.ai import ChatAction, ChatRequest, ChatResponse
from student_power.schemas.auth import LoginRequest
from student_power.schemas.cascade import DeletionSummaryResponse
from student_power.schemas.common import ApiResponse
from student_power.schemas.course import (
    CourseCreate,
    CourseCreatedResponse,
    CourseResponse,
    CourseUpdate,
)
from student_power.schemas.pdf import PdfCreate, PdfResponse, PdfUpdate, UploadResponse
from student_power.schemas.semester import SemesterCreate, SemesterResponse
from student_power.schemas.subject import SubjectCreate, SubjectResponse, SubjectUpdate
from student_power.schemas.university import (
    UniversityCreate,
    UniversityResponse,
    UniversityUpdate,
)

__all__ = [
    "ApiResponse",
    "ChatAction",
    "ChatRequest",
    "ChatResponse",
    "CourseCreate",
    "CourseCreatedResponse",
    "CourseResponse",
    "CourseUpdate",
    "DeletionSummaryResponse",
    "LoginRequest",
    "PdfCreate",
    "PdfResponse",
    "PdfUpdate",
    "SemesterCreate",
    "SemesterResponse",
    "SubjectCreate",
    "SubjectResponse",
    "SubjectUpdate",
    "UniversityCreate",
    "UniversityResponse",
    "UniversityUpdate",
    "UploadResponse",
]
