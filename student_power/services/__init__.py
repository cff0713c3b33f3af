"""Business logic services."""

from student_power.services.ai_service import AIService
from student_power.services.base import BaseService
from student_power.services.cascade import (
    CascadeDeleteCoordinator,
    CascadeLevel,
    SqlHierarchyStore,
)
from student_power.services.course_service import CourseService
from student_power.services.pdf_service import PdfService
from student_power.services.semester_service import SemesterService
from student_power.services.subject_service import SubjectService
from student_power.services.university_service import UniversityService

__all__ = [
    "AIService",
    "BaseService",
    "CascadeDeleteCoordinator",
    "CascadeLevel",
    "CourseService",
    "PdfService",
    "SemesterService",
    "SqlHierarchyStore",
    "SubjectService",
    "UniversityService",
]
