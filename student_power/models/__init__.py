"""Data models package."""

from student_power.models.base import BaseModel
from student_power.models.course import Course
from student_power.models.pdf import Pdf, PdfCategory
from student_power.models.semester import Semester
from student_power.models.subject import Subject
from student_power.models.university import University

__all__ = [
    "BaseModel",
    "University",
    "Course",
    "Semester",
    "Subject",
    "Pdf",
    "PdfCategory",
]
