"""Courses API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi import status as http_status

from student_power.schemas.cascade import DeletionSummaryResponse
from student_power.schemas.common import ApiResponse
from student_power.schemas.course import (
    CourseCreate,
    CourseCreatedResponse,
    CourseResponse,
    CourseUpdate,
)
from student_power.services.cascade import CascadeDeleteCoordinator, CascadeLevel
from student_power.services.course_service import CourseService
from student_power.utils.api_helpers import apply_no_cache, update_fields
from student_power.utils.dependencies import dependencies, get_cascade_coordinator
from student_power.utils.rate_limit import RateLimit
from student_power.utils.validation import parse_identifier

router = APIRouter(
    prefix="/courses",
    tags=["Courses"],
)


@router.get("", dependencies=[Depends(RateLimit("read"))])
async def list_courses(
    response: Response,
    university_id: Optional[int] = Query(default=None, alias="universityId"),
    service: CourseService = Depends(dependencies.course),
) -> ApiResponse[list[CourseResponse]]:
    """List courses, optionally only those of one university."""
    courses = await service.find(university_id=university_id)
    apply_no_cache(response)
    return ApiResponse(data=[CourseResponse.model_validate(c) for c in courses])


@router.post(
    "",
    status_code=http_status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("create"))],
)
async def create_course(
    data: CourseCreate,
    service: CourseService = Depends(dependencies.course),
) -> ApiResponse[CourseCreatedResponse]:
    """Create a course and generate its semesters from the duration.

    Raises:
        RelatedRecordNotFoundError: If the university does not exist.
        DuplicateRecordError: If the slug is taken within the university.
    """
    course, semesters_created = await service.create_course(**data.model_dump())
    payload = CourseResponse.model_validate(course).model_dump()
    return ApiResponse(
        message=f"Course created successfully with {semesters_created} semesters",
        data=CourseCreatedResponse(**payload, semesters_created=semesters_created),
    )


@router.get("/{id_or_slug}", dependencies=[Depends(RateLimit("read"))])
async def get_course(
    id_or_slug: str,
    university_id: Optional[int] = Query(default=None, alias="universityId"),
    service: CourseService = Depends(dependencies.course),
) -> ApiResponse[CourseResponse]:
    """Get a course by id, falling back to its slug within a university."""
    course = await service.get_by_id_or_slug(id_or_slug, university_id=university_id)
    return ApiResponse(data=CourseResponse.model_validate(course))


@router.put("/{course_id}")
async def update_course(
    course_id: str,
    data: CourseUpdate,
    service: CourseService = Depends(dependencies.course),
) -> ApiResponse[CourseResponse]:
    """Update a course; a new name re-derives the slug."""
    record_id = parse_identifier(course_id, "Course")
    course = await service.update_course(record_id, **update_fields(data))
    return ApiResponse(
        message="Course updated successfully",
        data=CourseResponse.model_validate(course),
    )


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    coordinator: CascadeDeleteCoordinator = Depends(get_cascade_coordinator),
) -> ApiResponse[DeletionSummaryResponse]:
    """Delete a course with all its semesters, subjects and PDFs."""
    summary = await coordinator.delete(CascadeLevel.COURSE, course_id)
    return ApiResponse(
        message="Course and all related data deleted successfully",
        data=DeletionSummaryResponse.model_validate(summary, from_attributes=True),
    )
