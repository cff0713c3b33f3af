"""Semesters API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi import status as http_status

from student_power.schemas.cascade import DeletionSummaryResponse
from student_power.schemas.common import ApiResponse
from student_power.schemas.semester import SemesterCreate, SemesterResponse
from student_power.services.cascade import CascadeDeleteCoordinator, CascadeLevel
from student_power.services.semester_service import SemesterService
from student_power.utils.api_helpers import apply_no_cache
from student_power.utils.dependencies import dependencies, get_cascade_coordinator
from student_power.utils.rate_limit import RateLimit

router = APIRouter(
    prefix="/semesters",
    tags=["Semesters"],
)


@router.get("", dependencies=[Depends(RateLimit("read"))])
async def list_semesters(
    response: Response,
    course_id: Optional[int] = Query(default=None, alias="courseId"),
    service: SemesterService = Depends(dependencies.semester),
) -> ApiResponse[list[SemesterResponse]]:
    """List semesters ordered by number, optionally for one course."""
    semesters = await service.find(course_id=course_id)
    apply_no_cache(response)
    return ApiResponse(data=[SemesterResponse.model_validate(s) for s in semesters])


@router.post(
    "",
    status_code=http_status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("create"))],
)
async def create_semester(
    data: SemesterCreate,
    service: SemesterService = Depends(dependencies.semester),
) -> ApiResponse[SemesterResponse]:
    """Add a semester to a course."""
    semester = await service.create_semester(data.course_id, data.number)
    return ApiResponse(
        message="Semester created successfully",
        data=SemesterResponse.model_validate(semester),
    )


@router.get("/{id_or_slug}", dependencies=[Depends(RateLimit("read"))])
async def get_semester(
    id_or_slug: str,
    course_id: Optional[int] = Query(default=None, alias="courseId"),
    service: SemesterService = Depends(dependencies.semester),
) -> ApiResponse[SemesterResponse]:
    """Get a semester by id, falling back to its slug within a course."""
    semester = await service.get_by_id_or_slug(id_or_slug, course_id=course_id)
    return ApiResponse(data=SemesterResponse.model_validate(semester))


@router.delete("/{semester_id}")
async def delete_semester(
    semester_id: str,
    coordinator: CascadeDeleteCoordinator = Depends(get_cascade_coordinator),
) -> ApiResponse[DeletionSummaryResponse]:
    """Delete a semester with all its subjects and PDFs."""
    summary = await coordinator.delete(CascadeLevel.SEMESTER, semester_id)
    return ApiResponse(
        message="Semester and all related data deleted successfully",
        data=DeletionSummaryResponse.model_validate(summary, from_attributes=True),
    )
