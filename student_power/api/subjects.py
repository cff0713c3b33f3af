"""Subjects API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi import status as http_status

from student_power.schemas.cascade import DeletionSummaryResponse
from student_power.schemas.common import ApiResponse
from student_power.schemas.subject import (
    SubjectCreate,
    SubjectResponse,
    SubjectUpdate,
)
from student_power.services.cascade import CascadeDeleteCoordinator, CascadeLevel
from student_power.services.subject_service import SubjectService
from student_power.utils.api_helpers import apply_no_cache, update_fields
from student_power.utils.dependencies import dependencies, get_cascade_coordinator
from student_power.utils.rate_limit import RateLimit
from student_power.utils.validation import parse_identifier

router = APIRouter(
    prefix="/subjects",
    tags=["Subjects"],
)


@router.get("", dependencies=[Depends(RateLimit("read"))])
async def list_subjects(
    response: Response,
    course_id: Optional[int] = Query(default=None, alias="courseId"),
    semester_id: Optional[int] = Query(default=None, alias="semesterId"),
    service: SubjectService = Depends(dependencies.subject),
) -> ApiResponse[list[SubjectResponse]]:
    """List subjects, optionally filtered by course and/or semester."""
    subjects = await service.find(course_id=course_id, semester_id=semester_id)
    apply_no_cache(response)
    return ApiResponse(data=[SubjectResponse.model_validate(s) for s in subjects])


@router.post(
    "",
    status_code=http_status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("create"))],
)
async def create_subject(
    data: SubjectCreate,
    service: SubjectService = Depends(dependencies.subject),
) -> ApiResponse[SubjectResponse]:
    """Create a subject.

    Raises:
        RelatedRecordNotFoundError: If the course or semester does not exist.
        DuplicateRecordError: If the slug is taken within the semester.
    """
    subject = await service.create_subject(**data.model_dump())
    return ApiResponse(
        message="Subject created successfully",
        data=SubjectResponse.model_validate(subject),
    )


@router.get("/{id_or_slug}", dependencies=[Depends(RateLimit("read"))])
async def get_subject(
    id_or_slug: str,
    semester_id: Optional[int] = Query(default=None, alias="semesterId"),
    service: SubjectService = Depends(dependencies.subject),
) -> ApiResponse[SubjectResponse]:
    """Get a subject by id, falling back to its slug within a semester."""
    subject = await service.get_by_id_or_slug(id_or_slug, semester_id=semester_id)
    return ApiResponse(data=SubjectResponse.model_validate(subject))


@router.put("/{subject_id}")
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    service: SubjectService = Depends(dependencies.subject),
) -> ApiResponse[SubjectResponse]:
    """Update a subject; a new name re-derives the slug."""
    record_id = parse_identifier(subject_id, "Subject")
    subject = await service.update_subject(record_id, **update_fields(data))
    return ApiResponse(
        message="Subject updated successfully",
        data=SubjectResponse.model_validate(subject),
    )


@router.delete("/{subject_id}")
async def delete_subject(
    subject_id: str,
    coordinator: CascadeDeleteCoordinator = Depends(get_cascade_coordinator),
) -> ApiResponse[DeletionSummaryResponse]:
    """Delete a subject and its PDFs."""
    summary = await coordinator.delete(CascadeLevel.SUBJECT, subject_id)
    return ApiResponse(
        message="Subject and all related PDFs deleted successfully",
        data=DeletionSummaryResponse.model_validate(summary, from_attributes=True),
    )
