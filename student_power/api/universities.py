"""Universities API endpoints."""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi import status as http_status

from student_power.schemas.cascade import DeletionSummaryResponse
from student_power.schemas.common import ApiResponse
from student_power.schemas.university import (
    UniversityCreate,
    UniversityResponse,
    UniversityUpdate,
)
from student_power.services.cascade import CascadeDeleteCoordinator, CascadeLevel
from student_power.services.university_service import UniversityService
from student_power.utils.api_helpers import apply_no_cache, update_fields
from student_power.utils.dependencies import dependencies, get_cascade_coordinator
from student_power.utils.rate_limit import RateLimit
from student_power.utils.validation import parse_identifier

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/universities",
    tags=["Universities"],
)


@router.get("", dependencies=[Depends(RateLimit("read"))])
async def list_universities(
    response: Response,
    service: UniversityService = Depends(dependencies.university),
) -> ApiResponse[list[UniversityResponse]]:
    """List all universities, newest first."""
    universities = await service.find()
    apply_no_cache(response)
    return ApiResponse(
        data=[UniversityResponse.model_validate(u) for u in universities]
    )


@router.post(
    "",
    status_code=http_status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("create"))],
)
async def create_university(
    data: UniversityCreate,
    service: UniversityService = Depends(dependencies.university),
) -> ApiResponse[UniversityResponse]:
    """Create a university.

    Raises:
        DuplicateRecordError: If a university with the same slug exists.
    """
    university = await service.create_university(**data.model_dump())
    return ApiResponse(
        message="University created successfully",
        data=UniversityResponse.model_validate(university),
    )


@router.get("/{id_or_slug}", dependencies=[Depends(RateLimit("read"))])
async def get_university(
    id_or_slug: str,
    service: UniversityService = Depends(dependencies.university),
) -> ApiResponse[UniversityResponse]:
    """Get a university by id, falling back to its slug."""
    university = await service.get_by_id_or_slug(id_or_slug)
    return ApiResponse(data=UniversityResponse.model_validate(university))


@router.put("/{university_id}")
async def update_university(
    university_id: str,
    data: UniversityUpdate,
    service: UniversityService = Depends(dependencies.university),
) -> ApiResponse[UniversityResponse]:
    """Update a university; a new name re-derives the slug."""
    record_id = parse_identifier(university_id, "University")
    university = await service.update_university(record_id, **update_fields(data))
    return ApiResponse(
        message="University updated successfully",
        data=UniversityResponse.model_validate(university),
    )


@router.delete("/{university_id}")
async def delete_university(
    university_id: str,
    coordinator: CascadeDeleteCoordinator = Depends(get_cascade_coordinator),
) -> ApiResponse[DeletionSummaryResponse]:
    """Delete a university with all its courses, semesters, subjects and PDFs."""
    summary = await coordinator.delete(CascadeLevel.UNIVERSITY, university_id)
    return ApiResponse(
        message="University and all related data deleted successfully",
        data=DeletionSummaryResponse.model_validate(summary, from_attributes=True),
    )
