"""PDFs API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile
from fastapi import status as http_status

from student_power.exceptions import InvalidUploadError
from student_power.schemas.common import ApiResponse
from student_power.schemas.pdf import (
    PdfCreate,
    PdfResponse,
    PdfUpdate,
    UploadResponse,
)
from student_power.services.pdf_service import PdfService
from student_power.utils.api_helpers import apply_no_cache, update_fields
from student_power.utils.dependencies import dependencies, get_optional_storage
from student_power.utils.rate_limit import RateLimit
from student_power.utils.s3 import S3Storage, get_s3_storage
from student_power.utils.validation import MAX_PDF_SIZE_BYTES, parse_identifier

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/pdfs",
    tags=["PDFs"],
)


@router.get("", dependencies=[Depends(RateLimit("read"))])
async def list_pdfs(
    response: Response,
    subject_id: Optional[int] = Query(default=None, alias="subjectId"),
    service: PdfService = Depends(dependencies.pdf),
) -> ApiResponse[list[PdfResponse]]:
    """List PDFs, newest first, optionally for one subject."""
    pdfs = await service.find(subject_id=subject_id)
    apply_no_cache(response)
    return ApiResponse(data=[PdfResponse.model_validate(p) for p in pdfs])


@router.post(
    "/upload",
    status_code=http_status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("upload"))],
)
async def upload_pdf(
    file: UploadFile = File(...),
    service: PdfService = Depends(dependencies.pdf),
    s3: S3Storage = Depends(get_s3_storage),
) -> ApiResponse[UploadResponse]:
    """Upload a PDF file to storage.

    The returned url and storage_key are then registered with POST /pdfs.

    Raises:
        InvalidUploadError: If the file is not an acceptable PDF.
        S3OperationError: If the upload fails.
    """
    filename = file.filename or ""
    if file.size is not None and file.size > MAX_PDF_SIZE_BYTES:
        raise InvalidUploadError(["File size must be less than 100MB"])

    data = await file.read()
    stored, pages = await service.upload_pdf(s3, data, filename, file.content_type)
    return ApiResponse(
        message="File uploaded successfully",
        data=UploadResponse(
            url=stored.url,
            storage_key=stored.key,
            file_name=filename,
            size=stored.size,
            pages=pages,
        ),
    )


@router.post(
    "",
    status_code=http_status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("create"))],
)
async def create_pdf(
    data: PdfCreate,
    service: PdfService = Depends(dependencies.pdf),
) -> ApiResponse[PdfResponse]:
    """Register PDF metadata under a subject.

    Raises:
        RelatedRecordNotFoundError: If the subject does not exist.
    """
    pdf = await service.create_pdf(**data.model_dump())
    return ApiResponse(
        message="PDF metadata created successfully",
        data=PdfResponse.model_validate(pdf),
    )


@router.get("/{pdf_id}", dependencies=[Depends(RateLimit("read"))])
async def get_pdf(
    pdf_id: str,
    service: PdfService = Depends(dependencies.pdf),
) -> ApiResponse[PdfResponse]:
    """Get a PDF by id.

    Raises:
        InvalidIdentifierError: If pdf_id is malformed.
        RecordNotFoundError: If the PDF does not exist.
    """
    pdf = await service.get_by_id_or_fail(parse_identifier(pdf_id, "PDF"))
    return ApiResponse(data=PdfResponse.model_validate(pdf))


@router.put("/{pdf_id}")
async def update_pdf(
    pdf_id: str,
    data: PdfUpdate,
    service: PdfService = Depends(dependencies.pdf),
) -> ApiResponse[PdfResponse]:
    """Update PDF metadata."""
    pdf = await service.update(parse_identifier(pdf_id, "PDF"), **update_fields(data))
    return ApiResponse(
        message="PDF updated successfully",
        data=PdfResponse.model_validate(pdf),
    )


@router.delete("/{pdf_id}")
async def delete_pdf(
    pdf_id: str,
    service: PdfService = Depends(dependencies.pdf),
    s3: Optional[S3Storage] = Depends(get_optional_storage),
) -> ApiResponse[dict]:
    """Delete a PDF, releasing its stored file when possible."""
    record_id = parse_identifier(pdf_id, "PDF")
    released = await service.delete_with_file(s3, record_id)
    return ApiResponse(
        message="PDF deleted successfully",
        data={"id": record_id, "storage_released": released},
    )
