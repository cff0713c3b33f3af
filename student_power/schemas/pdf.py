"""PDF schemas for API request/response models."""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from student_power.models.pdf import PdfCategory
from student_power.schemas.common import (
    Description,
    Name,
    RequiredUrl,
    camel_alias,
    text_field,
)
from student_power.utils.validation import MAX_PDF_SIZE_BYTES


def _pdf_name(value: str) -> str:
    if not value.lower().endswith(".pdf"):
        raise ValueError("File name must end with .pdf")
    return value


FileName = Annotated[text_field(5, 255), AfterValidator(_pdf_name)]
FileSize = Annotated[int, Field(ge=1, le=MAX_PDF_SIZE_BYTES)]


class PdfCreate(BaseModel):
    """Schema for registering PDF metadata (file already uploaded).

    Attributes:
        subject_id: Parent subject (also accepted as ``subjectId``).
        title: Display title.
        description: Free-text description.
        file_name: Original file name ending in ``.pdf``.
        file_url: Public URL of the file.
        file_size: Size in bytes (1 byte to 100 MB).
        storage_key: Object storage key returned by the upload endpoint.
        category: One of notes, assignments, papers, other.
    """

    subject_id: int = camel_alias("subject_id", "subjectId")
    title: Name
    description: Description
    file_name: FileName = camel_alias("file_name", "fileName")
    file_url: RequiredUrl = camel_alias("file_url", "fileUrl")
    file_size: FileSize = camel_alias("file_size", "fileSize")
    storage_key: Optional[str] = camel_alias("storage_key", "storageKey", None)
    category: PdfCategory = PdfCategory.OTHER

    model_config = {"populate_by_name": True}


class PdfUpdate(BaseModel):
    """Schema for updating PDF metadata."""

    title: Optional[Name] = None
    description: Optional[Description] = None
    category: Optional[PdfCategory] = None


class PdfResponse(BaseModel):
    """Response schema for PDF."""

    id: int
    subject_id: int
    title: str
    description: str
    file_name: str
    file_url: str
    file_size: int
    storage_key: Optional[str] = None
    category: PdfCategory
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UploadResponse(BaseModel):
    """Response schema for a stored upload, ready to be registered."""

    url: str
    storage_key: str
    file_name: str
    size: int
    pages: int
