"""PDF service: metadata records plus their files in object storage."""

import asyncio
import io
import logging
from typing import Any, Optional

from student_power.exceptions import (
    InvalidUploadError,
    S3OperationError,
    ValidationFailedError,
)
from student_power.models.pdf import Pdf
from student_power.models.subject import Subject
from student_power.services.base import BaseService
from student_power.utils.pdf_text import count_pages, extract_text
from student_power.utils.s3 import S3Storage, StoredObject
from student_power.utils.validation import PDF_MAGIC, validate_upload

logger = logging.getLogger(__name__)


class PdfService(BaseService[Pdf]):
    """Service for managing Pdf entities.

    Uploading and registering are separate steps: upload_pdf stores the file
    and reports its key and URL, create_pdf records the metadata under a
    subject.

    Usage:
        service = PdfService(db_session)
        stored, pages = await service.upload_pdf(s3, data, "notes.pdf", None)
        pdf = await service.create_pdf(subject_id=4, file_url=stored.url, ...)
    """

    model = Pdf
    default_order = (Pdf.created_at.desc(), Pdf.id.desc())

    async def create_pdf(self, **fields: Any) -> Pdf:
        """Record PDF metadata under an existing subject.

        Raises:
            RelatedRecordNotFoundError: If the subject does not exist.
            DatabaseConnectionError: If database operation fails.
        """
        await self.ensure_related(Subject, "subject_id", fields["subject_id"])
        pdf = await self.create(**fields)
        logger.info(
            "PDF registered",
            extra={
                "pdf_id": pdf.id,
                "subject_id": pdf.subject_id,
                "storage_key": pdf.storage_key,
            },
        )
        return pdf

    async def upload_pdf(
        self,
        s3: S3Storage,
        data: bytes,
        filename: str,
        content_type: Optional[str],
    ) -> tuple[StoredObject, int]:
        """Validate a PDF upload and put it in object storage.

        Args:
            s3: S3 storage instance.
            data: Full file contents.
            filename: Client-supplied file name.
            content_type: Client-supplied MIME type.

        Returns:
            The stored object and the document's page count.

        Raises:
            InvalidUploadError: If the file fails type, size, name or
                content checks.
            S3OperationError: If the upload fails.
        """
        try:
            validate_upload(filename, content_type, len(data), data[: len(PDF_MAGIC)])
        except InvalidUploadError:
            logger.warning(
                "Rejected PDF upload",
                extra={
                    "original_filename": filename,
                    "content_type": content_type,
                    "size": len(data),
                },
            )
            raise
        pages = count_pages(data)

        stored = await asyncio.to_thread(s3.upload_pdf, io.BytesIO(data), filename)
        logger.info(
            "PDF uploaded",
            extra={"storage_key": stored.key, "size": stored.size, "pages": pages},
        )
        return stored, pages

    async def delete_with_file(self, s3: Optional[S3Storage], pdf_id: int) -> bool:
        """Delete a PDF record after releasing its stored file.

        Releasing the file is best-effort: a storage failure is logged and
        the record is deleted anyway.

        Returns:
            True if a stored file was released.

        Raises:
            RecordNotFoundError: If the PDF does not exist.
            DatabaseConnectionError: If database operation fails.
        """
        pdf = await self.get_by_id_or_fail(pdf_id)
        released = False
        if pdf.storage_key and s3 is not None:
            try:
                await asyncio.to_thread(s3.delete_file, pdf.storage_key)
                released = True
            except S3OperationError as e:
                logger.warning(
                    "Failed to release stored PDF",
                    extra={
                        "pdf_id": pdf_id,
                        "storage_key": pdf.storage_key,
                        "error": str(e),
                    },
                )

        await self.delete(pdf_id)
        logger.info(
            "PDF deleted",
            extra={"pdf_id": pdf_id, "storage_released": released},
        )
        return released

    async def extract_pdf_text(
        self, s3: S3Storage, pdf_id: int, max_chars: Optional[int] = None
    ) -> str:
        """Download a stored PDF and extract its text.

        Raises:
            RecordNotFoundError: If the PDF does not exist.
            ValidationFailedError: If the PDF has no stored file.
            S3OperationError: If the download fails.
            InvalidUploadError: If the stored file is not a readable PDF.
        """
        pdf = await self.get_by_id_or_fail(pdf_id)
        if not pdf.storage_key:
            raise ValidationFailedError(["PDF has no stored file to read"])
        data = await asyncio.to_thread(s3.download_file, pdf.storage_key)
        return extract_text(data, max_chars=max_chars)
