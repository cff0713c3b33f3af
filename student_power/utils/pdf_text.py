"""Plain-text extraction from PDF bytes."""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from student_power.exceptions import InvalidUploadError

logger = logging.getLogger(__name__)


def _open(data: bytes) -> PdfReader:
    try:
        return PdfReader(io.BytesIO(data))
    except (PdfReadError, ValueError, OSError) as e:
        raise InvalidUploadError([f"Unreadable PDF: {e}"]) from e


def count_pages(data: bytes) -> int:
    """Return the page count of a PDF.

    Raises:
        InvalidUploadError: If the bytes are not a readable PDF.
    """
    return len(_open(data).pages)


def extract_text(data: bytes, max_chars: int | None = None) -> str:
    """Extract text from every page, stopping once max_chars is reached.

    Args:
        data: PDF file contents.
        max_chars: Optional cap on returned characters.

    Returns:
        Page texts joined by blank lines.

    Raises:
        InvalidUploadError: If the bytes are not a readable PDF.
    """
    reader = _open(data)
    parts: list[str] = []
    total = 0
    for page_number, page in enumerate(reader.pages, start=1):
        try:
            text = page.extract_text() or ""
        except (PdfReadError, ValueError) as e:
            logger.warning(
                "Skipping unreadable PDF page",
                extra={"page": page_number, "error": str(e)},
            )
            continue
        parts.append(text.strip())
        total += len(text)
        if max_chars is not None and total >= max_chars:
            break

    joined = "\n\n".join(part for part in parts if part)
    return joined[:max_chars] if max_chars is not None else joined
