"""Input validation and sanitisation helpers.

Validators collect every violation into a list instead of stopping at the
first one, so a caller can fix all problems in a single round trip.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from student_power.exceptions import InvalidIdentifierError, InvalidUploadError

IDENTIFIER_PATTERN = re.compile(r"^[1-9][0-9]{0,17}$")

MAX_SANITIZED_LENGTH = 1000
MAX_PDF_SIZE_BYTES = 100 * 1024 * 1024
MAX_FILE_NAME_LENGTH = 255
PDF_CONTENT_TYPES = ["application/pdf", "application/x-pdf"]
PDF_MAGIC = b"%PDF"


def sanitize_string(value: str) -> str:
    """Trim, drop angle brackets and cap length."""
    return value.strip().replace("<", "").replace(">", "")[:MAX_SANITIZED_LENGTH]


def is_valid_url(url: str) -> bool:
    """Check that url is absolute (has a scheme and a host)."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def is_valid_identifier(raw_id: str) -> bool:
    """Check that raw_id is a positive integer without sign or leading zeros."""
    return bool(IDENTIFIER_PATTERN.match(raw_id))


def parse_identifier(raw_id: str, model_name: str) -> int:
    """Parse a path identifier.

    Args:
        raw_id: Identifier as received in the URL.
        model_name: Entity name used in the error message.

    Returns:
        Integer primary key.

    Raises:
        InvalidIdentifierError: If raw_id is malformed.
    """
    raw_id = raw_id.strip()
    if not is_valid_identifier(raw_id):
        raise InvalidIdentifierError(model_name, raw_id)
    return int(raw_id)


def collect_upload_errors(
    filename: str, content_type: Optional[str], size: int, head: bytes
) -> list[str]:
    """Collect every reason an uploaded file is not an acceptable PDF.

    Args:
        filename: Client-supplied file name.
        content_type: Client-supplied MIME type.
        size: File size in bytes.
        head: First bytes of the file.

    Returns:
        List of human-readable problems; empty when the upload is valid.
    """
    errors: list[str] = []

    if content_type not in PDF_CONTENT_TYPES and not filename.lower().endswith(
        ".pdf"
    ):
        errors.append("Only PDF files are allowed")

    if size < 1:
        errors.append("File is empty")
    elif size > MAX_PDF_SIZE_BYTES:
        errors.append("File size must be less than 100MB")

    if len(filename) > MAX_FILE_NAME_LENGTH:
        errors.append("File name is too long")

    if size > 0 and not head.startswith(PDF_MAGIC):
        errors.append("Invalid PDF file format")

    return errors


def validate_upload(
    filename: str, content_type: Optional[str], size: int, head: bytes
) -> None:
    """Raise InvalidUploadError listing every upload problem, if any."""
    errors = collect_upload_errors(filename, content_type, size, head)
    if errors:
        raise InvalidUploadError(errors)
