"""Application exceptions."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""


class ModelError(AppError):
    """Base exception for model/database operations."""


class InvalidIdentifierError(ModelError):
    """Raised when a record identifier is malformed."""

    def __init__(self, model_name: str, raw_id: str):
        self.model_name = model_name
        self.raw_id = raw_id
        super().__init__(f"Invalid {model_name.lower()} ID format: {raw_id!r}")


class RecordNotFoundError(ModelError):
    """Raised when a record is not found in the database."""

    def __init__(self, model_name: str, record_id: int | str):
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(f"{model_name} with id={record_id} not found")


class RelatedRecordNotFoundError(ModelError):
    """Raised when a related record (FK) is not found."""

    def __init__(self, field: str, record_id: int):
        self.field = field
        self.record_id = record_id
        super().__init__(f"Related record for '{field}' with id={record_id} not found")


class DuplicateRecordError(ModelError):
    """Raised when a scoped unique constraint (slug) is violated."""

    def __init__(self, model_name: str, detail: str):
        self.model_name = model_name
        super().__init__(detail)


class DatabaseConnectionError(ModelError):
    """Raised when a database operation fails."""


class InvalidFilterError(ModelError):
    """Raised when invalid filter is provided."""


class ValidationFailedError(AppError):
    """Raised when input validation collects one or more violations."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(". ".join(self.errors) or "Invalid input")


class S3ConnectionError(AppError):
    """Raised when S3 connection fails."""


class S3OperationError(AppError):
    """Raised when S3 operation fails."""


class InvalidUploadError(ValidationFailedError):
    """Raised when an uploaded file fails size, name or content checks."""


class InvalidCredentialsError(AppError):
    """Raised when admin credentials are rejected."""


class RateLimitExceededError(AppError):
    """Raised when a client exceeds its fixed-window request budget.

    Retryable: carries the window reset timestamp so the response can
    tell the client when to try again.
    """

    def __init__(self, scope: str, reset_at_ms: int, retry_after_seconds: int):
        self.scope = scope
        self.reset_at_ms = reset_at_ms
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Too many {scope} requests. Please wait before trying again."
        )


class AIConfigurationError(AppError):
    """Raised when the AI completion API is not configured."""


class AIServiceError(AppError):
    """Raised when the AI completion API returns an error."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        user_message: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.status_code = status_code
        self.user_message = user_message or message
        self.details = details
        super().__init__(message)
