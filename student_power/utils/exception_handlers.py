"""Centralized exception handlers for FastAPI application."""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from student_power.exceptions import (
    AIConfigurationError,
    AIServiceError,
    AppError,
    DatabaseConnectionError,
    DuplicateRecordError,
    InvalidCredentialsError,
    InvalidIdentifierError,
    InvalidUploadError,
    ModelError,
    RateLimitExceededError,
    RecordNotFoundError,
    RelatedRecordNotFoundError,
    S3ConnectionError,
    S3OperationError,
    ValidationFailedError,
)
from student_power.utils.rate_limit import format_reset_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExceptionConfig:
    """Configuration for exception handler behavior."""

    status_code: int
    error_name: str
    code: str
    log_level: str = "warning"
    include_detail: bool = True


# Exception type to configuration mapping
EXCEPTION_CONFIGS: dict[type[Exception], ExceptionConfig] = {
    InvalidIdentifierError: ExceptionConfig(
        status_code=status.HTTP_400_BAD_REQUEST,
        error_name="Invalid ID",
        code="INVALID_ID",
    ),
    InvalidUploadError: ExceptionConfig(
        status_code=status.HTTP_400_BAD_REQUEST,
        error_name="Invalid File",
        code="INVALID_FILE",
    ),
    ValidationFailedError: ExceptionConfig(
        status_code=status.HTTP_400_BAD_REQUEST,
        error_name="Validation Error",
        code="VALIDATION_ERROR",
    ),
    RelatedRecordNotFoundError: ExceptionConfig(
        status_code=status.HTTP_400_BAD_REQUEST,
        error_name="Related Record Not Found",
        code="RELATED_NOT_FOUND",
    ),
    RecordNotFoundError: ExceptionConfig(
        status_code=status.HTTP_404_NOT_FOUND,
        error_name="Not Found",
        code="NOT_FOUND",
    ),
    DuplicateRecordError: ExceptionConfig(
        status_code=status.HTTP_409_CONFLICT,
        error_name="Duplicate Entry",
        code="DUPLICATE_ERROR",
    ),
    InvalidCredentialsError: ExceptionConfig(
        status_code=status.HTTP_401_UNAUTHORIZED,
        error_name="Unauthorized",
        code="UNAUTHORIZED",
    ),
    RateLimitExceededError: ExceptionConfig(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        error_name="Too Many Requests",
        code="RATE_LIMIT_EXCEEDED",
    ),
    DatabaseConnectionError: ExceptionConfig(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_name="Database Error",
        code="DATABASE_ERROR",
        log_level="error",
        include_detail=False,
    ),
    ModelError: ExceptionConfig(
        status_code=status.HTTP_400_BAD_REQUEST,
        error_name="Bad Request",
        code="BAD_REQUEST",
        log_level="error",
    ),
    S3OperationError: ExceptionConfig(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_name="Storage Error",
        code="STORAGE_ERROR",
        log_level="error",
        include_detail=False,
    ),
    S3ConnectionError: ExceptionConfig(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_name="Storage Error",
        code="STORAGE_ERROR",
        log_level="error",
        include_detail=False,
    ),
    AIConfigurationError: ExceptionConfig(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_name="AI Configuration Error",
        code="AI_CONFIG_ERROR",
        log_level="error",
    ),
    AIServiceError: ExceptionConfig(
        status_code=status.HTTP_502_BAD_GATEWAY,
        error_name="AI Service Error",
        code="AI_SERVICE_ERROR",
        log_level="error",
    ),
}


def _log_exception(exc: Exception, config: ExceptionConfig) -> None:
    """Log exception with appropriate level."""
    log_func: Callable[..., None] = getattr(logger, config.log_level)
    log_func(f"{type(exc).__name__}: {exc}", extra={"code": config.code})


def _build_response_content(exc: Exception, config: ExceptionConfig) -> dict[str, Any]:
    """Build response content based on exception type."""
    content: dict[str, Any] = {
        "success": False,
        "error": config.error_name,
        "code": config.code,
    }

    if isinstance(exc, DatabaseConnectionError):
        content["message"] = "Database error. Please try again later."
    elif isinstance(exc, (S3OperationError, S3ConnectionError)):
        content["message"] = "Failed to process file in storage"
    elif isinstance(exc, AIServiceError):
        content["error"] = str(exc)
        content["message"] = exc.user_message
    elif config.include_detail:
        content["message"] = str(exc)

    if isinstance(exc, ValidationFailedError):
        content["details"] = exc.errors
    elif isinstance(exc, RecordNotFoundError):
        content["model"] = exc.model_name
        content["record_id"] = exc.record_id
    elif isinstance(exc, RelatedRecordNotFoundError):
        content["field"] = exc.field
        content["record_id"] = exc.record_id
    elif isinstance(exc, AIServiceError) and exc.details:
        content["details"] = exc.details

    return content


def _status_code(exc: Exception, config: ExceptionConfig) -> int:
    if isinstance(exc, AIServiceError):
        return exc.status_code
    return config.status_code


def _headers(exc: Exception) -> dict[str, str]:
    if not isinstance(exc, RateLimitExceededError):
        return {}
    return {
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": format_reset_time(exc.reset_at_ms),
        "Retry-After": str(exc.retry_after_seconds),
    }


def _create_handler(
    config: ExceptionConfig,
) -> Callable[[Request, Exception], JSONResponse]:
    """Create exception handler function for given config."""

    async def handler(request: Request, exc: Exception) -> JSONResponse:
        _log_exception(exc, config)
        content = _build_response_content(exc, config)
        return JSONResponse(
            status_code=_status_code(exc, config),
            content=content,
            headers=_headers(exc),
        )

    return handler


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body/query validation errors."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "Validation Error",
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "details": jsonable_encoder(exc.errors()),
        },
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework HTTP errors (unknown route, wrong method) in the envelope."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        logger.warning(f"404 Not Found: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": str(exc.detail),
            "code": "NOT_FOUND"
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else "HTTP_ERROR",
            "message": f"{request.method} {request.url.path}: {exc.detail}",
        },
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal Server Error",
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application.

    Args:
        app: FastAPI application instance.
    """
    for exc_type, config in EXCEPTION_CONFIGS.items():
        app.add_exception_handler(exc_type, _create_handler(config))

    # Unmapped AppError subclasses
    app.add_exception_handler(
        AppError,
        _create_handler(
            ExceptionConfig(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_name="Internal Server Error",
                code="INTERNAL_ERROR",
                log_level="error",
                include_detail=False,
            )
        ),
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
