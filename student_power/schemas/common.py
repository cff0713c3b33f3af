"""Shared schema types: response envelope and sanitised string fields."""

from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import AfterValidator, AliasChoices, BaseModel, Field, StringConstraints

from student_power.utils.validation import is_valid_url, sanitize_string

T = TypeVar("T")


def _upper(value: str) -> str:
    return value.upper()


def _optional_url(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not is_valid_url(value):
        raise ValueError("must be a valid URL")
    return value


def _required_url(value: str) -> str:
    value = value.strip()
    if not is_valid_url(value):
        raise ValueError("must be a valid URL")
    return value


def text_field(min_length: int, max_length: int):
    """Trimmed string with length bounds, sanitised after validation."""
    return Annotated[
        str,
        StringConstraints(
            strip_whitespace=True, min_length=min_length, max_length=max_length
        ),
        AfterValidator(sanitize_string),
    ]


def camel_alias(name: str, camel: str, default: Any = ...):
    """Field accepting either the snake_case or the camelCase key."""
    return Field(default, validation_alias=AliasChoices(name, camel))


Name = text_field(2, 200)
Description = text_field(10, 1000)
Location = text_field(2, 200)
Duration = text_field(2, 50)
Code = Annotated[text_field(2, 50), AfterValidator(_upper)]
OptionalUrl = Annotated[Optional[str], AfterValidator(_optional_url)]
RequiredUrl = Annotated[str, AfterValidator(_required_url)]


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every catalog endpoint."""

    success: bool = True
    message: Optional[str] = None
    data: T
