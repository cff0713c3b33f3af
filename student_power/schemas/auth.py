"""Admin authentication schemas."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Static admin credentials."""

    username: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1, max_length=200)
