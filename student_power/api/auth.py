"""Admin authentication routes."""

import logging

from fastapi import APIRouter, Depends, Request, Response

from student_power.config import get_settings
from student_power.exceptions import InvalidCredentialsError
from student_power.middleware.auth import (
    COOKIE_NAME,
    SESSION_MAX_AGE_SECONDS,
    AdminAuthMiddleware,
    generate_session_token,
    verify_credentials,
)
from student_power.schemas.auth import LoginRequest
from student_power.schemas.common import ApiResponse
from student_power.utils.rate_limit import RateLimit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", dependencies=[Depends(RateLimit("auth"))])
async def login(data: LoginRequest, response: Response) -> ApiResponse[dict]:
    """Check admin credentials and set the session cookie.

    Raises:
        InvalidCredentialsError: If username or password is wrong.
    """
    if not verify_credentials(data.username, data.password):
        logger.warning("Failed login attempt", extra={"username": data.username})
        raise InvalidCredentialsError("Invalid credentials")

    settings = get_settings()
    response.set_cookie(
        key=COOKIE_NAME,
        value=generate_session_token(settings.API_KEY),
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=SESSION_MAX_AGE_SECONDS,
    )
    logger.info("Successful login", extra={"username": data.username})
    return ApiResponse(message="Login successful", data={"username": data.username})


@router.post("/logout")
async def logout(response: Response) -> ApiResponse[dict]:
    """Clear the session cookie."""
    response.delete_cookie(key=COOKIE_NAME)
    logger.info("Admin logged out")
    return ApiResponse(message="Logged out", data={})


@router.get("/session")
async def session(request: Request) -> ApiResponse[dict]:
    """Report whether the caller is an authenticated admin."""
    return ApiResponse(data={"authenticated": AdminAuthMiddleware.is_admin(request)})
