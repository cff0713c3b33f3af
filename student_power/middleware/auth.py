"""Admin authentication for catalog write endpoints."""

import hashlib
import hmac
import logging
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from student_power.config import get_settings

logger = logging.getLogger(__name__)

COOKIE_NAME = "student_power_admin"
SESSION_MESSAGE = "student_power_admin_session_valid"
SESSION_MAX_AGE_SECONDS = 86400 * 7


def generate_session_token(secret: str) -> str:
    """Generate an admin session token using HMAC.

    Args:
        secret: Server-side secret (the configured API key).

    Returns:
        Hex-encoded HMAC digest.
    """
    return hmac.new(
        secret.encode(), SESSION_MESSAGE.encode(), hashlib.sha256
    ).hexdigest()


def verify_session_token(token: str, secret: str) -> bool:
    """Verify an admin session token.

    Args:
        token: The token to verify.
        secret: Server-side secret.

    Returns:
        True if token is valid, False otherwise.
    """
    expected = generate_session_token(secret)
    return hmac.compare_digest(token, expected)


def verify_credentials(username: str, password: str) -> bool:
    """Check static admin credentials in constant time."""
    settings = get_settings()
    username_ok = hmac.compare_digest(username, settings.ADMIN_USERNAME)
    password_ok = hmac.compare_digest(password, settings.ADMIN_PASSWORD)
    return username_ok and password_ok


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """Require an admin for write requests under /api.

    Reads are public. Writes (POST, PUT, PATCH, DELETE) need either a valid
    session cookie set by /api/auth/login or an X-API-KEY header equal to
    the configured key. Login/logout and the AI assistant are exempt.
    """

    PROTECTED_PREFIX: str = "/api"
    WRITE_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})
    EXCLUDED_PREFIXES: tuple[str, ...] = ("/api/auth/", "/api/ai/")

    @classmethod
    def is_protected(cls, method: str, path: str) -> bool:
        """Check if a request requires an admin.

        Args:
            method: HTTP method.
            path: Request URL path.

        Returns:
            True for write methods on protected, non-excluded paths.
        """
        if method.upper() not in cls.WRITE_METHODS:
            return False
        if not path.startswith(cls.PROTECTED_PREFIX):
            return False
        return not path.startswith(cls.EXCLUDED_PREFIXES)

    @staticmethod
    def is_admin(request: Request) -> bool:
        """Whether the request carries a valid API key or session cookie."""
        settings = get_settings()

        api_key = request.headers.get("X-API-KEY")
        if api_key and hmac.compare_digest(api_key, settings.API_KEY):
            return True

        session_token = request.cookies.get(COOKIE_NAME)
        return bool(session_token) and verify_session_token(
            session_token, settings.API_KEY
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and reject unauthenticated writes."""
        path = request.url.path
        if not self.is_protected(request.method, path):
            return await call_next(request)

        if not self.is_admin(request):
            logger.warning(
                "Unauthorized write request",
                extra={
                    "path": path,
                    "method": request.method,
                    "has_key": "x-api-key" in request.headers,
                    "has_cookie": COOKIE_NAME in request.cookies,
                },
            )
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={
                    "success": False,
                    "error": "Unauthorized",
                    "code": "UNAUTHORIZED",
                    "message": "Admin login or valid API key required",
                },
            )

        return await call_next(request)
