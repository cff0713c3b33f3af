"""Middleware components for the application."""

from student_power.middleware.auth import AdminAuthMiddleware

__all__ = ["AdminAuthMiddleware"]
