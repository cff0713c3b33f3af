"""HTTP API routers."""

from student_power.api.router import create_api_router

__all__ = ["create_api_router"]
