"""Tests for application factory and endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from student_power.application import create_app, lifespan


class TestApplication:
    """Application wiring checks."""

    def test_create_app_includes_routes(self, app: FastAPI):
        routes = app.openapi()["paths"]

        assert "/" in routes
        assert "/health" in routes
        assert "/api/universities/{university_id}" in routes
        assert "/api/pdfs/upload" in routes
        assert "/api/ai/chat" in routes

    @pytest.mark.asyncio
    async def test_root_endpoint(self, async_client: AsyncClient):
        response = await async_client.get("/")

        assert response.json() == {"message": "Student Power", "version": "0.1.0"}

    @pytest.mark.asyncio
    async def test_lifespan_starts_and_stops_resources(self):
        sweeper = MagicMock()
        sweeper.stop = AsyncMock()
        with (
            patch("student_power.application.init_db", new_callable=AsyncMock) as init_db,
            patch("student_power.application.close_db", new_callable=AsyncMock) as close_db,
            patch("student_power.application.init_s3") as init_s3,
            patch("student_power.application.close_s3") as close_s3,
            patch("student_power.application.create_sweeper", return_value=sweeper),
        ):
            async with lifespan(create_app()):
                init_db.assert_awaited_once()
                init_s3.assert_called_once()
                sweeper.start.assert_called_once()
                close_db.assert_not_awaited()

        sweeper.stop.assert_awaited_once()
        close_s3.assert_called_once()
        close_db.assert_awaited_once()
