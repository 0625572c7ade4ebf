"""Tests for main.py application startup and configuration."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI

from app.core.errors import APIError
from main import app, lifespan
from tests.conftest import SyncASGITestClient


class TestMainApplication:
    """Test main application functionality."""

    def test_app_creation(self):
        assert isinstance(app, FastAPI)

    def test_app_middleware(self):
        middleware_names = [str(middleware.cls) for middleware in app.user_middleware]

        assert any("CORSMiddleware" in name for name in middleware_names)
        assert any("SlowAPIMiddleware" in name for name in middleware_names)

    def test_api_error_handler_registered(self):
        assert APIError in app.exception_handlers

    def test_app_routes(self):
        route_paths = set(app.openapi()["paths"])

        expected = {
            "/",
            "/health",
            "/auth/login",
            "/auth/authenticate",
            "/auth/refreshToken",
            "/auth/logout",
            "/user",
            "/user/loggedUser",
            "/user/updateProfilePicture",
            "/user/{user_id}",
            "/tweet",
            "/tweet/{tweet_id}",
        }
        assert expected <= route_paths

    def test_root_and_health(self):
        with SyncASGITestClient(app) as client:
            assert client.get("/").json() == {"message": "Server is running"}
            assert client.get("/health").json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_lifespan_startup_success(self):
        mock_app = Mock(spec=FastAPI)
        mock_app.state = Mock()

        with patch("main.verify_connection") as mock_verify, \
             patch("main.run_migrations") as mock_migrations:
            async with lifespan(mock_app):
                pass

            mock_verify.assert_called_once()
            mock_migrations.assert_called_once()
            assert mock_app.state.database_url is not None

    @pytest.mark.asyncio
    async def test_lifespan_startup_database_error(self):
        mock_app = Mock(spec=FastAPI)
        mock_app.state = Mock()

        with patch("main.verify_connection") as mock_verify, \
             patch("main.run_migrations") as mock_migrations:
            mock_verify.side_effect = Exception("Database connection failed")

            with pytest.raises(Exception, match="Database connection failed"):
                async with lifespan(mock_app):
                    pass

            mock_migrations.assert_not_called()

    @pytest.mark.asyncio
    async def test_lifespan_startup_migration_error(self):
        mock_app = Mock(spec=FastAPI)
        mock_app.state = Mock()

        with patch("main.verify_connection"), \
             patch("main.run_migrations") as mock_migrations:
            mock_migrations.side_effect = Exception("Migration failed")

            with pytest.raises(Exception, match="Migration failed"):
                async with lifespan(mock_app):
                    pass
