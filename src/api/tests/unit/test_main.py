"""Unit tests for main FastAPI application configuration."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.middleware.authentication import AuthenticationMiddleware

import main
from tenancy.presentation.middleware import TenantResolutionMiddleware


class TestApplication:
    def test_health_check(self):
        assert main.health() == {"status": "ok"}

    def test_tenant_routes_are_registered(self):
        paths = {route.path for route in main.app.routes}

        assert "/health" in paths
        assert "/api/tenants" in paths
        assert "/api/tenants/{tenant_id}" in paths
        assert "/api/tenants/{tenant_id}/provision" in paths
        assert "/api/tenants/{tenant_id}/members/{user_id}" in paths

    def test_authentication_runs_before_tenant_resolution(self):
        classes = [middleware.cls for middleware in main.app.user_middleware]

        # user_middleware lists the outermost middleware first
        assert classes.index(AuthenticationMiddleware) < classes.index(
            TenantResolutionMiddleware
        )


class TestLifespan:
    @pytest.mark.asyncio
    async def test_reports_missing_provisioning_template(self):
        probe = MagicMock()
        settings = MagicMock(template_connection_string=None)

        with (
            patch("main.DefaultStartupProbe", return_value=probe),
            patch("main.get_provisioning_settings", return_value=settings),
            patch("main.configure_logging"),
            patch("main.close_database_connections", new=AsyncMock()) as close,
        ):
            async with main.pillar_lifespan(main.app):
                probe.application_started.assert_called_once()

        probe.provisioning_template_missing.assert_called_once()
        close.assert_awaited_once()
        probe.application_stopped.assert_called_once()

    @pytest.mark.asyncio
    async def test_configured_template_is_not_reported(self):
        probe = MagicMock()
        settings = MagicMock(
            template_connection_string="postgresql+asyncpg://db/{DB}"
        )

        with (
            patch("main.DefaultStartupProbe", return_value=probe),
            patch("main.get_provisioning_settings", return_value=settings),
            patch("main.configure_logging"),
            patch("main.close_database_connections", new=AsyncMock()),
        ):
            async with main.pillar_lifespan(main.app):
                pass

        probe.provisioning_template_missing.assert_not_called()
