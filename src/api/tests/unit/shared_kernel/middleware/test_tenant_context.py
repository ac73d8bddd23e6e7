"""Unit tests for the request-scoped TenantContext and TenantContextProbe."""

from __future__ import annotations

from unittest.mock import Mock

from shared_kernel.middleware.observability.tenant_context_probe import (
    DefaultTenantContextProbe,
)
from shared_kernel.middleware.tenant_context import UNRESOLVED_STATUS, TenantContext
from shared_kernel.observability_context import ObservationContext
from tenancy.domain.aggregates import TenantBranding
from tenancy.domain.value_objects import TenantStatus


class TestTenantContext:
    """Tests for the TenantContext holder."""

    def test_new_context_is_unresolved(self) -> None:
        context = TenantContext()

        assert context.is_resolved is False
        assert context.tenant_id is None
        assert context.slug is None
        assert context.status == UNRESOLVED_STATUS
        assert context.is_demo is False

    def test_apply_tenant_copies_identity_and_state(self, make_tenant) -> None:
        """Applying a tenant should copy every field the context exposes."""
        branding = TenantBranding(id=3, primary_color="#112233")
        tenant = make_tenant(
            tenant_id=42,
            slug="acme",
            name="Acme Corp",
            status=TenantStatus.ACTIVE,
            is_demo=True,
            branding=branding,
            database_name="pillar_acme",
            connection_string="postgresql+asyncpg://u@db/pillar_acme",
        )
        context = TenantContext()

        context.apply_tenant(tenant)

        assert context.is_resolved is True
        assert context.tenant_id == 42
        assert context.slug == "acme"
        assert context.name == "Acme Corp"
        assert context.status == "active"
        assert context.branding is branding
        assert context.is_demo is True
        assert context.database_name == "pillar_acme"
        assert context.connection_string == "postgresql+asyncpg://u@db/pillar_acme"

    def test_reset_clears_every_field(self, make_tenant) -> None:
        context = TenantContext()
        context.apply_tenant(make_tenant(database_name="pillar_acme"))

        context.reset()

        assert context.is_resolved is False
        assert context.slug is None
        assert context.database_name is None
        assert context.connection_string is None
        assert context.status == UNRESOLVED_STATUS

    def test_contexts_are_independent(self, make_tenant) -> None:
        """Each request gets its own instance; applying one leaves others alone."""
        first = TenantContext()
        second = TenantContext()

        first.apply_tenant(make_tenant())

        assert first.is_resolved is True
        assert second.is_resolved is False


class TestDefaultTenantContextProbe:
    """Tests for the default tenant resolution probe."""

    def test_tenant_resolved_logs_source(self) -> None:
        logger = Mock()
        probe = DefaultTenantContextProbe(logger=logger)

        probe.tenant_resolved(tenant_id=1, slug="acme", source="header")

        logger.debug.assert_called_once()
        call_args = logger.debug.call_args
        assert call_args[0][0] == "tenant_context_resolved"
        assert call_args[1]["tenant_id"] == 1
        assert call_args[1]["tenant_slug"] == "acme"
        assert call_args[1]["source"] == "header"

    def test_access_denied_logs_warning(self) -> None:
        logger = Mock()
        probe = DefaultTenantContextProbe(logger=logger)

        probe.tenant_access_denied(path="/api/orders")

        logger.warning.assert_called_once()
        assert logger.warning.call_args[0][0] == "tenant_context_access_denied"
        assert logger.warning.call_args[1]["path"] == "/api/orders"

    def test_resolution_failure_logs_error_type(self) -> None:
        logger = Mock()
        probe = DefaultTenantContextProbe(logger=logger)

        probe.tenant_resolution_failed(path="/api/orders", error=RuntimeError("down"))

        call_args = logger.error.call_args
        assert call_args[0][0] == "tenant_context_resolution_failed"
        assert call_args[1]["error"] == "down"
        assert call_args[1]["error_type"] == "RuntimeError"

    def test_with_context_includes_request_id(self) -> None:
        logger = Mock()
        probe = DefaultTenantContextProbe(logger=logger).with_context(
            ObservationContext(request_id="req-1")
        )

        probe.tenant_not_resolved(path="/api/orders")

        assert logger.debug.call_args[1]["request_id"] == "req-1"
