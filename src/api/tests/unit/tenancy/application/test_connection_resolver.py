"""Unit tests for TenantConnectionResolver."""

from unittest.mock import Mock

import pytest

from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.connection_resolver import TenantConnectionResolver

DEFAULT_URL = "postgresql+asyncpg://pillar@db/pillar"
TENANT_URL = "postgresql+asyncpg://pillar@db/pillar_acme"


@pytest.fixture
def mock_probe():
    return Mock()


class TestCurrentConnectionString:
    def test_unresolved_context_uses_default(self, mock_probe):
        resolver = TenantConnectionResolver(TenantContext(), DEFAULT_URL, probe=mock_probe)

        assert resolver.current_connection_string() == DEFAULT_URL
        mock_probe.connection_string_missing.assert_not_called()

    def test_tenant_with_connection_string_uses_it(self, make_tenant, mock_probe):
        context = TenantContext()
        context.apply_tenant(make_tenant(connection_string=TENANT_URL))
        resolver = TenantConnectionResolver(context, DEFAULT_URL, probe=mock_probe)

        assert resolver.current_connection_string() == TENANT_URL

    def test_tenant_without_connection_string_warns_and_falls_back(
        self, make_tenant, mock_probe
    ):
        context = TenantContext()
        context.apply_tenant(make_tenant(tenant_id=3, slug="acme"))
        resolver = TenantConnectionResolver(context, DEFAULT_URL, probe=mock_probe)

        assert resolver.current_connection_string() == DEFAULT_URL
        mock_probe.connection_string_missing.assert_called_once_with(
            tenant_id=3, slug="acme"
        )

    def test_empty_default_is_returned_as_is(self, mock_probe):
        """An empty default is reported by the data layer, not hidden here."""
        resolver = TenantConnectionResolver(TenantContext(), "", probe=mock_probe)

        assert resolver.current_connection_string() == ""

    def test_reads_context_at_call_time(self, make_tenant, mock_probe):
        context = TenantContext()
        resolver = TenantConnectionResolver(context, DEFAULT_URL, probe=mock_probe)

        context.apply_tenant(make_tenant(connection_string=TENANT_URL))

        assert resolver.current_connection_string() == TENANT_URL
