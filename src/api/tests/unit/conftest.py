"""Unit test fixtures with mocked dependencies."""

from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId, TenantStatus


@pytest.fixture
def make_tenant():
    """Build saved Tenant aggregates with overridable attributes."""

    def _make(
        tenant_id: int = 1,
        slug: str = "acme",
        name: str = "Acme Corp",
        status: TenantStatus = TenantStatus.ACTIVE,
        **kwargs,
    ) -> Tenant:
        return Tenant(
            id=TenantId(value=tenant_id),
            slug=slug,
            name=name,
            status=status,
            **kwargs,
        )

    return _make


@pytest.fixture
def mock_session():
    """Mock AsyncSession whose begin() works as an async context manager."""
    session = Mock(spec=AsyncSession)

    ctx_manager = AsyncMock()
    ctx_manager.__aenter__ = AsyncMock(return_value=None)
    ctx_manager.__aexit__ = AsyncMock(return_value=None)

    session.begin = Mock(return_value=ctx_manager)
    return session
