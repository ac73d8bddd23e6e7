"""Tenant context FastAPI dependencies.

The resolution middleware stores one ``TenantContext`` per request on
``request.state``. These dependencies hand that same instance to routes,
build the connection resolver on top of it and open tenant-scoped sessions.

Usage in FastAPI routes:
    @router.get("/example")
    async def example(
        session: Annotated[AsyncSession, Depends(get_tenant_session)],
    ):
        # ORM selects on TenantScopedMixin models are filtered by tenant
        ...
"""

from __future__ import annotations

from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import open_tenant_session
from infrastructure.settings import DatabaseSettings, get_database_settings
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.connection_resolver import TenantConnectionResolver

# Attribute of request.state holding the request's TenantContext
TENANT_CONTEXT_STATE_KEY = "tenant_context"


def get_tenant_context(request: Request) -> TenantContext:
    """Get the TenantContext of the current request.

    When the resolution middleware did not run (tenant-agnostic apps,
    isolated router tests) an unresolved context is created and stored so
    later dependencies of the same request see the same instance.
    """
    context = getattr(request.state, TENANT_CONTEXT_STATE_KEY, None)
    if context is None:
        context = TenantContext()
        setattr(request.state, TENANT_CONTEXT_STATE_KEY, context)
    return context


def get_connection_resolver(
    context: Annotated[TenantContext, Depends(get_tenant_context)],
    settings: Annotated[DatabaseSettings, Depends(get_database_settings)],
) -> TenantConnectionResolver:
    """Get a connection resolver bound to the request's tenant context."""
    return TenantConnectionResolver(
        context=context,
        default_connection_string=settings.default_connection_string,
    )


async def get_tenant_session(
    context: Annotated[TenantContext, Depends(get_tenant_context)],
    resolver: Annotated[TenantConnectionResolver, Depends(get_connection_resolver)],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on the current tenant's database.

    The session is scoped to the resolved tenant id for automatic row
    filtering. Callers manage transactions with ``session.begin()``.

    Yields:
        AsyncSession bound to the connection picked by the resolver

    Raises:
        DatabaseConfigurationError: If no usable connection string exists
    """
    async with open_tenant_session(
        resolver.current_connection_string(),
        tenant_id=context.tenant_id,
    ) as session:
        yield session
