"""Request-scoped tenant context.

The context is the single source of truth for "which tenant is this request
for" once resolution has run. One instance is created per request by the
tenant resolution middleware and stored on the request's state; it is
never shared between requests, so it carries no locking.

The actual resolution logic (headers, host, claims) lives in the tenancy
bounded context.
"""

from __future__ import annotations

from typing import Any, Protocol, SupportsInt

# Status string carried by an unresolved context
UNRESOLVED_STATUS = "provisioning"


class ResolvedTenant(Protocol):
    """The tenant attributes a context copies on ``apply_tenant``."""

    id: SupportsInt | None
    slug: str
    name: str
    status: Any
    branding: Any
    is_demo: bool
    database_name: str | None
    connection_string: str | None


class TenantContext:
    """Mutable holder of the resolved tenant for the current request.

    Written at most once by resolution middleware, then read by every
    downstream consumer (connection resolution, row filtering, services).

    Attributes:
        tenant_id: Numeric tenant id, None while unresolved
        slug: Tenant slug
        name: Tenant display name
        status: Tenant lifecycle status as a string
        branding: The tenant's branding record, if any
        is_demo: Whether the tenant is a demo tenant
        database_name: Tenant database name, if provisioned
        connection_string: Explicit tenant connection string, if any
    """

    def __init__(self) -> None:
        self.reset()

    @property
    def is_resolved(self) -> bool:
        """True once a tenant id has been applied."""
        return self.tenant_id is not None

    def apply_tenant(self, tenant: ResolvedTenant) -> None:
        """Copy the resolved tenant's identity and state into the context."""
        self.tenant_id = int(tenant.id) if tenant.id is not None else None
        self.slug = tenant.slug
        self.name = tenant.name
        self.status = str(tenant.status)
        self.branding = tenant.branding
        self.is_demo = tenant.is_demo
        self.database_name = tenant.database_name
        self.connection_string = tenant.connection_string

    def reset(self) -> None:
        """Clear every field back to the unresolved state."""
        self.tenant_id: int | None = None
        self.slug: str | None = None
        self.name: str | None = None
        self.status: str = UNRESOLVED_STATUS
        self.branding: Any = None
        self.is_demo: bool = False
        self.database_name: str | None = None
        self.connection_string: str | None = None

    def __repr__(self) -> str:
        return (
            f"TenantContext(tenant_id={self.tenant_id!r}, slug={self.slug!r}, "
            f"status={self.status!r})"
        )
