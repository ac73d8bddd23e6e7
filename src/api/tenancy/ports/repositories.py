"""Repository protocols (ports) for the tenancy bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates from the control-plane tenant catalog.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from tenancy.domain.aggregates import Tenant, TenantMembership
from tenancy.domain.value_objects import TenantId, UserId


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence."""

    async def save(self, tenant: Tenant) -> Tenant:
        """Persist a tenant aggregate, including its branding.

        New tenants receive their id from the store; the same aggregate is
        returned with ``id`` populated.

        Raises:
            DuplicateTenantSlugError: If the slug is taken
            DuplicateDatabaseNameError: If the database name is taken
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its ID."""
        ...

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Retrieve a tenant by slug, compared case-insensitively."""
        ...

    async def list_all(self) -> list[Tenant]:
        """List every tenant ordered by name."""
        ...

    async def slug_exists(
        self,
        slug: str,
        ignore_tenant_id: TenantId | None = None,
    ) -> bool:
        """Check whether a slug is in use by a tenant other than the ignored one."""
        ...

    async def database_name_exists(
        self,
        database_name: str,
        ignore_tenant_id: TenantId | None = None,
    ) -> bool:
        """Check whether a database name is assigned to another tenant."""
        ...

    async def get_for_user(self, user_id: UserId) -> Tenant | None:
        """Retrieve the tenant a user is permanently associated with."""
        ...


@runtime_checkable
class ITenantMembershipRepository(Protocol):
    """Repository for TenantMembership persistence keyed by (tenant, user)."""

    async def get(
        self,
        tenant_id: TenantId,
        user_id: UserId,
    ) -> TenantMembership | None:
        """Retrieve the membership for a (tenant, user) pair, revoked or not."""
        ...

    async def list_by_tenant(self, tenant_id: TenantId) -> list[TenantMembership]:
        """List all memberships of a tenant, including revoked ones."""
        ...

    async def list_tenants_for_user(self, user_id: UserId) -> list[Tenant]:
        """List active tenants where the user holds an active membership."""
        ...

    async def save(self, membership: TenantMembership) -> None:
        """Insert or update a membership."""
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Control-plane user directory used by membership operations."""

    async def exists(self, user_id: UserId) -> bool:
        """Check whether a user is known to the control plane."""
        ...

    async def assign_tenant(self, user_id: UserId, tenant_id: TenantId) -> None:
        """Set the user's permanent tenant association."""
        ...
