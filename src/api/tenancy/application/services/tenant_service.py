"""Tenant application service for the tenancy bounded context.

Handles tenant administration (create, read, update, archive), membership
management and on-demand provisioning.
"""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from tenancy.application.services.tenant_provisioning_service import (
    TenantProvisioningService,
)
from tenancy.application.value_objects import ConnectionInfo, NewTenant, TenantChanges
from tenancy.domain.aggregates import Tenant, TenantMembership
from tenancy.domain.value_objects import TenantId, UserId, normalize_slug
from tenancy.ports.exceptions import (
    DuplicateDatabaseNameError,
    DuplicateTenantSlugError,
    TenantNotFoundError,
    UserNotFoundError,
)
from tenancy.ports.repositories import (
    ITenantMembershipRepository,
    ITenantRepository,
    IUserRepository,
)


class TenantService:
    """Application service for tenant administration.

    Uniqueness rules are checked before any mutation so callers get the
    specific violated rule rather than a constraint error. Provisioning
    runs outside the catalog transaction; the tenant row is saved again
    afterwards whether or not provisioning succeeded.
    """

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        membership_repository: ITenantMembershipRepository,
        user_repository: IUserRepository,
        provisioning_service: TenantProvisioningService,
        session: AsyncSession,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            tenant_repository: Repository for tenant persistence
            membership_repository: Repository for membership persistence
            user_repository: Control-plane user directory
            provisioning_service: Provisions tenant databases
            session: Database session for transaction management
            probe: Optional domain probe for observability
        """
        self._tenant_repository = tenant_repository
        self._membership_repository = membership_repository
        self._user_repository = user_repository
        self._provisioning_service = provisioning_service
        self._session = session
        self._probe = probe or DefaultTenantServiceProbe()

    async def list_tenants(self) -> list[Tenant]:
        """List all tenants ordered by name."""
        tenants = await self._tenant_repository.list_all()
        self._probe.tenants_listed(count=len(tenants))
        return tenants

    async def get_tenant(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by ID, or None if it does not exist."""
        tenant = await self._tenant_repository.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
            return None

        self._probe.tenant_retrieved(tenant_id=tenant_id.value)
        return tenant

    async def get_tenant_by_slug(self, slug: str) -> Tenant | None:
        """Retrieve a tenant by slug, compared case-insensitively."""
        return await self._tenant_repository.get_by_slug(normalize_slug(slug))

    async def slug_exists(
        self,
        slug: str,
        ignore_tenant_id: TenantId | None = None,
    ) -> bool:
        """Check whether a slug is already taken."""
        return await self._tenant_repository.slug_exists(
            normalize_slug(slug), ignore_tenant_id=ignore_tenant_id
        )

    async def create_tenant(self, new_tenant: NewTenant, provision: bool = False) -> Tenant:
        """Create a tenant in ``provisioning`` status.

        Args:
            new_tenant: Slug, name and optional details of the tenant
            provision: Provision the tenant database before returning

        Returns:
            The created Tenant aggregate (active if provisioned with
            auto-activation)

        Raises:
            InvalidTenantSlugError: If the slug is not valid
            DuplicateTenantSlugError: If the slug is already in use
            DuplicateDatabaseNameError: If the explicit or derived database name
                is taken
            ProvisioningConfigurationError: If provisioning is requested but
                no connection string can be built
            ProvisioningError: If a provisioning step fails; the tenant is
                kept in ``provisioning`` status
        """
        tenant = Tenant.create(
            slug=new_tenant.slug,
            name=new_tenant.name,
            database_name=new_tenant.database_name,
            connection_string=new_tenant.connection_string,
            **new_tenant.details(),
        )

        async with self._session.begin():
            await self._check_slug_available(tenant.slug)
            if tenant.database_name:
                await self._check_database_name_available(tenant.database_name)

            tenant = await self._tenant_repository.save(tenant)
            self._probe.tenant_created(tenant_id=int(tenant.id), slug=tenant.slug)

        if provision:
            await self._provision_and_save(tenant)

        return tenant

    async def update_tenant(
        self,
        tenant_id: TenantId,
        changes: TenantChanges,
        context: TenantContext | None = None,
    ) -> Tenant:
        """Apply a partial update to a tenant.

        If ``context`` is the current request's context and it is bound to
        the updated tenant, the context is refreshed with the new state.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            DuplicateTenantSlugError: If a new slug is already in use
            TenantSlugImmutableError: If the slug changes after provisioning
        """
        async with self._session.begin():
            tenant = await self._require_tenant(tenant_id)

            if changes.slug is not None:
                slug = normalize_slug(changes.slug)
                if slug != tenant.slug:
                    await self._check_slug_available(slug, ignore_tenant_id=tenant_id)
                    tenant.change_slug(slug)

            for name, value in changes.values.items():
                setattr(tenant, name, value)

            if changes.remove_branding:
                tenant.branding = None
            elif changes.branding is not None:
                existing_id = tenant.branding.id if tenant.branding else None
                tenant.branding = replace(changes.branding, id=existing_id)

            if changes.status is not None:
                tenant.change_status(changes.status)

            tenant.touch()
            await self._tenant_repository.save(tenant)
            self._probe.tenant_updated(tenant_id=tenant_id.value, slug=tenant.slug)

        if context is not None and context.tenant_id == tenant_id.value:
            context.apply_tenant(tenant)
            self._probe.tenant_context_refreshed(tenant_id=tenant_id.value)

        return tenant

    async def delete_tenant(self, tenant_id: TenantId) -> None:
        """Archive a tenant; its row, memberships and database are retained.

        Raises:
            TenantNotFoundError: If the tenant does not exist
        """
        async with self._session.begin():
            tenant = await self._require_tenant(tenant_id)
            tenant.archive()
            await self._tenant_repository.save(tenant)
            self._probe.tenant_deleted(tenant_id=tenant_id.value)

    async def provision_tenant(self, tenant_id: TenantId) -> Tenant:
        """Provision (or finish provisioning) an existing tenant.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            DuplicateDatabaseNameError: If another tenant uses the database name
            ProvisioningConfigurationError: If no connection string can be built
            ProvisioningError: If a provisioning step fails
        """
        async with self._session.begin():
            tenant = await self._require_tenant(tenant_id)

        await self._provision_and_save(tenant)
        return tenant

    async def get_connection_info(self, tenant_id: TenantId) -> ConnectionInfo | None:
        """Return where a tenant's data lives, or None if it does not exist."""
        tenant = await self.get_tenant(tenant_id)
        if tenant is None:
            return None

        return ConnectionInfo(
            tenant_id=tenant_id,
            slug=tenant.slug,
            database_name=tenant.database_name,
            connection_string=tenant.connection_string,
        )

    async def list_members(self, tenant_id: TenantId) -> list[TenantMembership]:
        """List every membership of a tenant, revoked ones included."""
        return await self._membership_repository.list_by_tenant(tenant_id)

    async def assign_member(
        self,
        tenant_id: TenantId,
        user_id: UserId,
        assigned_by: str | None = None,
        is_default: bool = False,
    ) -> TenantMembership:
        """Grant a user access to a tenant.

        Assigning an active member is a no-op; assigning a revoked member
        reinstates the existing membership. The tenant becomes the user's
        permanent tenant association.

        Raises:
            TenantNotFoundError: If the tenant does not exist
            UserNotFoundError: If the user does not exist
        """
        async with self._session.begin():
            await self._require_tenant(tenant_id)

            if not await self._user_repository.exists(user_id):
                raise UserNotFoundError(f"User {user_id} not found")

            membership = await self._membership_repository.get(tenant_id, user_id)
            if membership is None:
                membership = TenantMembership.grant(
                    tenant_id=tenant_id,
                    user_id=user_id,
                    assigned_by=assigned_by,
                    is_default=is_default,
                )
                await self._membership_repository.save(membership)
                self._probe.member_assigned(
                    tenant_id=tenant_id.value, user_id=user_id.value, reinstated=False
                )
            elif membership.reinstate(assigned_by=assigned_by):
                membership.is_default = is_default
                await self._membership_repository.save(membership)
                self._probe.member_assigned(
                    tenant_id=tenant_id.value, user_id=user_id.value, reinstated=True
                )
            else:
                self._probe.member_already_assigned(
                    tenant_id=tenant_id.value, user_id=user_id.value
                )

            await self._user_repository.assign_tenant(user_id, tenant_id)
            return membership

    async def revoke_member(self, tenant_id: TenantId, user_id: UserId) -> bool:
        """Revoke a user's access to a tenant.

        Returns:
            True if an active membership was revoked; False if the user was
            not an active member (no-op)
        """
        async with self._session.begin():
            membership = await self._membership_repository.get(tenant_id, user_id)
            if membership is None or not membership.revoke():
                self._probe.member_not_found(
                    tenant_id=tenant_id.value, user_id=user_id.value
                )
                return False

            await self._membership_repository.save(membership)
            self._probe.member_revoked(tenant_id=tenant_id.value, user_id=user_id.value)
            return True

    async def list_user_tenants(self, user_id: UserId) -> list[Tenant]:
        """List active tenants where the user holds an active membership."""
        tenants = await self._membership_repository.list_tenants_for_user(user_id)
        self._probe.user_tenants_listed(user_id=user_id.value, count=len(tenants))
        return tenants

    async def _require_tenant(self, tenant_id: TenantId) -> Tenant:
        tenant = await self._tenant_repository.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")
        return tenant

    async def _check_slug_available(
        self,
        slug: str,
        ignore_tenant_id: TenantId | None = None,
    ) -> None:
        if await self._tenant_repository.slug_exists(slug, ignore_tenant_id=ignore_tenant_id):
            self._probe.duplicate_tenant_slug(slug=slug)
            raise DuplicateTenantSlugError(f"Slug '{slug}' is already in use")

    async def _check_database_name_available(
        self,
        database_name: str,
        ignore_tenant_id: TenantId | None = None,
    ) -> None:
        if await self._tenant_repository.database_name_exists(
            database_name, ignore_tenant_id=ignore_tenant_id
        ):
            self._probe.duplicate_database_name(database_name=database_name)
            raise DuplicateDatabaseNameError(
                f"Database name '{database_name}' is already in use"
            )

    async def _provision_and_save(self, tenant: Tenant) -> None:
        database_name, connection_string = self._provisioning_service.prepare_connection(
            tenant
        )
        async with self._session.begin():
            await self._check_database_name_available(
                database_name, ignore_tenant_id=tenant.id
            )
        tenant.assign_infrastructure(database_name, connection_string)

        try:
            await self._provisioning_service.provision(tenant)
        finally:
            # Keep the derived database name even when a later step failed,
            # so a retry targets the same database
            async with self._session.begin():
                await self._tenant_repository.save(tenant)
