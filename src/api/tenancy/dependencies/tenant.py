"""Tenant administration FastAPI dependencies.

Repositories and the tenant service share the request's control-plane
session through FastAPI dependency caching.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.dependencies import get_write_session
from infrastructure.settings import ProvisioningSettings, get_provisioning_settings
from tenancy.application.observability import (
    DefaultProvisioningProbe,
    DefaultTenantServiceProbe,
    ProvisioningProbe,
    TenantServiceProbe,
)
from tenancy.application.services import TenantProvisioningService, TenantService
from tenancy.infrastructure.membership_repository import TenantMembershipRepository
from tenancy.infrastructure.provisioning import (
    AlembicSchemaMigrator,
    PostgresDatabaseAdministrator,
    open_identity_store,
)
from tenancy.infrastructure.tenant_repository import TenantRepository
from tenancy.infrastructure.user_repository import UserRepository


def get_tenant_service_probe() -> TenantServiceProbe:
    """Get TenantServiceProbe instance.

    Returns:
        DefaultTenantServiceProbe instance for observability
    """
    return DefaultTenantServiceProbe()


def get_provisioning_probe() -> ProvisioningProbe:
    return DefaultProvisioningProbe()


def get_tenant_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> TenantRepository:
    """Get TenantRepository instance."""
    return TenantRepository(session=session)


def get_membership_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> TenantMembershipRepository:
    return TenantMembershipRepository(session=session)


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_write_session)],
) -> UserRepository:
    return UserRepository(session=session)


def get_provisioning_service(
    settings: Annotated[ProvisioningSettings, Depends(get_provisioning_settings)],
    probe: Annotated[ProvisioningProbe, Depends(get_provisioning_probe)],
) -> TenantProvisioningService:
    """Get TenantProvisioningService wired to PostgreSQL and Alembic.

    Args:
        settings: Provisioning options
        probe: Provisioning probe for observability

    Returns:
        TenantProvisioningService instance
    """
    return TenantProvisioningService(
        settings=settings,
        database_administrator=PostgresDatabaseAdministrator(
            admin_database=settings.admin_database
        ),
        schema_migrator=AlembicSchemaMigrator(),
        identity_store_factory=open_identity_store,
        probe=probe,
    )


def get_tenant_service(
    tenant_repo: Annotated[TenantRepository, Depends(get_tenant_repository)],
    membership_repo: Annotated[
        TenantMembershipRepository, Depends(get_membership_repository)
    ],
    user_repo: Annotated[UserRepository, Depends(get_user_repository)],
    provisioning_service: Annotated[
        TenantProvisioningService, Depends(get_provisioning_service)
    ],
    session: Annotated[AsyncSession, Depends(get_write_session)],
    tenant_service_probe: Annotated[
        TenantServiceProbe, Depends(get_tenant_service_probe)
    ],
) -> TenantService:
    """Get TenantService instance.

    Args:
        tenant_repo: Tenant repository (shares session via FastAPI dependency caching)
        membership_repo: Membership repository
        user_repo: Control-plane user directory
        provisioning_service: Provisioning orchestration
        session: Database session for transaction management
        tenant_service_probe: Tenant service probe for observability

    Returns:
        TenantService instance
    """
    return TenantService(
        tenant_repository=tenant_repo,
        membership_repository=membership_repo,
        user_repository=user_repo,
        provisioning_service=provisioning_service,
        session=session,
        probe=tenant_service_probe,
    )
