"""Provisioning adapters: database creation, tenant schema migration and seeding."""

from tenancy.infrastructure.provisioning.alembic_migrator import (
    TENANT_MIGRATIONS_PATH,
    AlembicSchemaMigrator,
)
from tenancy.infrastructure.provisioning.identity_store import (
    TenantIdentityStore,
    open_identity_store,
)
from tenancy.infrastructure.provisioning.postgres_administrator import (
    PostgresDatabaseAdministrator,
)

__all__ = [
    "AlembicSchemaMigrator",
    "PostgresDatabaseAdministrator",
    "TENANT_MIGRATIONS_PATH",
    "TenantIdentityStore",
    "open_identity_store",
]
