"""Ports for the tenancy bounded context.

Repository and provisioning protocols plus the exceptions they raise.
Concrete implementations live in tenancy.infrastructure.
"""

from tenancy.ports.provisioning import (
    IDatabaseAdministrator,
    IdentityStoreFactory,
    ISchemaMigrator,
    ITenantIdentityStore,
    SeedUser,
)
from tenancy.ports.repositories import (
    ITenantMembershipRepository,
    ITenantRepository,
    IUserRepository,
)

__all__ = [
    "IDatabaseAdministrator",
    "IdentityStoreFactory",
    "ISchemaMigrator",
    "ITenantIdentityStore",
    "ITenantMembershipRepository",
    "ITenantRepository",
    "IUserRepository",
    "SeedUser",
]
