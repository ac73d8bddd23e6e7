"""Observability probes for tenancy infrastructure."""

from tenancy.infrastructure.observability.repository_probe import (
    DefaultMembershipRepositoryProbe,
    DefaultTenantRepositoryProbe,
    DefaultUserRepositoryProbe,
    MembershipRepositoryProbe,
    TenantRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "DefaultMembershipRepositoryProbe",
    "DefaultTenantRepositoryProbe",
    "DefaultUserRepositoryProbe",
    "MembershipRepositoryProbe",
    "TenantRepositoryProbe",
    "UserRepositoryProbe",
]
