"""Application-layer value objects for the tenancy bounded context.

Commands accepted by the tenant service and read-only views it returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tenancy.domain.aggregates import TenantBranding
from tenancy.domain.value_objects import TenantId, TenantStatus, UserId

# Tenant attributes an update may change, besides slug, status and branding
UPDATABLE_TENANT_FIELDS = (
    "name",
    "document_number",
    "primary_contact_name",
    "primary_contact_email",
    "primary_contact_phone",
    "region",
    "is_demo",
    "notes",
    "configuration",
)


@dataclass(frozen=True)
class AuthenticatedUser:
    """The caller of an administrative operation.

    Taken from the request's claims identity; tenant scoping is not
    required for tenant administration.
    """

    user_id: UserId
    username: str


@dataclass(frozen=True)
class NewTenant:
    """Data for creating a tenant.

    ``database_name`` and ``connection_string`` are optional explicit
    values; provisioning derives whatever is missing.
    """

    slug: str
    name: str
    database_name: str | None = None
    connection_string: str | None = None
    document_number: str | None = None
    primary_contact_name: str | None = None
    primary_contact_email: str | None = None
    primary_contact_phone: str | None = None
    region: str | None = None
    is_demo: bool = False
    notes: str | None = None
    configuration: dict[str, Any] = field(default_factory=dict)
    branding: TenantBranding | None = None

    def details(self) -> dict[str, Any]:
        """Optional tenant attributes as keyword arguments for Tenant.create."""
        return {
            "document_number": self.document_number,
            "primary_contact_name": self.primary_contact_name,
            "primary_contact_email": self.primary_contact_email,
            "primary_contact_phone": self.primary_contact_phone,
            "region": self.region,
            "is_demo": self.is_demo,
            "notes": self.notes,
            "configuration": dict(self.configuration),
            "branding": self.branding,
        }


@dataclass(frozen=True)
class TenantChanges:
    """Partial update of a tenant.

    Only the attributes present in ``values`` are applied, so an attribute
    can be cleared by passing it with a None value. Branding is replaced
    when given and removed when ``remove_branding`` is set.
    """

    values: dict[str, Any] = field(default_factory=dict)
    slug: str | None = None
    status: TenantStatus | None = None
    branding: TenantBranding | None = None
    remove_branding: bool = False

    def __post_init__(self) -> None:
        unknown = set(self.values) - set(UPDATABLE_TENANT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown tenant fields: {', '.join(sorted(unknown))}")


@dataclass(frozen=True)
class ConnectionInfo:
    """Where a tenant's data lives."""

    tenant_id: TenantId
    slug: str
    database_name: str | None
    connection_string: str | None
