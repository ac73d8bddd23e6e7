"""Tenant aggregate for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from tenancy.domain.exceptions import InvalidTenantSlugError, TenantSlugImmutableError
from tenancy.domain.value_objects import (
    TenantId,
    TenantStatus,
    is_valid_slug,
    normalize_slug,
)


@dataclass
class TenantBranding:
    """Visual identity owned by a tenant."""

    id: int | None = None
    logo_url: str | None = None
    favicon_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    accent_color: str | None = None
    login_background_url: str | None = None
    email_footer_html: str | None = None
    custom_css: str | None = None


@dataclass
class Tenant:
    """Tenant aggregate representing a customer organization.

    Each tenant is an isolated organization, optionally with its own
    database. The aggregate is created in ``provisioning`` status and moves
    to ``active`` once its database is ready.

    Business rules:
    - Slugs are lowercase, URL/host safe and globally unique
    - A slug cannot change once a database has been assigned
    - Only ``active`` and ``provisioning`` tenants can be bound to requests
    """

    id: TenantId | None
    slug: str
    name: str
    status: TenantStatus = TenantStatus.PROVISIONING
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
    created_at: datetime | None = None
    activated_at: datetime | None = None
    suspended_at: datetime | None = None
    deleted_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        slug: str,
        name: str,
        database_name: str | None = None,
        connection_string: str | None = None,
        **details: Any,
    ) -> Tenant:
        """Factory method for creating a new, not yet persisted tenant.

        Args:
            slug: Requested slug (normalized to lowercase)
            name: Display name
            database_name: Explicit tenant database name, if any
            connection_string: Explicit tenant connection string, if any
            **details: Contact fields, region, demo flag, notes, configuration
                and branding

        Returns:
            A Tenant in ``provisioning`` status without an id

        Raises:
            InvalidTenantSlugError: If the slug is not valid
        """
        normalized = normalize_slug(slug)
        if not is_valid_slug(normalized):
            raise InvalidTenantSlugError(
                f"Invalid slug '{slug}': use 1-64 lowercase letters, digits or hyphens"
            )

        return cls(
            id=None,
            slug=normalized,
            name=name.strip(),
            status=TenantStatus.PROVISIONING,
            database_name=database_name or None,
            connection_string=connection_string or None,
            created_at=datetime.now(UTC),
            **details,
        )

    @property
    def is_accessible(self) -> bool:
        return self.status.is_accessible

    @property
    def is_provisioned(self) -> bool:
        """True once a database has been assigned to this tenant."""
        return self.database_name is not None

    def change_slug(self, slug: str) -> bool:
        """Change the slug while the tenant has no database yet.

        Returns:
            True if the slug changed

        Raises:
            InvalidTenantSlugError: If the new slug is not valid
            TenantSlugImmutableError: If a database was already assigned
        """
        normalized = normalize_slug(slug)
        if normalized == self.slug:
            return False
        if not is_valid_slug(normalized):
            raise InvalidTenantSlugError(f"Invalid slug '{slug}'")
        if self.is_provisioned:
            raise TenantSlugImmutableError(
                f"Slug of tenant '{self.slug}' cannot change after provisioning"
            )
        self.slug = normalized
        return True

    def assign_infrastructure(self, database_name: str, connection_string: str) -> None:
        """Record the database prepared for this tenant."""
        self.database_name = database_name
        self.connection_string = connection_string
        self.touch()

    def activate(self) -> None:
        """Mark the tenant active, stamping the first activation time."""
        now = datetime.now(UTC)
        self.status = TenantStatus.ACTIVE
        if self.activated_at is None:
            self.activated_at = now
        self.suspended_at = None
        self.updated_at = now

    def suspend(self) -> None:
        now = datetime.now(UTC)
        self.status = TenantStatus.SUSPENDED
        self.suspended_at = now
        self.updated_at = now

    def archive(self) -> None:
        """Soft-delete the tenant; its row and database are retained."""
        now = datetime.now(UTC)
        self.status = TenantStatus.ARCHIVED
        self.deleted_at = now
        self.updated_at = now

    def change_status(self, status: TenantStatus) -> None:
        """Move to the given status through the matching transition."""
        if status == self.status:
            return
        if status == TenantStatus.ACTIVE:
            self.activate()
        elif status == TenantStatus.SUSPENDED:
            self.suspend()
        elif status == TenantStatus.ARCHIVED:
            self.archive()
        else:
            self.status = status
            self.touch()

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC)
