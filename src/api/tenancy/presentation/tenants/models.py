"""Pydantic models for tenant API requests and responses."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from tenancy.application.value_objects import (
    UPDATABLE_TENANT_FIELDS,
    ConnectionInfo,
    NewTenant,
    TenantChanges,
)
from tenancy.domain.aggregates import Tenant, TenantBranding, TenantMembership
from tenancy.domain.value_objects import MAX_SLUG_LENGTH, TenantStatus


class TenantStatusEnum(StrEnum):
    """API-level enum for tenant lifecycle status.

    Maps to domain TenantStatus values for validation.
    """

    PROVISIONING = "provisioning"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class BrandingModel(BaseModel):
    """Tenant branding as exchanged over the API."""

    logo_url: str | None = Field(default=None, max_length=500)
    favicon_url: str | None = Field(default=None, max_length=500)
    primary_color: str | None = Field(default=None, max_length=20)
    secondary_color: str | None = Field(default=None, max_length=20)
    accent_color: str | None = Field(default=None, max_length=20)
    login_background_url: str | None = Field(default=None, max_length=500)
    email_footer_html: str | None = Field(default=None, max_length=4000)
    custom_css: str | None = Field(default=None, max_length=8000)

    def to_domain(self) -> TenantBranding:
        return TenantBranding(**self.model_dump())

    @classmethod
    def from_domain(cls, branding: TenantBranding) -> BrandingModel:
        return cls(
            logo_url=branding.logo_url,
            favicon_url=branding.favicon_url,
            primary_color=branding.primary_color,
            secondary_color=branding.secondary_color,
            accent_color=branding.accent_color,
            login_background_url=branding.login_background_url,
            email_footer_html=branding.email_footer_html,
            custom_css=branding.custom_css,
        )


class CreateTenantRequest(BaseModel):
    """Request model for creating a tenant."""

    slug: str = Field(
        ...,
        description="Unique lowercase identifier used in headers and subdomains",
        min_length=1,
        max_length=MAX_SLUG_LENGTH,
    )
    name: str = Field(..., description="Display name", min_length=1, max_length=200)
    database_name: str | None = Field(
        default=None,
        description="Explicit tenant database name; derived from the slug if omitted",
        max_length=200,
    )
    connection_string: str | None = Field(
        default=None,
        description="Explicit connection string; rendered from the template if omitted",
        max_length=500,
    )
    document_number: str | None = Field(default=None, max_length=20)
    primary_contact_name: str | None = Field(default=None, max_length=200)
    primary_contact_email: str | None = Field(default=None, max_length=200)
    primary_contact_phone: str | None = Field(default=None, max_length=50)
    region: str | None = Field(default=None, max_length=100)
    is_demo: bool = False
    notes: str | None = Field(default=None, max_length=2000)
    configuration: dict[str, Any] = Field(default_factory=dict)
    branding: BrandingModel | None = None
    provision: bool = Field(
        default=False,
        description="Provision the tenant database before responding",
    )

    def to_domain(self) -> NewTenant:
        return NewTenant(
            slug=self.slug,
            name=self.name,
            database_name=self.database_name,
            connection_string=self.connection_string,
            document_number=self.document_number,
            primary_contact_name=self.primary_contact_name,
            primary_contact_email=self.primary_contact_email,
            primary_contact_phone=self.primary_contact_phone,
            region=self.region,
            is_demo=self.is_demo,
            notes=self.notes,
            configuration=self.configuration,
            branding=self.branding.to_domain() if self.branding else None,
        )


class UpdateTenantRequest(BaseModel):
    """Request model for a partial tenant update.

    Only fields present in the request body are changed; sending a field
    with ``null`` clears it.
    """

    name: str | None = Field(default=None, min_length=1, max_length=200)
    slug: str | None = Field(default=None, min_length=1, max_length=MAX_SLUG_LENGTH)
    status: TenantStatusEnum | None = None
    document_number: str | None = Field(default=None, max_length=20)
    primary_contact_name: str | None = Field(default=None, max_length=200)
    primary_contact_email: str | None = Field(default=None, max_length=200)
    primary_contact_phone: str | None = Field(default=None, max_length=50)
    region: str | None = Field(default=None, max_length=100)
    is_demo: bool | None = None
    notes: str | None = Field(default=None, max_length=2000)
    configuration: dict[str, Any] | None = None
    branding: BrandingModel | None = None
    remove_branding: bool = False

    def to_changes(self) -> TenantChanges:
        """Convert to a TenantChanges command with only the sent fields."""
        values = {
            name: getattr(self, name)
            for name in UPDATABLE_TENANT_FIELDS
            if name in self.model_fields_set
        }
        # Required columns cannot be cleared
        for name in ("name", "is_demo", "configuration"):
            if name in values and values[name] is None:
                del values[name]

        return TenantChanges(
            values=values,
            slug=self.slug,
            status=TenantStatus(self.status.value) if self.status else None,
            branding=self.branding.to_domain() if self.branding else None,
            remove_branding=self.remove_branding,
        )


class TenantResponse(BaseModel):
    """Response model for tenant."""

    id: int = Field(..., description="Tenant ID")
    slug: str
    name: str
    status: TenantStatusEnum
    database_name: str | None = None
    document_number: str | None = None
    primary_contact_name: str | None = None
    primary_contact_email: str | None = None
    primary_contact_phone: str | None = None
    region: str | None = None
    is_demo: bool = False
    notes: str | None = None
    configuration: dict[str, Any] = Field(default_factory=dict)
    branding: BrandingModel | None = None
    created_at: datetime | None = None
    activated_at: datetime | None = None
    suspended_at: datetime | None = None
    deleted_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response.

        The connection string is only served by the connection-info endpoint.

        Args:
            tenant: Tenant domain aggregate

        Returns:
            TenantResponse
        """
        return cls(
            id=int(tenant.id),
            slug=tenant.slug,
            name=tenant.name,
            status=TenantStatusEnum(tenant.status.value),
            database_name=tenant.database_name,
            document_number=tenant.document_number,
            primary_contact_name=tenant.primary_contact_name,
            primary_contact_email=tenant.primary_contact_email,
            primary_contact_phone=tenant.primary_contact_phone,
            region=tenant.region,
            is_demo=tenant.is_demo,
            notes=tenant.notes,
            configuration=tenant.configuration,
            branding=BrandingModel.from_domain(tenant.branding)
            if tenant.branding
            else None,
            created_at=tenant.created_at,
            activated_at=tenant.activated_at,
            suspended_at=tenant.suspended_at,
            deleted_at=tenant.deleted_at,
            updated_at=tenant.updated_at,
        )


class SlugExistsResponse(BaseModel):
    """Response model for slug availability checks."""

    slug: str
    exists: bool


class ConnectionInfoResponse(BaseModel):
    """Response model for where a tenant's data lives."""

    tenant_id: int
    slug: str
    database_name: str | None = None
    connection_string: str | None = None

    @classmethod
    def from_domain(cls, info: ConnectionInfo) -> ConnectionInfoResponse:
        return cls(
            tenant_id=info.tenant_id.value,
            slug=info.slug,
            database_name=info.database_name,
            connection_string=info.connection_string,
        )


class AssignTenantMemberRequest(BaseModel):
    """Request model for granting a user access to a tenant."""

    user_id: str = Field(..., description="User ID to add as member", min_length=1)
    is_default: bool = Field(
        default=False,
        description="Whether this is the user's default tenant",
    )


class TenantMemberResponse(BaseModel):
    """Response model for a tenant membership."""

    tenant_id: int
    user_id: str
    assigned_by: str | None = None
    assigned_at: datetime
    is_default: bool
    revoked_at: datetime | None = None
    is_active: bool

    @classmethod
    def from_domain(cls, membership: TenantMembership) -> TenantMemberResponse:
        return cls(
            tenant_id=membership.tenant_id.value,
            user_id=membership.user_id.value,
            assigned_by=membership.assigned_by,
            assigned_at=membership.assigned_at,
            is_default=membership.is_default,
            revoked_at=membership.revoked_at,
            is_active=membership.is_active,
        )
