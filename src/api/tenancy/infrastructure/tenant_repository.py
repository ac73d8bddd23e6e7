"""PostgreSQL implementation of ITenantRepository.

This repository manages the tenant catalog in the control-plane database.
Branding is owned by the tenant row and is written in the same flush.
"""

from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Tenant, TenantBranding
from tenancy.domain.value_objects import (
    TenantId,
    TenantStatus,
    UserId,
    normalize_slug,
)
from tenancy.infrastructure.models import (
    TenantBrandingModel,
    TenantModel,
    UserModel,
)
from tenancy.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from tenancy.ports.exceptions import (
    DuplicateDatabaseNameError,
    DuplicateTenantSlugError,
)
from tenancy.ports.repositories import ITenantRepository

_BRANDING_FIELDS = (
    "logo_url",
    "favicon_url",
    "primary_color",
    "secondary_color",
    "accent_color",
    "login_background_url",
    "email_footer_html",
    "custom_css",
)

_TENANT_FIELDS = (
    "name",
    "database_name",
    "connection_string",
    "document_number",
    "primary_contact_name",
    "primary_contact_email",
    "primary_contact_phone",
    "region",
    "is_demo",
    "notes",
    "activated_at",
    "suspended_at",
    "deleted_at",
)


class TenantRepository(ITenantRepository):
    """Repository managing PostgreSQL storage for Tenant aggregates.

    Slugs are stored lowercase and compared case-insensitively. Uniqueness
    of slugs spans every tenant, archived ones included, so a slug is never
    reused. Callers own the transaction; ``save`` only flushes.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def save(self, tenant: Tenant) -> Tenant:
        """Insert or update a tenant and its branding.

        Args:
            tenant: The Tenant aggregate to persist

        Returns:
            The same aggregate with ``id`` (and branding id) populated

        Raises:
            DuplicateTenantSlugError: If the slug is taken by another tenant
            DuplicateDatabaseNameError: If the database name is taken
        """
        model: TenantModel | None = None
        if tenant.id is not None:
            model = await self._get_model(TenantModel.id == tenant.id.value)

        if model is None:
            model = TenantModel()
            if tenant.id is not None:
                model.id = tenant.id.value
            if tenant.created_at is not None:
                model.created_at = tenant.created_at
            self._session.add(model)

        self._apply(model, tenant)

        try:
            # Flush to obtain the generated id and surface constraint violations
            await self._session.flush()
        except IntegrityError as e:
            message = str(e)
            if "ix_tenants_slug" in message:
                self._probe.duplicate_tenant_slug(tenant.slug)
                raise DuplicateTenantSlugError(
                    f"Slug '{tenant.slug}' is already in use"
                ) from e
            if "ix_tenants_database_name" in message:
                self._probe.duplicate_database_name(tenant.database_name or "")
                raise DuplicateDatabaseNameError(
                    f"Database '{tenant.database_name}' is already assigned"
                ) from e
            raise

        tenant.id = TenantId(value=model.id)
        if tenant.branding is not None and model.branding is not None:
            tenant.branding.id = model.branding.id
        if tenant.created_at is None:
            tenant.created_at = model.created_at

        self._probe.tenant_saved(model.id, model.slug)
        return tenant

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch a tenant by id."""
        model = await self._get_model(TenantModel.id == tenant_id.value)
        if model is None:
            self._probe.tenant_not_found(str(tenant_id))
            return None

        self._probe.tenant_retrieved(model.id)
        return tenant_from_model(model)

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Fetch a tenant by slug, ignoring case."""
        model = await self._get_model(TenantModel.slug == normalize_slug(slug))
        if model is None:
            self._probe.tenant_not_found(slug)
            return None

        self._probe.tenant_retrieved(model.id)
        return tenant_from_model(model)

    async def list_all(self) -> list[Tenant]:
        """Fetch all tenants ordered by name."""
        stmt = select(TenantModel).order_by(TenantModel.name, TenantModel.id)
        result = await self._session.execute(stmt)
        models = result.unique().scalars().all()

        tenants = [tenant_from_model(model) for model in models]
        self._probe.tenants_listed(len(tenants))
        return tenants

    async def slug_exists(
        self,
        slug: str,
        ignore_tenant_id: TenantId | None = None,
    ) -> bool:
        """Check whether any tenant other than the ignored one uses the slug."""
        condition = TenantModel.slug == normalize_slug(slug)
        if ignore_tenant_id is not None:
            condition = condition & (TenantModel.id != ignore_tenant_id.value)
        result = await self._session.execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def database_name_exists(
        self,
        database_name: str,
        ignore_tenant_id: TenantId | None = None,
    ) -> bool:
        """Check whether another tenant was assigned the database name."""
        condition = func.lower(TenantModel.database_name) == database_name.lower()
        if ignore_tenant_id is not None:
            condition = condition & (TenantModel.id != ignore_tenant_id.value)
        result = await self._session.execute(select(exists().where(condition)))
        return bool(result.scalar())

    async def get_for_user(self, user_id: UserId) -> Tenant | None:
        """Fetch the tenant a user is permanently associated with."""
        stmt = (
            select(TenantModel)
            .join(UserModel, UserModel.tenant_id == TenantModel.id)
            .where(UserModel.id == user_id.value)
        )
        result = await self._session.execute(stmt)
        model = result.unique().scalar_one_or_none()
        if model is None:
            self._probe.tenant_not_found(f"user:{user_id}")
            return None

        self._probe.tenant_retrieved(model.id)
        return tenant_from_model(model)

    async def _get_model(self, condition) -> TenantModel | None:
        result = await self._session.execute(select(TenantModel).where(condition))
        return result.unique().scalar_one_or_none()

    @staticmethod
    def _apply(model: TenantModel, tenant: Tenant) -> None:
        model.slug = normalize_slug(tenant.slug)
        model.status = tenant.status.value
        model.configuration = dict(tenant.configuration)
        for field_name in _TENANT_FIELDS:
            setattr(model, field_name, getattr(tenant, field_name))
        if tenant.updated_at is not None:
            model.updated_at = tenant.updated_at

        if tenant.branding is None:
            model.branding = None
            return
        if model.branding is None:
            model.branding = TenantBrandingModel()
        for field_name in _BRANDING_FIELDS:
            setattr(model.branding, field_name, getattr(tenant.branding, field_name))


def tenant_from_model(model: TenantModel) -> Tenant:
    """Reconstitute a Tenant aggregate from its ORM row."""
    branding = None
    if model.branding is not None:
        branding = TenantBranding(
            id=model.branding.id,
            **{name: getattr(model.branding, name) for name in _BRANDING_FIELDS},
        )

    return Tenant(
        id=TenantId(value=model.id),
        slug=model.slug,
        status=TenantStatus(model.status),
        configuration=dict(model.configuration or {}),
        branding=branding,
        created_at=model.created_at,
        updated_at=model.updated_at,
        **{name: getattr(model, name) for name in _TENANT_FIELDS},
    )
