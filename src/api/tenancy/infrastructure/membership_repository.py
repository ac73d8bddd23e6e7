"""PostgreSQL implementation of ITenantMembershipRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Tenant, TenantMembership
from tenancy.domain.value_objects import TenantId, TenantStatus, UserId
from tenancy.infrastructure.models import TenantMembershipModel, TenantModel
from tenancy.infrastructure.observability import (
    DefaultMembershipRepositoryProbe,
    MembershipRepositoryProbe,
)
from tenancy.infrastructure.tenant_repository import tenant_from_model
from tenancy.ports.repositories import ITenantMembershipRepository


class TenantMembershipRepository(ITenantMembershipRepository):
    """Repository for (tenant, user) membership grants.

    Rows are never deleted; revocation is a ``revoked_at`` stamp.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: MembershipRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultMembershipRepositoryProbe()

    async def get(
        self,
        tenant_id: TenantId,
        user_id: UserId,
    ) -> TenantMembership | None:
        """Fetch the membership for a (tenant, user) pair."""
        model = await self._get_model(tenant_id, user_id)
        if model is None:
            return None
        return self._to_domain(model)

    async def list_by_tenant(self, tenant_id: TenantId) -> list[TenantMembership]:
        """List every membership of a tenant, oldest assignment first."""
        stmt = (
            select(TenantMembershipModel)
            .where(TenantMembershipModel.tenant_id == tenant_id.value)
            .order_by(TenantMembershipModel.assigned_at, TenantMembershipModel.id)
        )
        result = await self._session.execute(stmt)
        memberships = [self._to_domain(model) for model in result.scalars().all()]

        self._probe.memberships_listed(tenant_id.value, len(memberships))
        return memberships

    async def list_tenants_for_user(self, user_id: UserId) -> list[Tenant]:
        """List active tenants where the user holds an active membership.

        The user's default tenant comes first, the rest by name.
        """
        stmt = (
            select(TenantModel)
            .join(
                TenantMembershipModel,
                TenantMembershipModel.tenant_id == TenantModel.id,
            )
            .where(
                TenantMembershipModel.user_id == user_id.value,
                TenantMembershipModel.revoked_at.is_(None),
                TenantModel.status == TenantStatus.ACTIVE.value,
            )
            .order_by(TenantMembershipModel.is_default.desc(), TenantModel.name)
        )
        result = await self._session.execute(stmt)
        return [
            tenant_from_model(model)
            for model in result.unique().scalars().all()
        ]

    async def save(self, membership: TenantMembership) -> None:
        """Insert or update a membership."""
        model = await self._get_model(membership.tenant_id, membership.user_id)
        if model is None:
            model = TenantMembershipModel(
                tenant_id=membership.tenant_id.value,
                user_id=membership.user_id.value,
            )
            self._session.add(model)

        model.is_default = membership.is_default
        model.assigned_by = membership.assigned_by
        model.assigned_at = membership.assigned_at
        model.revoked_at = membership.revoked_at
        await self._session.flush()

        self._probe.membership_saved(
            membership.tenant_id.value,
            membership.user_id.value,
            membership.is_active,
        )

    async def _get_model(
        self,
        tenant_id: TenantId,
        user_id: UserId,
    ) -> TenantMembershipModel | None:
        stmt = select(TenantMembershipModel).where(
            TenantMembershipModel.tenant_id == tenant_id.value,
            TenantMembershipModel.user_id == user_id.value,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: TenantMembershipModel) -> TenantMembership:
        return TenantMembership(
            tenant_id=TenantId(value=model.tenant_id),
            user_id=UserId(value=model.user_id),
            assigned_at=model.assigned_at,
            assigned_by=model.assigned_by,
            is_default=model.is_default,
            revoked_at=model.revoked_at,
        )
