"""PostgreSQL implementation of IUserRepository.

Users are created by the identity provider integration; the tenancy
context only checks that they exist and records their permanent tenant.
"""

from __future__ import annotations

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.value_objects import TenantId, UserId
from tenancy.infrastructure.models import UserModel
from tenancy.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from tenancy.ports.exceptions import UserNotFoundError
from tenancy.ports.repositories import IUserRepository


class UserRepository(IUserRepository):
    """Repository over the control-plane users table."""

    def __init__(
        self,
        session: AsyncSession,
        probe: UserRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def exists(self, user_id: UserId) -> bool:
        """Check whether a user is known to the control plane."""
        stmt = select(exists().where(UserModel.id == user_id.value))
        result = await self._session.execute(stmt)
        found = bool(result.scalar())
        if not found:
            self._probe.user_not_found(user_id.value)
        return found

    async def assign_tenant(self, user_id: UserId, tenant_id: TenantId) -> None:
        """Set the user's permanent tenant association.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id.value)
            .values(tenant_id=tenant_id.value)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            self._probe.user_not_found(user_id.value)
            raise UserNotFoundError(f"User {user_id} not found")

        self._probe.user_tenant_assigned(user_id.value, tenant_id.value)
