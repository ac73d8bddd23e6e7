"""SQLAlchemy implementation of ITenantIdentityStore.

Operates on the identity tables of a single tenant database through a
session scoped to the tenant, so lookups only see the tenant's own rows
and new rows are stamped with its id.
"""

from __future__ import annotations

import secrets
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from ulid import ULID

from infrastructure.database.dependencies import open_tenant_session
from tenancy.infrastructure.models import RoleModel, TenantUserModel, UserRoleModel
from tenancy.ports.provisioning import ITenantIdentityStore, SeedUser


class TenantIdentityStore(ITenantIdentityStore):
    """Roles, users and role links of one tenant database."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_normalized_role_names(self) -> set[str]:
        result = await self._session.execute(select(RoleModel.normalized_name))
        return set(result.scalars().all())

    async def add_roles(self, names: list[str]) -> None:
        self._session.add_all(
            RoleModel(id=str(ULID()), name=name, normalized_name=name.upper())
            for name in names
        )
        await self._session.flush()

    async def get_role_id(self, normalized_name: str) -> str | None:
        result = await self._session.execute(
            select(RoleModel.id).where(RoleModel.normalized_name == normalized_name)
        )
        return result.scalar_one_or_none()

    async def get_user_id_by_email(self, normalized_email: str) -> str | None:
        result = await self._session.execute(
            select(TenantUserModel.id).where(
                TenantUserModel.normalized_email == normalized_email
            )
        )
        return result.scalar_one_or_none()

    async def add_user(self, user: SeedUser) -> str:
        """Add a confirmed, active user and return its new id."""
        model = TenantUserModel(
            id=str(ULID()),
            user_name=user.user_name,
            normalized_user_name=user.user_name.upper(),
            email=user.email,
            normalized_email=user.normalized_email,
            full_name=user.full_name,
            phone_number=user.phone_number,
            password_hash=user.password_hash,
            security_stamp=secrets.token_hex(16),
            is_active=True,
            email_confirmed=True,
        )
        self._session.add(model)
        await self._session.flush()
        return model.id

    async def has_user_role(self, user_id: str, role_id: str) -> bool:
        result = await self._session.execute(
            select(
                exists().where(
                    UserRoleModel.user_id == user_id,
                    UserRoleModel.role_id == role_id,
                )
            )
        )
        return bool(result.scalar())

    async def add_user_role(self, user_id: str, role_id: str) -> None:
        self._session.add(UserRoleModel(user_id=user_id, role_id=role_id))
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()


@asynccontextmanager
async def open_identity_store(
    connection_string: str,
    tenant_id: int,
) -> AsyncIterator[TenantIdentityStore]:
    """Open the identity store of a tenant database (IdentityStoreFactory)."""
    async with open_tenant_session(connection_string, tenant_id) as session:
        yield TenantIdentityStore(session)
