"""Provisioning protocols (ports) for the tenancy bounded context.

The provisioning service orchestrates these collaborators in a fixed
order. Each one must be idempotent so that a failed provisioning run can
simply be retried.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class IDatabaseAdministrator(Protocol):
    """Creates tenant databases on the database server."""

    async def ensure_database(self, connection_string: str, database_name: str) -> bool:
        """Create the database unless it already exists.

        Concurrent calls for the same name must serialize; an "already
        exists" outcome is a success.

        Args:
            connection_string: Tenant connection string (locates the server)
            database_name: Database to create

        Returns:
            True if the database was created by this call
        """
        ...


@runtime_checkable
class ISchemaMigrator(Protocol):
    """Brings a tenant database schema up to date."""

    async def upgrade(self, connection_string: str) -> None:
        """Apply every pending forward migration to the tenant database."""
        ...


@dataclass(frozen=True)
class SeedUser:
    """Administrator account to create in a fresh tenant database."""

    user_name: str
    email: str
    normalized_email: str
    full_name: str
    phone_number: str | None
    password_hash: str


@runtime_checkable
class ITenantIdentityStore(Protocol):
    """Roles, users and role links inside one tenant database.

    Role names are compared through their normalized (uppercase) form.
    Changes are persisted on ``commit``.
    """

    async def list_normalized_role_names(self) -> set[str]:
        ...

    async def add_roles(self, names: list[str]) -> None:
        ...

    async def get_role_id(self, normalized_name: str) -> str | None:
        ...

    async def get_user_id_by_email(self, normalized_email: str) -> str | None:
        ...

    async def add_user(self, user: SeedUser) -> str:
        """Add a user and return its id."""
        ...

    async def has_user_role(self, user_id: str, role_id: str) -> bool:
        ...

    async def add_user_role(self, user_id: str, role_id: str) -> None:
        ...

    async def commit(self) -> None:
        ...


# (connection_string, tenant_id) -> async context manager yielding a store
IdentityStoreFactory = Callable[
    [str, int],
    AbstractAsyncContextManager[ITenantIdentityStore],
]
