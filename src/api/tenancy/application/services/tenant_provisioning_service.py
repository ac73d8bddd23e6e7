"""Tenant provisioning application service.

Creates and initializes a tenant's isolated database: connection
preparation, database creation, schema migration, default-data seeding
and activation, strictly in that order.

Every step checks for existing state before acting, so a failed or
cancelled run leaves work that a later run completes. Nothing is rolled
back.
"""

from __future__ import annotations

import asyncio
import re
from typing import Awaitable, NoReturn, TypeVar

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from ulid import ULID

from infrastructure.settings import ProvisioningSettings
from tenancy.application.observability import (
    DefaultProvisioningProbe,
    ProvisioningProbe,
)
from tenancy.application.security import generate_temporary_password, hash_password
from tenancy.domain.aggregates import Tenant
from tenancy.ports.exceptions import ProvisioningConfigurationError, ProvisioningError
from tenancy.ports.provisioning import (
    IDatabaseAdministrator,
    IdentityStoreFactory,
    ISchemaMigrator,
    SeedUser,
)

T = TypeVar("T")

_UNSAFE_DATABASE_CHARACTERS = re.compile(r"[^a-zA-Z0-9_]")
_SLUG_PLACEHOLDER = re.compile(re.escape("{SLUG}"), re.IGNORECASE)
_DB_PLACEHOLDER = re.compile(re.escape("{DB}"), re.IGNORECASE)


def generate_database_name(slug: str, prefix: str) -> str:
    """Derive a database name from a tenant slug.

    Characters other than letters, digits and underscores become
    underscores, surrounding underscores are trimmed, and an empty result
    falls back to a random identifier. The prefix is prepended and the
    whole name lowercased.
    """
    sanitized = _UNSAFE_DATABASE_CHARACTERS.sub("_", slug).strip("_")
    if not sanitized:
        # The trailing ULID characters are its random component
        sanitized = str(ULID())[-8:]
    return f"{prefix}{sanitized}".lower()


def render_connection_string(template: str, slug: str, database_name: str) -> str:
    """Substitute ``{SLUG}`` and ``{DB}`` placeholders, case-insensitively."""
    rendered = _SLUG_PLACEHOLDER.sub(lambda _: slug, template)
    return _DB_PLACEHOLDER.sub(lambda _: database_name, rendered)


class TenantProvisioningService:
    """Application service that provisions tenant databases.

    Steps run sequentially within one call; calls for different tenants
    are independent and may run concurrently.
    """

    def __init__(
        self,
        settings: ProvisioningSettings,
        database_administrator: IDatabaseAdministrator,
        schema_migrator: ISchemaMigrator,
        identity_store_factory: IdentityStoreFactory,
        probe: ProvisioningProbe | None = None,
    ):
        """Initialize the provisioning service.

        Args:
            settings: Provisioning options (template, prefix, admin database,
                auto-activation, default roles)
            database_administrator: Creates databases on the server
            schema_migrator: Applies tenant schema migrations
            identity_store_factory: Opens the identity store of a tenant database
            probe: Optional domain probe for observability
        """
        self._settings = settings
        self._database_administrator = database_administrator
        self._schema_migrator = schema_migrator
        self._identity_store_factory = identity_store_factory
        self._probe = probe or DefaultProvisioningProbe()

    async def provision(self, tenant: Tenant) -> None:
        """Provision the tenant's database and seed its defaults.

        The tenant aggregate is updated in place (database name, connection
        string and, with auto-activation, status); persisting it is the
        caller's job.

        Args:
            tenant: A saved tenant

        Raises:
            ValueError: If the tenant has not been saved yet
            ProvisioningConfigurationError: If no connection string can be built
            ProvisioningError: If database creation, migration or seeding fails
        """
        if tenant.id is None:
            raise ValueError("Tenant must be saved before it can be provisioned")

        self._probe.provisioning_started(tenant_id=int(tenant.id), slug=tenant.slug)

        database_name, connection_string = self.prepare_connection(tenant)
        tenant.assign_infrastructure(database_name, connection_string)

        created = await self._run_step(
            "database",
            tenant,
            self._database_administrator.ensure_database(connection_string, database_name),
        )
        if created:
            self._probe.database_created(database_name)
        else:
            self._probe.database_already_exists(database_name)

        await self._run_step(
            "migration",
            tenant,
            self._schema_migrator.upgrade(connection_string),
        )
        self._probe.migrations_applied(database_name)

        await self._run_step(
            "seeding",
            tenant,
            self._seed_defaults(tenant, connection_string, database_name),
        )

        if self._settings.auto_activate_tenants:
            tenant.activate()
            self._probe.tenant_activated(tenant_id=int(tenant.id), slug=tenant.slug)

        self._probe.provisioning_completed(
            tenant_id=int(tenant.id),
            slug=tenant.slug,
            database_name=database_name,
        )

    def prepare_connection(self, tenant: Tenant) -> tuple[str, str]:
        """Work out the database name and connection string for a tenant.

        An explicit connection string decides the database. Otherwise the
        name is the tenant's own or one derived from the slug, and the
        connection string is rendered from the template. Either way the
        connection string must target the returned database name. The
        tenant is not modified.

        Raises:
            ProvisioningConfigurationError: If no connection string can be
                built, or it targets a different database
        """
        database_name = tenant.database_name
        connection_string = tenant.connection_string

        if not connection_string:
            template = self._settings.template_connection_string
            if not template:
                self._fail_configuration(
                    tenant,
                    "Template connection string is not configured for multi-tenancy",
                )
            if not database_name:
                database_name = generate_database_name(
                    tenant.slug, self._settings.database_prefix
                )
                self._probe.database_name_generated(tenant.slug, database_name)
            connection_string = render_connection_string(
                template, tenant.slug, database_name
            )

        target = self._target_database(tenant, connection_string)
        if database_name and database_name.lower() != target.lower():
            self._fail_configuration(
                tenant,
                f"Connection string targets database '{target}' "
                f"but the tenant database is '{database_name}'",
            )

        return database_name or target, connection_string

    def _target_database(self, tenant: Tenant, connection_string: str) -> str:
        try:
            database = make_url(connection_string).database
        except ArgumentError:
            database = None
        if not database:
            self._fail_configuration(
                tenant, "Tenant connection string does not name a database"
            )
        return database

    def _fail_configuration(self, tenant: Tenant, message: str) -> NoReturn:
        error = ProvisioningConfigurationError(message)
        self._probe.provisioning_failed(tenant.slug, "connection", error)
        raise error

    async def _run_step(self, step: str, tenant: Tenant, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except ProvisioningConfigurationError:
            raise
        except Exception as e:
            self._probe.provisioning_failed(tenant.slug, step, e)
            raise ProvisioningError(step=step, tenant_slug=tenant.slug, message=str(e)) from e

    async def _seed_defaults(
        self,
        tenant: Tenant,
        connection_string: str,
        database_name: str,
    ) -> None:
        admin_role = self._settings.admin_role.upper()

        async with self._identity_store_factory(
            connection_string, int(tenant.id)
        ) as store:
            existing_roles = await store.list_normalized_role_names()
            missing_roles = [
                name
                for name in self._settings.default_roles
                if name.upper() not in existing_roles
            ]
            if missing_roles:
                await store.add_roles(missing_roles)
                await store.commit()
                self._probe.default_roles_seeded(database_name, missing_roles)

            admin_role_id = await store.get_role_id(admin_role)
            if admin_role_id is None:
                self._probe.admin_role_missing(database_name, self._settings.admin_role)
                return

            email = tenant.primary_contact_email or f"admin@{tenant.slug}.local"
            email = email.strip().lower()
            normalized_email = email.upper()

            user_id = await store.get_user_id_by_email(normalized_email)
            if user_id is None:
                password = generate_temporary_password(
                    self._settings.temporary_password_length
                )
                password_hash = await asyncio.to_thread(hash_password, password)
                user_id = await store.add_user(
                    SeedUser(
                        user_name=email,
                        email=email,
                        normalized_email=normalized_email,
                        full_name=tenant.primary_contact_name or f"{tenant.name} Admin",
                        phone_number=tenant.primary_contact_phone,
                        password_hash=password_hash,
                    )
                )
                await store.commit()
                self._probe.admin_user_created(database_name, email, password)

            if not await store.has_user_role(user_id, admin_role_id):
                await store.add_user_role(user_id, admin_role_id)
                await store.commit()
                self._probe.admin_role_linked(database_name, email)
