"""Domain probe for tenant provisioning.

Provisioning is an operator-invoked, partially externally visible workflow
with no rollback, so each completed step is recorded. The administrator's
temporary password is emitted here exactly once, when the account is
created; it cannot be recovered afterwards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ProvisioningProbe(Protocol):
    """Domain probe for tenant provisioning operations."""

    def provisioning_started(self, tenant_id: int | None, slug: str) -> None:
        ...

    def database_name_generated(self, slug: str, database_name: str) -> None:
        ...

    def database_created(self, database_name: str) -> None:
        ...

    def database_already_exists(self, database_name: str) -> None:
        ...

    def migrations_applied(self, database_name: str) -> None:
        ...

    def default_roles_seeded(self, database_name: str, roles: list[str]) -> None:
        ...

    def admin_role_missing(self, database_name: str, role: str) -> None:
        ...

    def admin_user_created(
        self,
        database_name: str,
        email: str,
        temporary_password: str,
    ) -> None:
        ...

    def admin_role_linked(self, database_name: str, email: str) -> None:
        ...

    def tenant_activated(self, tenant_id: int | None, slug: str) -> None:
        ...

    def provisioning_completed(
        self,
        tenant_id: int | None,
        slug: str,
        database_name: str,
    ) -> None:
        ...

    def provisioning_failed(self, slug: str, step: str, error: Exception) -> None:
        ...

    def with_context(self, context: ObservationContext) -> ProvisioningProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProvisioningProbe:
    """Default implementation of ProvisioningProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultProvisioningProbe:
        """Create a new probe with observation context bound."""
        return DefaultProvisioningProbe(logger=self._logger, context=context)

    def provisioning_started(self, tenant_id: int | None, slug: str) -> None:
        self._logger.info(
            "tenant_provisioning_started",
            tenant_id=tenant_id,
            slug=slug,
            **self._get_context_kwargs(),
        )

    def database_name_generated(self, slug: str, database_name: str) -> None:
        self._logger.debug(
            "tenant_database_name_generated",
            slug=slug,
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def database_created(self, database_name: str) -> None:
        self._logger.info(
            "tenant_database_created",
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def database_already_exists(self, database_name: str) -> None:
        self._logger.info(
            "tenant_database_already_exists",
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def migrations_applied(self, database_name: str) -> None:
        self._logger.info(
            "tenant_migrations_applied",
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def default_roles_seeded(self, database_name: str, roles: list[str]) -> None:
        self._logger.info(
            "tenant_default_roles_seeded",
            database_name=database_name,
            roles=roles,
            **self._get_context_kwargs(),
        )

    def admin_role_missing(self, database_name: str, role: str) -> None:
        self._logger.warning(
            "tenant_admin_role_missing",
            database_name=database_name,
            role=role,
            message="Administrator seeding skipped; re-run provisioning to complete it",
            **self._get_context_kwargs(),
        )

    def admin_user_created(
        self,
        database_name: str,
        email: str,
        temporary_password: str,
    ) -> None:
        self._logger.warning(
            "tenant_admin_user_created",
            database_name=database_name,
            email=email,
            temporary_password=temporary_password,
            message="Relay the temporary password to the tenant administrator; it is not stored",
            **self._get_context_kwargs(),
        )

    def admin_role_linked(self, database_name: str, email: str) -> None:
        self._logger.info(
            "tenant_admin_role_linked",
            database_name=database_name,
            email=email,
            **self._get_context_kwargs(),
        )

    def tenant_activated(self, tenant_id: int | None, slug: str) -> None:
        self._logger.info(
            "tenant_activated",
            tenant_id=tenant_id,
            slug=slug,
            **self._get_context_kwargs(),
        )

    def provisioning_completed(
        self,
        tenant_id: int | None,
        slug: str,
        database_name: str,
    ) -> None:
        self._logger.info(
            "tenant_provisioning_completed",
            tenant_id=tenant_id,
            slug=slug,
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def provisioning_failed(self, slug: str, step: str, error: Exception) -> None:
        self._logger.error(
            "tenant_provisioning_failed",
            slug=slug,
            step=step,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
