"""Protocol for tenant application service observability.

Defines the interface for domain probes that capture application-level
domain events for tenant service operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantServiceProbe(Protocol):
    """Domain probe for tenant application service operations."""

    def tenant_created(self, tenant_id: int, slug: str) -> None:
        """Record that a tenant was created."""
        ...

    def tenant_retrieved(self, tenant_id: int) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        ...

    def tenant_updated(self, tenant_id: int, slug: str) -> None:
        """Record that a tenant was updated."""
        ...

    def tenant_deleted(self, tenant_id: int) -> None:
        """Record that a tenant was archived."""
        ...

    def tenant_not_found(self, tenant_id: int) -> None:
        """Record that a tenant was not found."""
        ...

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate slug was rejected."""
        ...

    def duplicate_database_name(self, database_name: str) -> None:
        """Record that a duplicate database name was rejected."""
        ...

    def tenant_context_refreshed(self, tenant_id: int) -> None:
        """Record that the current request's context was refreshed after an update."""
        ...

    def member_assigned(self, tenant_id: int, user_id: str, reinstated: bool) -> None:
        """Record that a user was granted access to a tenant."""
        ...

    def member_already_assigned(self, tenant_id: int, user_id: str) -> None:
        """Record that an assignment was a no-op."""
        ...

    def member_revoked(self, tenant_id: int, user_id: str) -> None:
        """Record that a membership was revoked."""
        ...

    def member_not_found(self, tenant_id: int, user_id: str) -> None:
        """Record that a revocation targeted a non-member."""
        ...

    def user_tenants_listed(self, user_id: str, count: int) -> None:
        """Record that the tenants of a user were listed."""
        ...

    def with_context(self, context: ObservationContext) -> TenantServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantServiceProbe:
    """Default implementation of TenantServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantServiceProbe(logger=self._logger, context=context)

    def tenant_created(self, tenant_id: int, slug: str) -> None:
        """Record that a tenant was created."""
        self._logger.info(
            "tenant_created",
            tenant_id=tenant_id,
            slug=slug,
            **self._get_context_kwargs(),
        )

    def tenant_retrieved(self, tenant_id: int) -> None:
        """Record that a tenant was retrieved."""
        self._logger.debug(
            "tenant_retrieved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        self._logger.debug(
            "tenants_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def tenant_updated(self, tenant_id: int, slug: str) -> None:
        """Record that a tenant was updated."""
        self._logger.info(
            "tenant_updated",
            tenant_id=tenant_id,
            slug=slug,
            **self._get_context_kwargs(),
        )

    def tenant_deleted(self, tenant_id: int) -> None:
        """Record that a tenant was archived."""
        self._logger.info(
            "tenant_deleted",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: int) -> None:
        """Record that a tenant was not found."""
        self._logger.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate slug was rejected."""
        self._logger.warning(
            "duplicate_tenant_slug",
            slug=slug,
            **self._get_context_kwargs(),
        )

    def duplicate_database_name(self, database_name: str) -> None:
        """Record that a duplicate database name was rejected."""
        self._logger.warning(
            "duplicate_database_name",
            database_name=database_name,
            **self._get_context_kwargs(),
        )

    def tenant_context_refreshed(self, tenant_id: int) -> None:
        self._logger.debug(
            "tenant_context_refreshed",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def member_assigned(self, tenant_id: int, user_id: str, reinstated: bool) -> None:
        self._logger.info(
            "tenant_member_assigned",
            tenant_id=tenant_id,
            user_id=user_id,
            reinstated=reinstated,
            **self._get_context_kwargs(),
        )

    def member_already_assigned(self, tenant_id: int, user_id: str) -> None:
        self._logger.debug(
            "tenant_member_already_assigned",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def member_revoked(self, tenant_id: int, user_id: str) -> None:
        self._logger.info(
            "tenant_member_revoked",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def member_not_found(self, tenant_id: int, user_id: str) -> None:
        self._logger.debug(
            "tenant_member_not_found",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_tenants_listed(self, user_id: str, count: int) -> None:
        self._logger.debug(
            "user_tenants_listed",
            user_id=user_id,
            count=count,
            **self._get_context_kwargs(),
        )
