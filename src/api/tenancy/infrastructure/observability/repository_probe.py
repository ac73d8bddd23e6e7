"""Domain probes for tenancy repository operations.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events related to tenant catalog, membership and
user directory persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: int, slug: str) -> None:
        """Record that a tenant was successfully saved."""
        ...

    def tenant_retrieved(self, tenant_id: int) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_not_found(self, lookup: str) -> None:
        """Record that a tenant lookup found nothing."""
        ...

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        ...

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate slug was detected."""
        ...

    def duplicate_database_name(self, database_name: str) -> None:
        """Record that a duplicate database name was detected."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class MembershipRepositoryProbe(Protocol):
    """Domain probe for tenant membership repository operations."""

    def membership_saved(self, tenant_id: int, user_id: str, active: bool) -> None:
        """Record that a membership was inserted or updated."""
        ...

    def memberships_listed(self, tenant_id: int, count: int) -> None:
        """Record that the memberships of a tenant were listed."""
        ...

    def with_context(self, context: ObservationContext) -> MembershipRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class UserRepositoryProbe(Protocol):
    """Domain probe for control-plane user directory operations."""

    def user_tenant_assigned(self, user_id: str, tenant_id: int) -> None:
        """Record that a user's permanent tenant was set."""
        ...

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class _ContextualProbe:
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


class DefaultTenantRepositoryProbe(_ContextualProbe):
    """Default implementation of TenantRepositoryProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRepositoryProbe(logger=self._logger, context=context)

    def tenant_saved(self, tenant_id: int, slug: str) -> None:
        """Record that a tenant was successfully saved."""
        self._logger.info(
            "tenant_saved",
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

    def tenant_not_found(self, lookup: str) -> None:
        """Record that a tenant lookup found nothing."""
        self._logger.debug(
            "tenant_not_found",
            lookup=lookup,
            **self._get_context_kwargs(),
        )

    def tenants_listed(self, count: int) -> None:
        """Record that tenants were listed."""
        self._logger.debug(
            "tenants_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant_slug(self, slug: str) -> None:
        """Record that a duplicate slug was detected."""
        self._logger.warning(
            "duplicate_tenant_slug",
            slug=slug,
            **self._get_context_kwargs(),
        )

    def duplicate_database_name(self, database_name: str) -> None:
        """Record that a duplicate database name was detected."""
        self._logger.warning(
            "duplicate_database_name",
            database_name=database_name,
            **self._get_context_kwargs(),
        )


class DefaultMembershipRepositoryProbe(_ContextualProbe):
    """Default implementation of MembershipRepositoryProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultMembershipRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultMembershipRepositoryProbe(logger=self._logger, context=context)

    def membership_saved(self, tenant_id: int, user_id: str, active: bool) -> None:
        """Record that a membership was inserted or updated."""
        self._logger.info(
            "membership_saved",
            tenant_id=tenant_id,
            user_id=user_id,
            active=active,
            **self._get_context_kwargs(),
        )

    def memberships_listed(self, tenant_id: int, count: int) -> None:
        """Record that the memberships of a tenant were listed."""
        self._logger.debug(
            "memberships_listed",
            tenant_id=tenant_id,
            count=count,
            **self._get_context_kwargs(),
        )


class DefaultUserRepositoryProbe(_ContextualProbe):
    """Default implementation of UserRepositoryProbe using structlog."""

    def with_context(self, context: ObservationContext) -> DefaultUserRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserRepositoryProbe(logger=self._logger, context=context)

    def user_tenant_assigned(self, user_id: str, tenant_id: int) -> None:
        """Record that a user's permanent tenant was set."""
        self._logger.info(
            "user_tenant_assigned",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, user_id: str) -> None:
        """Record that a user was not found."""
        self._logger.debug(
            "user_not_found",
            user_id=user_id,
            **self._get_context_kwargs(),
        )
