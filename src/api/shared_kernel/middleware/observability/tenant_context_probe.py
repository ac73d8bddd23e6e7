"""Domain probe for tenant context resolution.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events while a request is bound to a tenant: which hint
matched, why resolution failed, and what the middleware did about it.
Denied requests get a generic response, so these events are the only
record of the real cause.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantContextProbe(Protocol):
    """Domain probe for tenant context resolution operations."""

    def tenant_resolved(self, tenant_id: int, slug: str, source: str) -> None:
        """Record that a tenant was resolved from the given hint source."""
        ...

    def tenant_hint_unmatched(self, hint: str, source: str) -> None:
        """Record that a tenant hint did not match any tenant."""
        ...

    def tenant_inaccessible(self, tenant_id: int, slug: str, status: str) -> None:
        """Record that a matched tenant is not in an accessible status."""
        ...

    def tenant_not_resolved(self, path: str) -> None:
        """Record that no resolution method produced a tenant."""
        ...

    def tenant_resolution_failed(self, path: str, error: Exception) -> None:
        """Record that resolution raised and was treated as a failure."""
        ...

    def tenant_access_denied(self, path: str) -> None:
        """Record that a non-public request was denied for lack of a tenant."""
        ...

    def public_path_without_tenant(self, path: str) -> None:
        """Record that a public request continued without a tenant."""
        ...

    def tenant_claims_added(self, user_id: str | None, tenant_id: int) -> None:
        """Record that tenant claims were appended to the caller's identity."""
        ...

    def stale_tenant_claim(
        self,
        user_id: str | None,
        claimed_slug: str,
        resolved_slug: str,
    ) -> None:
        """Record that an existing tenant claim disagrees with the resolved tenant."""
        ...

    def with_context(self, context: ObservationContext) -> TenantContextProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantContextProbe:
    """Default implementation of TenantContextProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantContextProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantContextProbe(logger=self._logger, context=context)

    def tenant_resolved(self, tenant_id: int, slug: str, source: str) -> None:
        self._logger.debug(
            "tenant_context_resolved",
            tenant_id=tenant_id,
            tenant_slug=slug,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_hint_unmatched(self, hint: str, source: str) -> None:
        self._logger.debug(
            "tenant_context_hint_unmatched",
            hint=hint,
            source=source,
            **self._get_context_kwargs(),
        )

    def tenant_inaccessible(self, tenant_id: int, slug: str, status: str) -> None:
        self._logger.warning(
            "tenant_context_tenant_inaccessible",
            tenant_id=tenant_id,
            tenant_slug=slug,
            status=status,
            **self._get_context_kwargs(),
        )

    def tenant_not_resolved(self, path: str) -> None:
        self._logger.debug(
            "tenant_context_not_resolved",
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_resolution_failed(self, path: str, error: Exception) -> None:
        self._logger.error(
            "tenant_context_resolution_failed",
            path=path,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def tenant_access_denied(self, path: str) -> None:
        self._logger.warning(
            "tenant_context_access_denied",
            path=path,
            **self._get_context_kwargs(),
        )

    def public_path_without_tenant(self, path: str) -> None:
        self._logger.debug(
            "tenant_context_public_path_without_tenant",
            path=path,
            **self._get_context_kwargs(),
        )

    def tenant_claims_added(self, user_id: str | None, tenant_id: int) -> None:
        self._logger.debug(
            "tenant_context_claims_added",
            user_id=user_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def stale_tenant_claim(
        self,
        user_id: str | None,
        claimed_slug: str,
        resolved_slug: str,
    ) -> None:
        self._logger.warning(
            "tenant_context_stale_claim",
            user_id=user_id,
            claimed_slug=claimed_slug,
            resolved_slug=resolved_slug,
            **self._get_context_kwargs(),
        )
