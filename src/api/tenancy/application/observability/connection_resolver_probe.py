"""Domain probe for per-request connection resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConnectionResolverProbe(Protocol):
    """Domain probe for connection resolution."""

    def connection_string_missing(self, tenant_id: int | None, slug: str | None) -> None:
        """Record that a resolved tenant had no connection string."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionResolverProbe:
    """Default implementation of ConnectionResolverProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultConnectionResolverProbe:
        return DefaultConnectionResolverProbe(logger=self._logger, context=context)

    def connection_string_missing(self, tenant_id: int | None, slug: str | None) -> None:
        self._logger.warning(
            "tenant_connection_string_missing",
            tenant_id=tenant_id,
            slug=slug,
            message="Tenant resolved without connection string; using default database",
            **self._get_context_kwargs(),
        )
