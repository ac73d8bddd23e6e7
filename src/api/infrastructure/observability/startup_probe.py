"""Domain probe for application startup and lifecycle events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def application_started(self, version: str, public_paths: list[str]) -> None:
        """Record that the application finished starting."""
        ...

    def provisioning_template_missing(self) -> None:
        """Record that tenant provisioning is not configured."""
        ...

    def application_stopped(self) -> None:
        """Record that the application shut down and released connections."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def application_started(self, version: str, public_paths: list[str]) -> None:
        """Record that the application finished starting."""
        self._logger.info(
            "application_started",
            version=version,
            public_paths=public_paths,
            **self._get_context_kwargs(),
        )

    def provisioning_template_missing(self) -> None:
        """Record that tenant provisioning is not configured."""
        self._logger.warning(
            "provisioning_template_missing",
            message=(
                "PILLAR_PROVISIONING_TEMPLATE_CONNECTION_STRING is not set; "
                "tenants without an explicit connection string cannot be provisioned"
            ),
            **self._get_context_kwargs(),
        )

    def application_stopped(self) -> None:
        """Record that the application shut down and released connections."""
        self._logger.info("application_stopped", **self._get_context_kwargs())
