"""Connection resolution for the current request.

Translates the request's tenant context into the database connection the
data layer should use.
"""

from __future__ import annotations

from tenancy.application.observability import (
    ConnectionResolverProbe,
    DefaultConnectionResolverProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext


class TenantConnectionResolver:
    """Picks the connection string for the current request.

    - resolved tenant with an explicit connection string: that string
    - resolved tenant without one: warn and use the default connection
    - unresolved: the default connection

    The default connection may be empty. That is reported by the data
    layer when it tries to connect, not hidden here.
    """

    def __init__(
        self,
        context: TenantContext,
        default_connection_string: str,
        probe: ConnectionResolverProbe | None = None,
    ):
        self._context = context
        self._default_connection_string = default_connection_string
        self._probe = probe or DefaultConnectionResolverProbe()

    def current_connection_string(self) -> str:
        """Return the connection string for the current tenant context."""
        if not self._context.is_resolved:
            return self._default_connection_string

        if self._context.connection_string:
            return self._context.connection_string

        self._probe.connection_string_missing(
            tenant_id=self._context.tenant_id,
            slug=self._context.slug,
        )
        return self._default_connection_string
