"""Shared request-scoped state for cross-cutting concerns.

The tenant context defined here is populated by the tenancy bounded
context's resolution middleware and read by every other consumer.
"""

from shared_kernel.middleware.tenant_context import ResolvedTenant, TenantContext

__all__ = [
    "ResolvedTenant",
    "TenantContext",
]
