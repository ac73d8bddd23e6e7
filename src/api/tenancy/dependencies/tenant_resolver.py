"""Request-time tenant resolution.

Determines which tenant an inbound request belongs to. Hints are tried in
order, first match wins:

1. ``X-Tenant-Id`` header carrying a numeric tenant id
2. a tenant slug: the ``X-Tenant`` header when present, otherwise the
   leftmost label of a genuine subdomain host
3. for authenticated callers, the ``tenant_slug`` claim, then the user's
   permanent tenant association

Only tenants in an accessible status (active, provisioning) are returned;
a hint matching any other tenant counts as unmatched and the next hint is
tried. An unmatched claim falls through to the permanent association.
The resolver never mutates state and is safe to call repeatedly.
"""

from __future__ import annotations

import ipaddress
from contextlib import asynccontextmanager
from typing import AsyncIterator

from starlette.requests import HTTPConnection

from infrastructure.database.dependencies import open_write_session
from infrastructure.settings import TenancySettings, get_tenancy_settings
from shared_kernel.auth import ClaimsIdentity, ClaimTypes
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import TenantId, UserId, normalize_slug
from tenancy.infrastructure.tenant_repository import TenantRepository
from tenancy.ports.repositories import ITenantRepository


def extract_host_slug(host: str | None) -> str | None:
    """Return the subdomain slug candidate of a host name, if it has one.

    Only hosts with at least three dot-separated labels qualify; ``localhost``
    and raw IP addresses never do.

    Examples:
        >>> extract_host_slug("tenant1.app.example.com")
        'tenant1'
        >>> extract_host_slug("example.com") is None
        True
    """
    if not host:
        return None

    hostname = host.strip().lower().rstrip(".")
    if not hostname or hostname == "localhost":
        return None

    try:
        ipaddress.ip_address(hostname.strip("[]"))
        return None
    except ValueError:
        pass

    labels = hostname.split(".")
    if len(labels) < 3 or not labels[0]:
        return None
    return labels[0]


class TenantResolver:
    """Resolves the tenant of a request from headers, host and identity."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        settings: TenancySettings,
        probe: TenantContextProbe | None = None,
    ) -> None:
        self._tenants = tenant_repository
        self._settings = settings
        self._probe = probe or DefaultTenantContextProbe()

    async def resolve(
        self,
        request: HTTPConnection,
        identity: ClaimsIdentity | None = None,
    ) -> Tenant | None:
        """Resolve the tenant a request belongs to.

        A hint naming an unknown or inaccessible tenant is skipped and the
        next hint is tried.

        Args:
            request: The inbound request (or websocket) connection
            identity: The caller's identity, if authentication ran

        Returns:
            The matched accessible tenant, or None
        """
        tenant = await self._resolve_from_request(request)
        if tenant is None and identity is not None and identity.is_authenticated:
            tenant = await self._resolve_from_identity(identity)
        return tenant

    async def _resolve_from_request(self, request: HTTPConnection) -> Tenant | None:
        raw_id = request.headers.get(self._settings.tenant_id_header)
        if raw_id:
            tenant = await self._find_by_id(raw_id)
            if tenant is not None:
                return tenant

        source = "header"
        candidate = request.headers.get(self._settings.tenant_header)
        if candidate is not None and not candidate.strip():
            candidate = None
        if candidate is None:
            source = "host"
            candidate = extract_host_slug(request.url.hostname)
        if candidate is None:
            return None

        return await self._find_by_slug(candidate, source)

    async def _resolve_from_identity(self, identity: ClaimsIdentity) -> Tenant | None:
        claimed_slug = identity.find_first(ClaimTypes.TENANT_SLUG)
        if claimed_slug:
            tenant = await self._find_by_slug(claimed_slug, "claim")
            if tenant is not None:
                return tenant

        if not identity.user_id:
            return None

        source = "user"
        tenant = await self._tenants.get_for_user(UserId(value=identity.user_id))
        if tenant is None:
            self._probe.tenant_hint_unmatched(identity.user_id, source)
            return None
        return self._accepted(tenant, source)

    async def _find_by_id(self, raw_id: str) -> Tenant | None:
        source = "tenant_id_header"
        try:
            tenant_id = TenantId.from_string(raw_id)
        except ValueError:
            self._probe.tenant_hint_unmatched(raw_id, source)
            return None

        tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_hint_unmatched(raw_id, source)
            return None
        return self._accepted(tenant, source)

    async def _find_by_slug(self, candidate: str, source: str) -> Tenant | None:
        slug = normalize_slug(candidate)
        tenant = await self._tenants.get_by_slug(slug)
        if tenant is None:
            self._probe.tenant_hint_unmatched(slug, source)
            return None
        return self._accepted(tenant, source)

    def _accepted(self, tenant: Tenant, source: str) -> Tenant | None:
        """Return the tenant if it may serve requests, otherwise None."""
        if tenant.id is None:
            return None

        if not tenant.is_accessible:
            self._probe.tenant_inaccessible(
                tenant_id=int(tenant.id),
                slug=tenant.slug,
                status=str(tenant.status),
            )
            return None

        self._probe.tenant_resolved(int(tenant.id), tenant.slug, source)
        return tenant


@asynccontextmanager
async def open_tenant_resolver() -> AsyncIterator[TenantResolver]:
    """Build a resolver over a fresh control-plane session.

    Resolution runs in middleware, outside FastAPI dependency injection, so
    it opens and closes its own session for each request.
    """
    async with open_write_session() as session:
        yield TenantResolver(
            tenant_repository=TenantRepository(session),
            settings=get_tenancy_settings(),
        )
