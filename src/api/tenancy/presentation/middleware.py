"""Tenant resolution middleware.

Binds every request to a tenant before routing:

    Unresolved -> Resolving -> Resolved | Denied | Cleared

A fresh ``TenantContext`` is created for each request and stored on
``request.state``. When the resolver finds a tenant the context is applied
and tenant claims are appended to the caller's identity. When it finds none,
or raises, the context is cleared and the request is denied with a generic
403 unless its path is public. The real cause is only ever logged.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from infrastructure.settings import TenancySettings, get_tenancy_settings
from shared_kernel.auth import ClaimsIdentity, ClaimTypes
from shared_kernel.middleware.observability import (
    DefaultTenantContextProbe,
    TenantContextProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext
from shared_kernel.observability_context import ObservationContext
from tenancy.dependencies.authentication import get_current_identity
from tenancy.dependencies.tenant_context import TENANT_CONTEXT_STATE_KEY
from tenancy.dependencies.tenant_resolver import TenantResolver, open_tenant_resolver
from tenancy.domain.aggregates import Tenant

ResolverFactory = Callable[[], AbstractAsyncContextManager[TenantResolver]]

ACCESS_DENIED_DETAIL = "Access denied"


def is_public_path(path: str, public_paths: Iterable[str]) -> bool:
    """Check a request path against the public allow-list.

    A public entry matches itself and everything below it, so ``/static``
    covers ``/static/app.css`` but not ``/staticfiles``.
    """
    for public_path in public_paths:
        prefix = public_path.rstrip("/")
        if path == public_path or path == prefix or path.startswith(prefix + "/"):
            return True
    return False


class TenantResolutionMiddleware(BaseHTTPMiddleware):
    """Resolves the request's tenant and enforces fail-closed access.

    Must run after authentication so that ``request.user`` carries the
    caller's claims identity.
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: TenancySettings | None = None,
        resolver_factory: ResolverFactory | None = None,
        probe: TenantContextProbe | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The wrapped ASGI application
            settings: Tenancy settings (public paths); loaded from the
                environment when omitted
            resolver_factory: Opens a TenantResolver for one request
            probe: Optional domain probe for observability
        """
        super().__init__(app)
        self._settings = settings or get_tenancy_settings()
        self._resolver_factory = resolver_factory or open_tenant_resolver
        self._probe = probe or DefaultTenantContextProbe()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = TenantContext()
        setattr(request.state, TENANT_CONTEXT_STATE_KEY, context)
        request.state.tenant = None

        probe = self._probe.with_context(
            ObservationContext(request_id=request.headers.get("X-Request-ID"))
        )
        identity = get_current_identity(request)
        path = request.url.path

        tenant: Tenant | None = None
        try:
            async with self._resolver_factory() as resolver:
                tenant = await resolver.resolve(request, identity)
            if tenant is None:
                probe.tenant_not_resolved(path)
        except Exception as e:
            probe.tenant_resolution_failed(path, e)
            tenant = None

        if tenant is not None:
            context.apply_tenant(tenant)
            request.state.tenant = tenant
            self._augment_claims(identity, tenant, probe)
            return await call_next(request)

        context.reset()
        if is_public_path(path, self._settings.public_paths):
            probe.public_path_without_tenant(path)
            return await call_next(request)

        probe.tenant_access_denied(path)
        return JSONResponse({"detail": ACCESS_DENIED_DETAIL}, status_code=403)

    @staticmethod
    def _augment_claims(
        identity: ClaimsIdentity,
        tenant: Tenant,
        probe: TenantContextProbe,
    ) -> None:
        if not identity.is_authenticated:
            return

        # Existing tenant claims are kept as issued
        claimed_slug = identity.find_first(ClaimTypes.TENANT_SLUG)
        if claimed_slug is not None and claimed_slug != tenant.slug:
            probe.stale_tenant_claim(identity.user_id, claimed_slug, tenant.slug)

        added_id = identity.add_claim(ClaimTypes.TENANT_ID, str(tenant.id))
        added_slug = identity.add_claim(ClaimTypes.TENANT_SLUG, tenant.slug)
        if added_id or added_slug:
            probe.tenant_claims_added(identity.user_id, int(tenant.id))
