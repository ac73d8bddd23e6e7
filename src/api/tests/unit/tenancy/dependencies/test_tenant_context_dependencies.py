"""Unit tests for tenant context dependencies."""

from typing import Annotated
from unittest.mock import patch

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from infrastructure.settings import DatabaseSettings, get_database_settings
from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.connection_resolver import TenantConnectionResolver
from tenancy.dependencies.tenant_context import (
    TENANT_CONTEXT_STATE_KEY,
    get_connection_resolver,
    get_tenant_context,
    get_tenant_session,
)

TENANT_URL = "postgresql+asyncpg://pillar@db/pillar_acme"


def _app(make_tenant=None) -> FastAPI:
    app = FastAPI()

    if make_tenant is not None:

        @app.middleware("http")
        async def bind_tenant(request: Request, call_next):
            context = TenantContext()
            context.apply_tenant(make_tenant(tenant_id=5, connection_string=TENANT_URL))
            setattr(request.state, TENANT_CONTEXT_STATE_KEY, context)
            return await call_next(request)

    @app.get("/context")
    def read_context(
        first: Annotated[TenantContext, Depends(get_tenant_context)],
        resolver: Annotated[TenantConnectionResolver, Depends(get_connection_resolver)],
        request: Request,
    ):
        second = get_tenant_context(request)
        return {
            "same_instance": first is second,
            "tenant_id": first.tenant_id,
            "connection": resolver.current_connection_string(),
        }

    app.dependency_overrides[get_database_settings] = lambda: DatabaseSettings(
        url=None, host="db", database="pillar", username="pillar", password="secret"
    )
    return app


class TestGetTenantContext:
    def test_unresolved_context_is_created_once_per_request(self):
        response = TestClient(_app()).get("/context")

        body = response.json()
        assert body["same_instance"] is True
        assert body["tenant_id"] is None
        assert body["connection"].endswith("/pillar")

    def test_returns_context_bound_by_middleware(self, make_tenant):
        response = TestClient(_app(make_tenant)).get("/context")

        body = response.json()
        assert body["tenant_id"] == 5
        assert body["connection"] == TENANT_URL


class TestGetTenantSession:
    def test_opens_session_for_resolved_tenant(self, make_tenant):
        app = _app(make_tenant)
        opened = []

        class _Session:
            pass

        class _OpenSession:
            def __init__(self, connection_string, tenant_id):
                opened.append((connection_string, tenant_id))

            async def __aenter__(self):
                return _Session()

            async def __aexit__(self, *exc):
                return False

        @app.get("/session")
        async def read_session(session=Depends(get_tenant_session)):
            return {"session": type(session).__name__}

        with patch(
            "tenancy.dependencies.tenant_context.open_tenant_session", _OpenSession
        ):
            response = TestClient(app).get("/session")

        assert response.json() == {"session": "_Session"}
        assert opened == [(TENANT_URL, 5)]
