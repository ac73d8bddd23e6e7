"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.authentication import AuthenticationMiddleware

from infrastructure.authentication import BearerTokenBackend, on_authentication_error
from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability.startup_probe import DefaultStartupProbe
from infrastructure.settings import (
    get_auth_settings,
    get_provisioning_settings,
    get_settings,
    get_tenancy_settings,
)
from infrastructure.version import __version__
from tenancy.presentation import router as tenancy_router
from tenancy.presentation.middleware import TenantResolutionMiddleware


@asynccontextmanager
async def pillar_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    configure_logging(debug=get_settings().debug)
    probe = DefaultStartupProbe()

    if not get_provisioning_settings().template_connection_string:
        probe.provisioning_template_missing()
    probe.application_started(
        version=__version__,
        public_paths=get_tenancy_settings().public_paths,
    )

    yield

    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title="Pillar API",
    description="Multi-tenant resolution and provisioning for Pillar",
    version=__version__,
    lifespan=pillar_lifespan,
)

# Middleware added last runs first: authentication populates request.user
# before tenant resolution reads it
app.add_middleware(TenantResolutionMiddleware)
app.add_middleware(
    AuthenticationMiddleware,
    backend=BearerTokenBackend.from_settings(get_auth_settings()),
    on_error=on_authentication_error,
)

# Include Tenancy bounded context routes
app.include_router(tenancy_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
