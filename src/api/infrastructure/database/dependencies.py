"""Database dependency injection for FastAPI.

Provides the control-plane session used by the tenant catalog and a
registry of per-database engines for tenant sessions. Tenant sessions are
opened against whatever connection the connection resolver picks for the
current request and are scoped to the resolved tenant for row filtering.

One pooled engine is kept per distinct tenant connection URL and is only
disposed by ``close_database_connections`` at shutdown, so the number of
open pools grows with the number of tenant databases served by this
process. That suits deployments with a bounded tenant count; serving an
unbounded set of tenants would need an eviction policy.
"""

from __future__ import annotations

import threading
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

# Registers the tenant row-filtering session events
import infrastructure.database.tenant_filter  # noqa: F401
from infrastructure.database.engines import create_tenant_engine, create_write_engine
from infrastructure.database.tenant_filter import bind_session_to_tenant
from infrastructure.observability import DefaultConnectionProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe = DefaultConnectionProbe()

# Control-plane engine (created on first use)
_write_engine: AsyncEngine | None = None
_write_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Tenant engines keyed by rendered connection URL
_tenant_sessionmakers: dict[str, async_sessionmaker[AsyncSession]] = {}

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_write_engine() -> AsyncEngine:
    """Get the control-plane database engine (singleton).

    Creates engine on first call and caches for subsequent calls.
    Uses double-check locking for thread-safe initialization.

    Returns:
        Configured async engine for the control plane
    """
    global _write_engine, _write_sessionmaker
    if _write_engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _write_engine is None:
                settings = get_database_settings()
                _write_engine = create_write_engine(settings)
                _write_sessionmaker = async_sessionmaker(
                    _write_engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _probe.engine_created(host=settings.host, database=settings.database)
    return _write_engine


def get_tenant_sessionmaker(connection_string: str) -> async_sessionmaker[AsyncSession]:
    """Get the sessionmaker for a tenant database, creating its engine once.

    Args:
        connection_string: Connection URL chosen by the connection resolver

    Returns:
        Sessionmaker bound to the engine for that URL

    Raises:
        DatabaseConfigurationError: If the connection string is empty or malformed
    """
    sessionmaker = _tenant_sessionmakers.get(connection_string)
    if sessionmaker is None:
        with _engine_lock:
            sessionmaker = _tenant_sessionmakers.get(connection_string)
            if sessionmaker is None:
                try:
                    engine = create_tenant_engine(connection_string)
                except Exception as e:
                    _probe.engine_creation_failed(e)
                    raise
                sessionmaker = async_sessionmaker(
                    engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _tenant_sessionmakers[connection_string] = sessionmaker
                _probe.engine_created(
                    host=engine.url.host,
                    database=engine.url.database,
                )
    return sessionmaker


@asynccontextmanager
async def open_write_session() -> AsyncIterator[AsyncSession]:
    """Open a control-plane session outside dependency injection.

    Used by the tenant resolution middleware, which runs before routing.
    """
    get_write_engine()
    assert _write_sessionmaker is not None

    async with _write_sessionmaker() as session:
        yield session


async def get_write_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a control-plane session (FastAPI dependency).

    The session is configured to NOT auto-commit. Callers must explicitly
    manage transactions using `async with session.begin()`.

    Yields:
        AsyncSession for control-plane database operations
    """
    async with open_write_session() as session:
        yield session


@asynccontextmanager
async def open_tenant_session(
    connection_string: str,
    tenant_id: int | None = None,
) -> AsyncIterator[AsyncSession]:
    """Open a session on a tenant database.

    Args:
        connection_string: Connection URL for the tenant database
        tenant_id: Tenant to scope row filtering to; None leaves rows unfiltered

    Yields:
        AsyncSession, closed on exit
    """
    sessionmaker = get_tenant_sessionmaker(connection_string)
    async with sessionmaker() as session:
        bind_session_to_tenant(session, tenant_id)
        yield session


async def close_database_connections() -> None:
    """Close all database engine connections.

    Should be called on application shutdown to properly cleanup connections.
    Also resets sessionmakers to allow reinitialization.
    """
    global _write_engine, _write_sessionmaker

    if _write_engine is not None:
        await _write_engine.dispose()
        _probe.pool_closed(database=_write_engine.url.database)
        _write_engine = None
        _write_sessionmaker = None

    sessionmakers = list(_tenant_sessionmakers.values())
    _tenant_sessionmakers.clear()
    for sessionmaker in sessionmakers:
        engine = sessionmaker.kw["bind"]
        await engine.dispose()
        _probe.pool_closed(database=engine.url.database)
