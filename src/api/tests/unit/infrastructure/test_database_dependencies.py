"""Unit tests for database dependency injection.

Tests the providers for the control-plane session and tenant sessions.
No connection is opened: sessions connect lazily on first statement.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from infrastructure.database.dependencies import (
    close_database_connections,
    get_tenant_sessionmaker,
    get_write_engine,
    get_write_session,
    open_tenant_session,
)
from infrastructure.database.exceptions import DatabaseConfigurationError
from infrastructure.database.tenant_filter import TENANT_ID_KEY

TENANT_URL = "postgresql+asyncpg://pillar:secret@db:5432/pillar_acme"


@pytest_asyncio.fixture(autouse=True)
async def dispose_engines():
    """Dispose cached engines after each test."""
    yield
    await close_database_connections()


@pytest.mark.asyncio
async def test_get_write_engine():
    """Test that get_write_engine returns an AsyncEngine."""
    engine = get_write_engine()

    assert isinstance(engine, AsyncEngine)
    assert engine.url.drivername == "postgresql+asyncpg"


@pytest.mark.asyncio
async def test_write_engine_is_singleton():
    assert get_write_engine() is get_write_engine()


@pytest.mark.asyncio
async def test_get_write_session():
    """Test that get_write_session yields an unscoped AsyncSession."""
    async for session in get_write_session():
        assert isinstance(session, AsyncSession)
        assert session.bind.sync_engine is get_write_engine().sync_engine
        assert TENANT_ID_KEY not in session.info


@pytest.mark.asyncio
async def test_tenant_sessionmaker_is_cached_per_connection_string():
    first = get_tenant_sessionmaker(TENANT_URL)
    second = get_tenant_sessionmaker(TENANT_URL)
    other = get_tenant_sessionmaker(TENANT_URL.replace("pillar_acme", "pillar_globex"))

    assert first is second
    assert first is not other


@pytest.mark.asyncio
async def test_tenant_session_is_scoped_to_tenant():
    async with open_tenant_session(TENANT_URL, tenant_id=7) as session:
        assert session.info[TENANT_ID_KEY] == 7
        assert session.bind.url.database == "pillar_acme"


@pytest.mark.asyncio
async def test_tenant_session_without_tenant_is_unscoped():
    async with open_tenant_session(TENANT_URL) as session:
        assert TENANT_ID_KEY not in session.info


@pytest.mark.asyncio
async def test_empty_connection_string_raises_configuration_error():
    with pytest.raises(DatabaseConfigurationError):
        async with open_tenant_session(""):
            pass


@pytest.mark.asyncio
async def test_close_database_connections_resets_engines():
    engine = get_write_engine()
    get_tenant_sessionmaker(TENANT_URL)

    await close_database_connections()

    assert get_write_engine() is not engine


@pytest.mark.asyncio
async def test_close_database_connections_releases_tenant_engines():
    acme = get_tenant_sessionmaker(TENANT_URL)
    globex = get_tenant_sessionmaker(TENANT_URL.replace("pillar_acme", "pillar_globex"))

    await close_database_connections()

    assert get_tenant_sessionmaker(TENANT_URL) is not acme
    assert (
        get_tenant_sessionmaker(TENANT_URL.replace("pillar_acme", "pillar_globex"))
        is not globex
    )
