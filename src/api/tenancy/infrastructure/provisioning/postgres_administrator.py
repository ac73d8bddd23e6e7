"""PostgreSQL implementation of IDatabaseAdministrator."""

from __future__ import annotations

from typing import Callable

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.engines import create_admin_engine
from infrastructure.database.locks import advisory_lock
from tenancy.ports.provisioning import IDatabaseAdministrator

# SQLSTATE raised by CREATE DATABASE when the name is taken
DUPLICATE_DATABASE = "42P04"


def _sqlstate(error: DBAPIError) -> str | None:
    orig = error.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


class PostgresDatabaseAdministrator(IDatabaseAdministrator):
    """Creates tenant databases through the server's maintenance database.

    Creation of a given name is serialized across processes with an
    advisory lock keyed on the lowercase database name. The existence
    check runs under the lock, and a concurrent creation that still slips
    through (SQLSTATE 42P04) counts as success.
    """

    def __init__(
        self,
        admin_database: str = "postgres",
        engine_factory: Callable[[str, str], AsyncEngine] = create_admin_engine,
    ) -> None:
        """Initialize the administrator.

        Args:
            admin_database: Maintenance database to connect to
            engine_factory: Builds an AUTOCOMMIT engine from
                (connection_string, admin_database)
        """
        self._admin_database = admin_database
        self._engine_factory = engine_factory

    async def ensure_database(self, connection_string: str, database_name: str) -> bool:
        """Create ``database_name`` on the server of ``connection_string``.

        Returns:
            True if this call created the database, False if it already existed
        """
        engine = self._engine_factory(connection_string, self._admin_database)
        try:
            async with engine.connect() as connection:
                lock_name = f"tenant-database:{database_name.lower()}"
                async with advisory_lock(connection, lock_name):
                    existing = await connection.scalar(
                        text("SELECT 1 FROM pg_database WHERE datname = :name"),
                        {"name": database_name},
                    )
                    if existing:
                        return False

                    quoted = connection.dialect.identifier_preparer.quote(database_name)
                    try:
                        await connection.execute(text(f"CREATE DATABASE {quoted}"))
                    except DBAPIError as e:
                        if _sqlstate(e) == DUPLICATE_DATABASE:
                            return False
                        raise
                    return True
        finally:
            await engine.dispose()
