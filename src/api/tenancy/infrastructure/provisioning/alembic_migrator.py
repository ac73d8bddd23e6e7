"""Alembic implementation of ISchemaMigrator for tenant databases."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from alembic import command
from alembic.config import Config
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.database.engines import create_migration_engine
from tenancy.ports.provisioning import ISchemaMigrator

TENANT_MIGRATIONS_PATH = Path(__file__).resolve().parents[1] / "tenant_migrations"


class AlembicSchemaMigrator(ISchemaMigrator):
    """Upgrades a tenant database to the latest tenant schema revision.

    The tenant migration environment reuses the connection handed over in
    ``config.attributes["connection"]``, so migrations run on the same
    asyncpg connection this migrator opens. Alembic skips revisions that
    are already recorded, which makes re-runs no-ops.
    """

    def __init__(
        self,
        script_location: Path | str = TENANT_MIGRATIONS_PATH,
        engine_factory: Callable[[str], AsyncEngine] = create_migration_engine,
    ) -> None:
        self._script_location = str(script_location)
        self._engine_factory = engine_factory

    async def upgrade(self, connection_string: str) -> None:
        """Apply all pending tenant migrations."""
        engine = self._engine_factory(connection_string)
        try:
            async with engine.begin() as connection:
                await connection.run_sync(self._upgrade_to_head)
        finally:
            await engine.dispose()

    def build_config(self, connection: Connection | None = None) -> Config:
        """Build an in-memory Alembic config for the tenant migrations."""
        config = Config()
        config.set_main_option("script_location", self._script_location)
        if connection is not None:
            config.attributes["connection"] = connection
        return config

    def _upgrade_to_head(self, connection: Connection) -> None:
        command.upgrade(self.build_config(connection), "head")
