"""Unit tests for automatic per-tenant row filtering.

Runs the session events against an in-memory SQLite database holding the
tenant identity tables.
"""

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from infrastructure.database.models import TenantDatabaseBase
from infrastructure.database.tenant_filter import (
    bind_session_to_tenant,
    current_session_tenant,
)
from tenancy.infrastructure.models import RoleModel


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    TenantDatabaseBase.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seeded_engine(engine):
    """Roles for two tenants, written by an unscoped session."""
    with Session(engine) as session:
        session.add_all(
            [
                RoleModel(id="r1", name="Administrator", normalized_name="ADMINISTRATOR", tenant_id=1),
                RoleModel(id="r2", name="Manager", normalized_name="MANAGER", tenant_id=1),
                RoleModel(id="r3", name="Administrator", normalized_name="ADMINISTRATOR", tenant_id=2),
            ]
        )
        session.commit()
    return engine


class TestBindSessionToTenant:
    def test_binds_and_clears(self, engine):
        with Session(engine) as session:
            bind_session_to_tenant(session, 5)
            assert current_session_tenant(session) == 5

            bind_session_to_tenant(session, None)
            assert current_session_tenant(session) is None


class TestSelectFiltering:
    def test_scoped_session_sees_only_its_rows(self, seeded_engine):
        with Session(seeded_engine) as session:
            bind_session_to_tenant(session, 1)

            ids = session.scalars(select(RoleModel.id).order_by(RoleModel.id)).all()

        assert ids == ["r1", "r2"]

    def test_scoped_session_cannot_load_other_tenant_rows(self, seeded_engine):
        with Session(seeded_engine) as session:
            bind_session_to_tenant(session, 2)

            role = session.scalars(
                select(RoleModel).where(RoleModel.normalized_name == "MANAGER")
            ).one_or_none()

        assert role is None

    def test_unscoped_session_sees_everything(self, seeded_engine):
        with Session(seeded_engine) as session:
            count = len(session.scalars(select(RoleModel)).all())

        assert count == 3


class TestFlushStamping:
    def test_new_rows_get_session_tenant(self, engine):
        with Session(engine) as session:
            bind_session_to_tenant(session, 9)
            role = RoleModel(id="r9", name="Salesperson", normalized_name="SALESPERSON")
            session.add(role)
            session.flush()

            assert role.tenant_id == 9

    def test_explicit_tenant_is_kept(self, engine):
        with Session(engine) as session:
            bind_session_to_tenant(session, 9)
            role = RoleModel(
                id="r10", name="Salesperson", normalized_name="SALESPERSON", tenant_id=3
            )
            session.add(role)
            session.flush()

            assert role.tenant_id == 3
