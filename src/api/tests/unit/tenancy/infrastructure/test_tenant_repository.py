"""Unit tests for TenantRepository.

Tests verify repository behavior with a mocked async session.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from sqlalchemy.exc import IntegrityError

from tenancy.domain.aggregates import Tenant, TenantBranding
from tenancy.domain.value_objects import TenantId, TenantStatus, UserId
from tenancy.infrastructure.models import TenantBrandingModel, TenantModel
from tenancy.infrastructure.tenant_repository import TenantRepository, tenant_from_model
from tenancy.ports.exceptions import DuplicateDatabaseNameError, DuplicateTenantSlugError
from tenancy.ports.repositories import ITenantRepository


def _result(value) -> MagicMock:
    """Mock the Result chain used for single-row tenant lookups."""
    result = MagicMock()
    result.unique.return_value.scalar_one_or_none.return_value = value
    return result


def _tenant_model(**overrides) -> TenantModel:
    values = dict(
        id=1,
        slug="acme",
        name="Acme Corp",
        status="active",
        database_name="pillar_acme",
        connection_string="postgresql+asyncpg://db/pillar_acme",
        is_demo=False,
        configuration={"currency": "EUR"},
        created_at=datetime(2025, 1, 1, tzinfo=UTC),
        updated_at=datetime(2025, 1, 2, tzinfo=UTC),
    )
    values.update(overrides)
    return TenantModel(**values)


@pytest.fixture
def mock_session():
    """Create mock async session."""
    session = AsyncMock()
    session.add = Mock()
    return session


@pytest.fixture
def mock_probe():
    return Mock()


@pytest.fixture
def repository(mock_session, mock_probe):
    """Create repository with mock session."""
    return TenantRepository(session=mock_session, probe=mock_probe)


class TestProtocolCompliance:
    def test_implements_protocol(self, repository):
        """Repository should implement ITenantRepository protocol."""
        assert isinstance(repository, ITenantRepository)


class TestSave:
    @pytest.mark.asyncio
    async def test_adds_new_tenant_and_assigns_id(self, repository, mock_session):
        tenant = Tenant.create(
            slug="acme",
            name="Acme Corp",
            branding=TenantBranding(primary_color="#112233"),
        )

        async def _flush():
            added = mock_session.add.call_args[0][0]
            added.id = 17
            added.branding.id = 4

        mock_session.flush.side_effect = _flush

        saved = await repository.save(tenant)

        added = mock_session.add.call_args[0][0]
        assert isinstance(added, TenantModel)
        assert added.slug == "acme"
        assert added.status == "provisioning"
        assert added.branding.primary_color == "#112233"
        assert saved is tenant
        assert tenant.id == TenantId(value=17)
        assert tenant.branding.id == 4

    @pytest.mark.asyncio
    async def test_updates_existing_tenant(self, repository, mock_session):
        model = _tenant_model()
        mock_session.execute.return_value = _result(model)
        tenant = tenant_from_model(model)
        tenant.name = "Acme Inc"
        tenant.archive()

        await repository.save(tenant)

        mock_session.add.assert_not_called()
        assert model.name == "Acme Inc"
        assert model.status == "archived"
        assert model.deleted_at is not None

    @pytest.mark.asyncio
    async def test_removing_branding_clears_relationship(self, repository, mock_session):
        model = _tenant_model(branding=TenantBrandingModel(id=3, logo_url="x"))
        mock_session.execute.return_value = _result(model)
        tenant = tenant_from_model(model)
        tenant.branding = None

        await repository.save(tenant)

        assert model.branding is None

    @pytest.mark.asyncio
    async def test_slug_conflict_is_translated(self, repository, mock_session):
        mock_session.flush.side_effect = IntegrityError(
            "INSERT INTO tenants",
            {},
            Exception('duplicate key value violates unique constraint "ix_tenants_slug"'),
        )

        with pytest.raises(DuplicateTenantSlugError):
            await repository.save(Tenant.create(slug="acme", name="Acme"))

    @pytest.mark.asyncio
    async def test_database_name_conflict_is_translated(self, repository, mock_session):
        mock_session.flush.side_effect = IntegrityError(
            "INSERT INTO tenants",
            {},
            Exception(
                'duplicate key value violates unique constraint "ix_tenants_database_name"'
            ),
        )

        with pytest.raises(DuplicateDatabaseNameError):
            await repository.save(
                Tenant.create(slug="acme", name="Acme", database_name="pillar_x")
            )

    @pytest.mark.asyncio
    async def test_other_integrity_errors_propagate(self, repository, mock_session):
        mock_session.flush.side_effect = IntegrityError(
            "INSERT INTO tenants", {}, Exception("not-null violation")
        )

        with pytest.raises(IntegrityError):
            await repository.save(Tenant.create(slug="acme", name="Acme"))


class TestGetters:
    @pytest.mark.asyncio
    async def test_get_by_id_returns_none_when_not_found(self, repository, mock_session):
        mock_session.execute.return_value = _result(None)

        assert await repository.get_by_id(TenantId(value=1)) is None

    @pytest.mark.asyncio
    async def test_get_by_id_maps_model(self, repository, mock_session):
        mock_session.execute.return_value = _result(
            _tenant_model(branding=TenantBrandingModel(id=3, primary_color="#000000"))
        )

        tenant = await repository.get_by_id(TenantId(value=1))

        assert tenant.id == TenantId(value=1)
        assert tenant.status == TenantStatus.ACTIVE
        assert tenant.database_name == "pillar_acme"
        assert tenant.configuration == {"currency": "EUR"}
        assert tenant.branding.id == 3
        assert tenant.branding.primary_color == "#000000"

    @pytest.mark.asyncio
    async def test_get_by_slug_queries_lowercase(self, repository, mock_session):
        mock_session.execute.return_value = _result(_tenant_model())

        tenant = await repository.get_by_slug("ACME")

        assert tenant.slug == "acme"
        stmt = mock_session.execute.call_args[0][0]
        assert stmt.compile().params["slug_1"] == "acme"

    @pytest.mark.asyncio
    async def test_get_for_user(self, repository, mock_session, mock_probe):
        mock_session.execute.return_value = _result(None)

        assert await repository.get_for_user(UserId(value="user-1")) is None
        mock_probe.tenant_not_found.assert_called_once_with("user:user-1")

    @pytest.mark.asyncio
    async def test_list_all(self, repository, mock_session, mock_probe):
        result = MagicMock()
        result.unique.return_value.scalars.return_value.all.return_value = [
            _tenant_model(id=1, slug="acme"),
            _tenant_model(id=2, slug="globex", database_name="pillar_globex"),
        ]
        mock_session.execute.return_value = result

        tenants = await repository.list_all()

        assert [t.slug for t in tenants] == ["acme", "globex"]
        mock_probe.tenants_listed.assert_called_once_with(2)


class TestExistenceChecks:
    @pytest.mark.asyncio
    async def test_slug_exists(self, repository, mock_session):
        result = MagicMock()
        result.scalar.return_value = True
        mock_session.execute.return_value = result

        assert await repository.slug_exists("ACME") is True

    @pytest.mark.asyncio
    async def test_slug_exists_can_ignore_a_tenant(self, repository, mock_session):
        result = MagicMock()
        result.scalar.return_value = False
        mock_session.execute.return_value = result

        assert await repository.slug_exists("acme", ignore_tenant_id=TenantId(value=1)) is False
        compiled = str(mock_session.execute.call_args[0][0])
        assert "tenants.id !=" in compiled

    @pytest.mark.asyncio
    async def test_database_name_compared_case_insensitively(self, repository, mock_session):
        result = MagicMock()
        result.scalar.return_value = True
        mock_session.execute.return_value = result

        assert await repository.database_name_exists("PILLAR_ACME") is True
        compiled = str(mock_session.execute.call_args[0][0])
        assert "lower(tenants.database_name)" in compiled
