"""Unit tests for the Tenant aggregate."""

import pytest

from tenancy.domain.aggregates import Tenant, TenantBranding
from tenancy.domain.exceptions import InvalidTenantSlugError, TenantSlugImmutableError
from tenancy.domain.value_objects import TenantId, TenantStatus


class TestTenantCreation:
    """Tests for Tenant.create."""

    def test_creates_tenant_in_provisioning_status(self):
        tenant = Tenant.create(slug="acme", name="Acme Corp")

        assert tenant.id is None
        assert tenant.slug == "acme"
        assert tenant.name == "Acme Corp"
        assert tenant.status == TenantStatus.PROVISIONING
        assert tenant.created_at is not None
        assert tenant.database_name is None

    def test_normalizes_slug_to_lowercase(self):
        tenant = Tenant.create(slug="  AcMe  ", name="Acme Corp")

        assert tenant.slug == "acme"

    def test_empty_explicit_infrastructure_is_treated_as_missing(self):
        tenant = Tenant.create(
            slug="acme", name="Acme Corp", database_name="", connection_string=""
        )

        assert tenant.database_name is None
        assert tenant.connection_string is None

    def test_accepts_details(self):
        branding = TenantBranding(primary_color="#000000")
        tenant = Tenant.create(
            slug="acme",
            name="Acme Corp",
            region="eu",
            is_demo=True,
            configuration={"currency": "EUR"},
            branding=branding,
        )

        assert tenant.region == "eu"
        assert tenant.is_demo is True
        assert tenant.configuration == {"currency": "EUR"}
        assert tenant.branding is branding

    @pytest.mark.parametrize(
        "slug",
        ["", "   ", "acme corp", "acme_corp", "acme.corp", "acmé", "a" * 65],
    )
    def test_rejects_invalid_slugs(self, slug):
        with pytest.raises(InvalidTenantSlugError):
            Tenant.create(slug=slug, name="Acme Corp")

    def test_accepts_hyphens_and_digits(self):
        tenant = Tenant.create(slug="acme-2", name="Acme 2")
        assert tenant.slug == "acme-2"


class TestAccessibility:
    @pytest.mark.parametrize(
        ("status", "accessible"),
        [
            (TenantStatus.ACTIVE, True),
            (TenantStatus.PROVISIONING, True),
            (TenantStatus.SUSPENDED, False),
            (TenantStatus.ARCHIVED, False),
        ],
    )
    def test_only_active_and_provisioning_are_accessible(
        self, make_tenant, status, accessible
    ):
        assert make_tenant(status=status).is_accessible is accessible


class TestChangeSlug:
    def test_changes_slug_before_provisioning(self, make_tenant):
        tenant = make_tenant(status=TenantStatus.PROVISIONING)

        assert tenant.change_slug("Globex") is True
        assert tenant.slug == "globex"

    def test_same_slug_is_a_no_op(self, make_tenant):
        tenant = make_tenant(database_name="pillar_acme")

        assert tenant.change_slug("ACME") is False

    def test_slug_is_immutable_once_provisioned(self, make_tenant):
        tenant = make_tenant(database_name="pillar_acme")

        with pytest.raises(TenantSlugImmutableError):
            tenant.change_slug("globex")
        assert tenant.slug == "acme"

    def test_rejects_invalid_new_slug(self, make_tenant):
        tenant = make_tenant()

        with pytest.raises(InvalidTenantSlugError):
            tenant.change_slug("not valid")


class TestLifecycle:
    def test_assign_infrastructure(self, make_tenant):
        tenant = make_tenant(status=TenantStatus.PROVISIONING)

        tenant.assign_infrastructure("pillar_acme", "postgresql+asyncpg://db/pillar_acme")

        assert tenant.database_name == "pillar_acme"
        assert tenant.connection_string == "postgresql+asyncpg://db/pillar_acme"
        assert tenant.is_provisioned is True
        assert tenant.updated_at is not None

    def test_activate_stamps_first_activation_only(self, make_tenant):
        tenant = make_tenant(status=TenantStatus.PROVISIONING)

        tenant.activate()
        first_activation = tenant.activated_at
        tenant.suspend()
        tenant.activate()

        assert tenant.status == TenantStatus.ACTIVE
        assert tenant.activated_at == first_activation
        assert tenant.suspended_at is None

    def test_suspend(self, make_tenant):
        tenant = make_tenant()

        tenant.suspend()

        assert tenant.status == TenantStatus.SUSPENDED
        assert tenant.suspended_at is not None

    def test_archive_is_a_soft_delete(self, make_tenant):
        tenant = make_tenant(database_name="pillar_acme")

        tenant.archive()

        assert tenant.status == TenantStatus.ARCHIVED
        assert tenant.deleted_at is not None
        assert tenant.database_name == "pillar_acme"

    def test_change_status_routes_to_transition(self, make_tenant):
        tenant = make_tenant()

        tenant.change_status(TenantStatus.ARCHIVED)

        assert tenant.deleted_at is not None

    def test_change_status_to_same_status_is_a_no_op(self, make_tenant):
        tenant = make_tenant()

        tenant.change_status(TenantStatus.ACTIVE)

        assert tenant.updated_at is None

    def test_tenant_id_is_an_int(self):
        tenant_id = TenantId(value=5)
        assert int(tenant_id) == 5
        assert str(tenant_id) == "5"
