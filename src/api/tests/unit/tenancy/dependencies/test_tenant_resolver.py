"""Unit tests for request-time tenant resolution."""

from unittest.mock import AsyncMock, Mock

import pytest
from starlette.requests import Request

from infrastructure.settings import TenancySettings
from shared_kernel.auth import ClaimsIdentity, ClaimTypes
from tenancy.dependencies.tenant_resolver import TenantResolver, extract_host_slug
from tenancy.domain.value_objects import TenantId, TenantStatus, UserId
from tenancy.ports.repositories import ITenantRepository


def make_request(host: str = "localhost", path: str = "/", **headers: str) -> Request:
    raw_headers = [(b"host", host.encode())]
    raw_headers += [
        (name.replace("_", "-").lower().encode(), value.encode())
        for name, value in headers.items()
    ]
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "path": path,
            "query_string": b"",
            "headers": raw_headers,
            "server": ("testserver", 80),
        }
    )


@pytest.fixture
def tenant_repo():
    repo = Mock(spec=ITenantRepository)
    repo.get_by_id = AsyncMock(return_value=None)
    repo.get_by_slug = AsyncMock(return_value=None)
    repo.get_for_user = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_probe():
    return Mock()


@pytest.fixture
def resolver(tenant_repo, mock_probe):
    return TenantResolver(
        tenant_repository=tenant_repo,
        settings=TenancySettings(),
        probe=mock_probe,
    )


class TestExtractHostSlug:
    @pytest.mark.parametrize(
        "host, expected",
        [
            ("tenant1.app.example.com", "tenant1"),
            ("ACME.app.example.com", "acme"),
            ("acme.app.example.com.", "acme"),
            ("example.com", None),
            ("localhost", None),
            ("127.0.0.1", None),
            ("10.1.2.3", None),
            ("[::1]", None),
            ("", None),
            (None, None),
        ],
    )
    def test_host_slug(self, host, expected):
        assert extract_host_slug(host) == expected


class TestHeaderResolution:
    @pytest.mark.asyncio
    async def test_tenant_id_header_wins(self, resolver, tenant_repo, make_tenant):
        tenant_repo.get_by_id.return_value = make_tenant(tenant_id=7, slug="globex")
        request = make_request(
            host="acme.app.example.com", x_tenant_id="7", x_tenant="acme"
        )

        tenant = await resolver.resolve(request)

        assert tenant.slug == "globex"
        tenant_repo.get_by_id.assert_awaited_once_with(TenantId(value=7))
        tenant_repo.get_by_slug.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_tenant_id_falls_through_to_slug(
        self, resolver, tenant_repo, make_tenant, mock_probe
    ):
        tenant_repo.get_by_slug.return_value = make_tenant()
        request = make_request(x_tenant_id="99", x_tenant="acme")

        tenant = await resolver.resolve(request)

        assert tenant.slug == "acme"
        mock_probe.tenant_hint_unmatched.assert_called_once_with(
            "99", "tenant_id_header"
        )

    @pytest.mark.asyncio
    async def test_malformed_tenant_id_is_ignored(self, resolver, tenant_repo):
        request = make_request(x_tenant_id="not-a-number")

        assert await resolver.resolve(request) is None
        tenant_repo.get_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_tenant_header_slug_is_normalized(
        self, resolver, tenant_repo, make_tenant, mock_probe
    ):
        tenant_repo.get_by_slug.return_value = make_tenant(tenant_id=3)

        tenant = await resolver.resolve(make_request(x_tenant=" ACME "))

        assert tenant.id == TenantId(value=3)
        tenant_repo.get_by_slug.assert_awaited_once_with("acme")
        mock_probe.tenant_resolved.assert_called_once_with(3, "acme", "header")

    @pytest.mark.asyncio
    async def test_tenant_header_takes_precedence_over_host(
        self, resolver, tenant_repo, make_tenant
    ):
        tenant_repo.get_by_slug.return_value = make_tenant()

        await resolver.resolve(make_request(host="globex.app.example.com", x_tenant="acme"))

        tenant_repo.get_by_slug.assert_awaited_once_with("acme")

    @pytest.mark.asyncio
    async def test_unmatched_header_does_not_fall_back_to_host(
        self, resolver, tenant_repo
    ):
        request = make_request(host="globex.app.example.com", x_tenant="nobody")

        assert await resolver.resolve(request) is None
        tenant_repo.get_by_slug.assert_awaited_once_with("nobody")


class TestHostResolution:
    @pytest.mark.asyncio
    async def test_subdomain_resolves(self, resolver, tenant_repo, make_tenant, mock_probe):
        tenant_repo.get_by_slug.return_value = make_tenant(slug="tenant1")

        tenant = await resolver.resolve(make_request(host="tenant1.app.example.com:8000"))

        assert tenant.slug == "tenant1"
        mock_probe.tenant_resolved.assert_called_once_with(1, "tenant1", "host")

    @pytest.mark.asyncio
    async def test_bare_domain_is_not_a_hint(self, resolver, tenant_repo):
        assert await resolver.resolve(make_request(host="example.com")) is None
        tenant_repo.get_by_slug.assert_not_called()


class TestIdentityResolution:
    @pytest.mark.asyncio
    async def test_tenant_slug_claim(self, resolver, tenant_repo, make_tenant, mock_probe):
        tenant_repo.get_by_slug.return_value = make_tenant()
        identity = ClaimsIdentity(
            claims=[(ClaimTypes.USER_ID, "user-1"), (ClaimTypes.TENANT_SLUG, "acme")]
        )

        tenant = await resolver.resolve(make_request(), identity)

        assert tenant.slug == "acme"
        mock_probe.tenant_resolved.assert_called_once_with(1, "acme", "claim")
        tenant_repo.get_for_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_user_association(self, resolver, tenant_repo, make_tenant):
        tenant_repo.get_for_user.return_value = make_tenant()
        identity = ClaimsIdentity(claims=[(ClaimTypes.USER_ID, "user-1")])

        tenant = await resolver.resolve(make_request(), identity)

        assert tenant.slug == "acme"
        tenant_repo.get_for_user.assert_awaited_once_with(UserId(value="user-1"))

    @pytest.mark.asyncio
    async def test_unmatched_claim_falls_back_to_user_association(
        self, resolver, tenant_repo, make_tenant, mock_probe
    ):
        tenant_repo.get_for_user.return_value = make_tenant(tenant_id=4, slug="globex")
        identity = ClaimsIdentity(
            claims=[(ClaimTypes.USER_ID, "user-1"), (ClaimTypes.TENANT_SLUG, "oldco")]
        )

        tenant = await resolver.resolve(make_request(), identity)

        assert tenant.slug == "globex"
        mock_probe.tenant_hint_unmatched.assert_called_once_with("oldco", "claim")
        mock_probe.tenant_resolved.assert_called_once_with(4, "globex", "user")

    @pytest.mark.asyncio
    async def test_user_without_tenant(self, resolver, tenant_repo, mock_probe):
        identity = ClaimsIdentity(claims=[(ClaimTypes.USER_ID, "user-1")])

        assert await resolver.resolve(make_request(), identity) is None
        mock_probe.tenant_hint_unmatched.assert_called_once_with("user-1", "user")

    @pytest.mark.asyncio
    async def test_anonymous_identity_is_not_consulted(self, resolver, tenant_repo):
        assert await resolver.resolve(make_request(), ClaimsIdentity.anonymous()) is None
        tenant_repo.get_for_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_request_hints_beat_identity(self, resolver, tenant_repo, make_tenant):
        tenant_repo.get_by_slug.return_value = make_tenant(slug="globex")
        identity = ClaimsIdentity(
            claims=[(ClaimTypes.USER_ID, "user-1"), (ClaimTypes.TENANT_SLUG, "acme")]
        )

        tenant = await resolver.resolve(make_request(x_tenant="globex"), identity)

        assert tenant.slug == "globex"
        tenant_repo.get_by_slug.assert_awaited_once_with("globex")


class TestAccessibility:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [TenantStatus.SUSPENDED, TenantStatus.ARCHIVED])
    async def test_inaccessible_tenant_is_not_returned(
        self, resolver, tenant_repo, make_tenant, mock_probe, status
    ):
        tenant_repo.get_by_slug.return_value = make_tenant(status=status)

        assert await resolver.resolve(make_request(x_tenant="acme")) is None
        mock_probe.tenant_inaccessible.assert_called_once_with(
            tenant_id=1, slug="acme", status=str(status)
        )

    @pytest.mark.asyncio
    async def test_provisioning_tenant_is_accessible(
        self, resolver, tenant_repo, make_tenant
    ):
        tenant_repo.get_by_slug.return_value = make_tenant(
            status=TenantStatus.PROVISIONING
        )

        assert await resolver.resolve(make_request(x_tenant="acme")) is not None

    @pytest.mark.asyncio
    async def test_no_hints_resolves_nothing(self, resolver, tenant_repo):
        assert await resolver.resolve(make_request()) is None
        tenant_repo.get_by_id.assert_not_called()
        tenant_repo.get_by_slug.assert_not_called()

    @pytest.mark.asyncio
    async def test_suspended_id_header_falls_through_to_slug(
        self, resolver, tenant_repo, make_tenant, mock_probe
    ):
        tenant_repo.get_by_id.return_value = make_tenant(
            tenant_id=9, slug="frozen", status=TenantStatus.SUSPENDED
        )
        tenant_repo.get_by_slug.return_value = make_tenant(tenant_id=2, slug="globex")

        tenant = await resolver.resolve(make_request(x_tenant_id="9", x_tenant="globex"))

        assert tenant.slug == "globex"
        mock_probe.tenant_inaccessible.assert_called_once_with(
            tenant_id=9, slug="frozen", status=str(TenantStatus.SUSPENDED)
        )

    @pytest.mark.asyncio
    async def test_suspended_header_tenant_falls_through_to_identity(
        self, resolver, tenant_repo, make_tenant
    ):
        tenant_repo.get_by_slug.return_value = make_tenant(
            slug="frozen", status=TenantStatus.SUSPENDED
        )
        tenant_repo.get_for_user.return_value = make_tenant(tenant_id=4, slug="globex")
        identity = ClaimsIdentity(claims=[(ClaimTypes.USER_ID, "user-1")])

        tenant = await resolver.resolve(make_request(x_tenant="frozen"), identity)

        assert tenant.slug == "globex"

    @pytest.mark.asyncio
    async def test_archived_claim_tenant_falls_through_to_user_association(
        self, resolver, tenant_repo, make_tenant
    ):
        tenant_repo.get_by_slug.return_value = make_tenant(
            slug="oldco", status=TenantStatus.ARCHIVED
        )
        tenant_repo.get_for_user.return_value = make_tenant(tenant_id=4, slug="globex")
        identity = ClaimsIdentity(
            claims=[(ClaimTypes.USER_ID, "user-1"), (ClaimTypes.TENANT_SLUG, "oldco")]
        )

        tenant = await resolver.resolve(make_request(), identity)

        assert tenant.slug == "globex"

    @pytest.mark.asyncio
    async def test_suspended_user_tenant_resolves_nothing(
        self, resolver, tenant_repo, make_tenant
    ):
        tenant_repo.get_for_user.return_value = make_tenant(status=TenantStatus.SUSPENDED)
        identity = ClaimsIdentity(claims=[(ClaimTypes.USER_ID, "user-1")])

        assert await resolver.resolve(make_request(), identity) is None
