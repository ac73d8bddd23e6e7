"""HTTP routes for tenant administration.

Every route except ``/my-tenants`` requires the super-administrator role.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from shared_kernel.middleware.tenant_context import TenantContext
from tenancy.application.services import TenantService
from tenancy.application.value_objects import AuthenticatedUser
from tenancy.dependencies.authentication import get_current_user, require_super_admin
from tenancy.dependencies.tenant import get_tenant_service
from tenancy.dependencies.tenant_context import get_tenant_context
from tenancy.domain.exceptions import InvalidTenantSlugError, TenantSlugImmutableError
from tenancy.domain.value_objects import TenantId, UserId
from tenancy.ports.exceptions import (
    DuplicateDatabaseNameError,
    DuplicateTenantSlugError,
    ProvisioningConfigurationError,
    ProvisioningError,
    TenantNotFoundError,
    UserNotFoundError,
)
from tenancy.presentation.tenants.models import (
    AssignTenantMemberRequest,
    ConnectionInfoResponse,
    CreateTenantRequest,
    SlugExistsResponse,
    TenantMemberResponse,
    TenantResponse,
    UpdateTenantRequest,
)

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


def _parse_tenant_id(tenant_id: str) -> TenantId:
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid tenant ID format: {e}",
        ) from e


def _provisioning_failed(error: Exception) -> HTTPException:
    if isinstance(error, ProvisioningConfigurationError):
        detail = "Tenant provisioning is not configured"
    else:
        detail = f"Tenant provisioning failed at step '{error.step}'"
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )


@router.get("")
async def list_tenants(
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantResponse]:
    """List all tenants, ordered by name.

    Raises:
        HTTPException: 500 for unexpected errors
    """
    try:
        tenants = await service.list_tenants()
        return [TenantResponse.from_domain(t) for t in tenants]

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list tenants",
        )


@router.get("/my-tenants")
async def list_my_tenants(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantResponse]:
    """List the active tenants the caller is a member of."""
    try:
        tenants = await service.list_user_tenants(current_user.user_id)
        return [TenantResponse.from_domain(t) for t in tenants]

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list tenants",
        )


@router.get("/slug/{slug}")
async def get_tenant_by_slug(
    slug: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get tenant by slug (case-insensitive).

    Raises:
        HTTPException: 404 if tenant not found
        HTTPException: 500 for unexpected errors
    """
    try:
        tenant = await service.get_tenant_by_slug(slug)
        if tenant is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Tenant '{slug}' not found",
            )
        return TenantResponse.from_domain(tenant)

    except HTTPException:
        raise
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve tenant",
        )


@router.get("/slug/{slug}/exists")
async def check_slug_exists(
    slug: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> SlugExistsResponse:
    """Check whether a slug is already taken (archived tenants included)."""
    try:
        exists = await service.slug_exists(slug)
        return SlugExistsResponse(slug=slug, exists=exists)

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check slug",
        )


@router.get("/users/{user_id}/tenants")
async def list_user_tenants(
    user_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantResponse]:
    """List the active tenants a user is a member of.

    Raises:
        HTTPException: 400 if user ID is empty
        HTTPException: 500 for unexpected errors
    """
    try:
        user_id_obj = UserId.from_string(user_id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    try:
        tenants = await service.list_user_tenants(user_id_obj)
        return [TenantResponse.from_domain(t) for t in tenants]

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list tenants",
        )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
)
async def create_tenant(
    request: CreateTenantRequest,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Create a new tenant in provisioning status.

    With ``provision`` set, the tenant database is created, migrated and
    seeded before the response is sent.

    Raises:
        HTTPException: 409 if the slug or database name is taken
        HTTPException: 422 if the slug is not valid
        HTTPException: 500 if provisioning fails or for unexpected errors
    """
    try:
        tenant = await service.create_tenant(
            request.to_domain(),
            provision=request.provision,
        )
        return TenantResponse.from_domain(tenant)

    except DuplicateTenantSlugError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Slug '{request.slug}' is already in use",
        )
    except DuplicateDatabaseNameError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    except InvalidTenantSlugError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    except (ProvisioningConfigurationError, ProvisioningError) as e:
        raise _provisioning_failed(e) from e
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create tenant",
        )


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get tenant by ID.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
        HTTPException: 500 for unexpected errors
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        tenant = await service.get_tenant(tenant_id_obj)
        if tenant is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Tenant {tenant_id} not found",
            )
        return TenantResponse.from_domain(tenant)

    except HTTPException:
        raise
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve tenant",
        )


@router.put("/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    request: UpdateTenantRequest,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    context: Annotated[TenantContext, Depends(get_tenant_context)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Update a tenant.

    When the updated tenant is the one the request resolved to, the
    request's tenant context is refreshed as well.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
        HTTPException: 409 if the new slug is taken
        HTTPException: 422 if the slug is invalid or can no longer change
        HTTPException: 500 for unexpected errors
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        tenant = await service.update_tenant(
            tenant_id_obj,
            request.to_changes(),
            context=context,
        )
        return TenantResponse.from_domain(tenant)

    except TenantNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {tenant_id} not found",
        )
    except DuplicateTenantSlugError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Slug '{request.slug}' is already in use",
        )
    except (InvalidTenantSlugError, TenantSlugImmutableError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update tenant",
        )


@router.delete(
    "/{tenant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
    responses={
        204: {"description": "Tenant archived successfully"},
        400: {"description": "Invalid tenant ID format"},
        404: {"description": "Tenant not found"},
        500: {"description": "Internal server error"},
    },
)
async def delete_tenant(
    tenant_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> None:
    """Delete (archive) a tenant.

    The tenant row, its memberships and its database are retained; the
    slug stays reserved.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
        HTTPException: 500 for unexpected errors
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        await service.delete_tenant(tenant_id_obj)

    except TenantNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {tenant_id} not found",
        )
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete tenant",
        )


@router.get("/{tenant_id}/connection")
async def get_connection_info(
    tenant_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> ConnectionInfoResponse:
    """Get the database name and connection string of a tenant.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
        HTTPException: 500 for unexpected errors
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        info = await service.get_connection_info(tenant_id_obj)
        if info is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Tenant {tenant_id} not found",
            )
        return ConnectionInfoResponse.from_domain(info)

    except HTTPException:
        raise
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve connection info",
        )


@router.post("/{tenant_id}/provision")
async def provision_tenant(
    tenant_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Provision, or finish provisioning, an existing tenant.

    Safe to retry after a failed attempt.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant not found
        HTTPException: 409 if another tenant uses the database name
        HTTPException: 500 if provisioning fails or for unexpected errors
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        tenant = await service.provision_tenant(tenant_id_obj)
        return TenantResponse.from_domain(tenant)

    except TenantNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {tenant_id} not found",
        )
    except DuplicateDatabaseNameError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    except (ProvisioningConfigurationError, ProvisioningError) as e:
        raise _provisioning_failed(e) from e
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to provision tenant",
        )


@router.get("/{tenant_id}/members")
async def list_tenant_members(
    tenant_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> list[TenantMemberResponse]:
    """List all memberships of a tenant, including revoked ones."""
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        memberships = await service.list_members(tenant_id_obj)
        return [TenantMemberResponse.from_domain(m) for m in memberships]

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list tenant members",
        )


@router.post("/{tenant_id}/members")
async def assign_tenant_member(
    tenant_id: str,
    request: AssignTenantMemberRequest,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantMemberResponse:
    """Grant a user access to a tenant.

    Assigning a user who is already an active member succeeds without
    changes.

    Raises:
        HTTPException: 400 if tenant ID is invalid
        HTTPException: 404 if tenant or user not found
        HTTPException: 500 for unexpected errors
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        membership = await service.assign_member(
            tenant_id_obj,
            UserId.from_string(request.user_id),
            assigned_by=current_user.username,
            is_default=request.is_default,
        )
        return TenantMemberResponse.from_domain(membership)

    except TenantNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tenant {tenant_id} not found",
        )
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {request.user_id} not found",
        )
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign tenant member",
        )


@router.delete(
    "/{tenant_id}/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def revoke_tenant_member(
    tenant_id: str,
    user_id: str,
    current_user: Annotated[AuthenticatedUser, Depends(require_super_admin)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> None:
    """Revoke a user's access to a tenant.

    Revoking a user who is not an active member succeeds without changes.
    """
    tenant_id_obj = _parse_tenant_id(tenant_id)

    try:
        await service.revoke_member(tenant_id_obj, UserId.from_string(user_id))

    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to revoke tenant member",
        )
