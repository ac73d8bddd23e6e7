"""Caller identity FastAPI dependencies.

The bearer token backend has already validated credentials by the time a
route runs; these dependencies only read the resulting identity.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from infrastructure.settings import AuthSettings, get_auth_settings
from shared_kernel.auth import ClaimsIdentity
from tenancy.application.value_objects import AuthenticatedUser
from tenancy.domain.value_objects import UserId


def get_current_identity(request: Request) -> ClaimsIdentity:
    """Get the claims identity of the caller (anonymous if unauthenticated)."""
    identity = request.scope.get("user")
    if isinstance(identity, ClaimsIdentity):
        return identity
    return ClaimsIdentity.anonymous()


def get_current_user(
    identity: Annotated[ClaimsIdentity, Depends(get_current_identity)],
) -> AuthenticatedUser:
    """Require an authenticated caller.

    Raises:
        HTTPException 401: If the request carries no valid bearer token
    """
    if not identity.is_authenticated or not identity.user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthenticatedUser(
        user_id=UserId.from_string(identity.user_id),
        username=identity.display_name,
    )


def require_super_admin(
    current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    identity: Annotated[ClaimsIdentity, Depends(get_current_identity)],
    settings: Annotated[AuthSettings, Depends(get_auth_settings)],
) -> AuthenticatedUser:
    """Require an authenticated caller holding the super-administrator role.

    Raises:
        HTTPException 401: If the request carries no valid bearer token
        HTTPException 403: If the caller lacks the role
    """
    if not identity.is_in_role(settings.super_admin_role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions to administer tenants",
        )
    return current_user
