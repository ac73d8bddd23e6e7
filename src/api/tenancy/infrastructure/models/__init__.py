"""SQLAlchemy ORM models for the tenancy bounded context.

Control-plane models (tenant catalog, memberships, user directory) map to
``Base``; identity models map to ``TenantDatabaseBase`` and live in every
tenant database.
"""

from tenancy.infrastructure.models.identity import (
    RoleModel,
    TenantUserModel,
    UserRoleModel,
)
from tenancy.infrastructure.models.membership import TenantMembershipModel, UserModel
from tenancy.infrastructure.models.tenant import TenantBrandingModel, TenantModel

__all__ = [
    "RoleModel",
    "TenantBrandingModel",
    "TenantMembershipModel",
    "TenantModel",
    "TenantUserModel",
    "UserModel",
    "UserRoleModel",
]
