"""TenantMembership aggregate for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from tenancy.domain.value_objects import TenantId, UserId


@dataclass
class TenantMembership:
    """Grant of one user's access to one tenant.

    The (tenant, user) pair is unique. Revoking keeps the row with a
    ``revoked_at`` stamp so the grant history stays auditable; assigning
    again reinstates the same membership.
    """

    tenant_id: TenantId
    user_id: UserId
    assigned_at: datetime
    assigned_by: str | None = None
    is_default: bool = False
    revoked_at: datetime | None = None

    @classmethod
    def grant(
        cls,
        tenant_id: TenantId,
        user_id: UserId,
        assigned_by: str | None = None,
        is_default: bool = False,
    ) -> TenantMembership:
        """Create a new active membership."""
        return cls(
            tenant_id=tenant_id,
            user_id=user_id,
            assigned_at=datetime.now(UTC),
            assigned_by=assigned_by,
            is_default=is_default,
        )

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None

    def reinstate(self, assigned_by: str | None = None) -> bool:
        """Reactivate a revoked membership.

        Returns:
            True if the membership was revoked and is now active again
        """
        if self.is_active:
            return False
        self.revoked_at = None
        self.assigned_at = datetime.now(UTC)
        self.assigned_by = assigned_by
        return True

    def revoke(self) -> bool:
        """Revoke the membership.

        Returns:
            True if the membership was active and is now revoked
        """
        if not self.is_active:
            return False
        self.revoked_at = datetime.now(UTC)
        self.is_default = False
        return True
