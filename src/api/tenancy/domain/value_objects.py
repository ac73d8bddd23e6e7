"""Value objects for the tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

MAX_SLUG_LENGTH = 64
_SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def normalize_slug(value: str) -> str:
    """Normalize a slug for storage and comparison (trimmed, lowercase)."""
    return value.strip().lower()


def is_valid_slug(value: str) -> bool:
    """Check that an already-normalized slug is URL and host safe."""
    return 0 < len(value) <= MAX_SLUG_LENGTH and bool(_SLUG_PATTERN.match(value))


class TenantStatus(StrEnum):
    """Lifecycle status of a tenant.

    provisioning -> active -> suspended / archived
    """

    PROVISIONING = "provisioning"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"

    @property
    def is_accessible(self) -> bool:
        """Whether requests may be bound to a tenant in this status."""
        return self in (TenantStatus.ACTIVE, TenantStatus.PROVISIONING)


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Numeric, assigned by the tenant store on first save.
    """

    value: int

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from a string such as a header value.

        Raises:
            ValueError: If value is not a positive integer
        """
        try:
            parsed = int(value.strip())
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid TenantId: {value}") from e
        if parsed <= 0:
            raise ValueError(f"Invalid TenantId: {value}")
        return cls(value=parsed)


@dataclass(frozen=True)
class UserId:
    """Identifier for a user, as issued by the identity provider."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("UserId cannot be empty")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> UserId:
        return cls(value=value.strip())
