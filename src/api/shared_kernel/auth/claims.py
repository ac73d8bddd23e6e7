"""Claims-based identity of the authenticated caller.

The identity is produced by the authentication layer and read by tenant
resolution. Tenant resolution may append tenant claims to it; claims are
only ever added, never replaced.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class ClaimTypes:
    """Claim type names understood across bounded contexts."""

    USER_ID = "sub"
    USERNAME = "preferred_username"
    TENANT_ID = "tenant_id"
    TENANT_SLUG = "tenant_slug"
    ROLE = "role"


@dataclass
class ClaimsIdentity:
    """An identity described by an ordered list of (type, value) claims.

    Attributes:
        claims: The identity's claims, in issue order
        is_authenticated: False for the anonymous identity
    """

    claims: list[tuple[str, str]] = field(default_factory=list)
    is_authenticated: bool = True

    @classmethod
    def anonymous(cls) -> ClaimsIdentity:
        """Identity for callers that presented no credentials."""
        return cls(claims=[], is_authenticated=False)

    @property
    def user_id(self) -> str | None:
        """The subject claim, if present."""
        return self.find_first(ClaimTypes.USER_ID)

    @property
    def display_name(self) -> str:
        return self.find_first(ClaimTypes.USERNAME) or self.user_id or ""

    def find_first(self, claim_type: str) -> str | None:
        """Return the first value issued for a claim type, or None."""
        for existing_type, value in self.claims:
            if existing_type == claim_type:
                return value
        return None

    def has_claim(self, claim_type: str) -> bool:
        return self.find_first(claim_type) is not None

    def is_in_role(self, role: str) -> bool:
        """Check for a role claim with exactly this value."""
        return (ClaimTypes.ROLE, role) in self.claims

    def add_claim(self, claim_type: str, value: str) -> bool:
        """Append a claim unless one of that type already exists.

        Returns:
            True if the claim was added, False if it was already present
        """
        if self.has_claim(claim_type):
            return False
        self.claims.append((claim_type, value))
        return True
