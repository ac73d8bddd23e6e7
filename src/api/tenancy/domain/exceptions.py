"""Domain exceptions for the tenancy bounded context.

These represent violations of aggregate invariants, raised by the
aggregates themselves.
"""


class InvalidTenantSlugError(ValueError):
    """Raised when a slug is empty, too long, or contains characters
    other than lowercase letters, digits and hyphens."""

    pass


class TenantSlugImmutableError(Exception):
    """Raised when changing the slug of a tenant that already has a database.

    The slug names the tenant database and appears in host-based resolution,
    so it is fixed once provisioning has assigned infrastructure.
    """

    pass
