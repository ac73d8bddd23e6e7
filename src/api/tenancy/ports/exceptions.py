"""Port exceptions for the tenancy bounded context.

These exceptions represent errors raised by repositories and by the
provisioning collaborators. They are caught and translated by the
presentation layer.
"""


class DuplicateTenantSlugError(Exception):
    """Raised when a slug is already used by another tenant.

    Slugs are compared case-insensitively and are globally unique,
    archived tenants included.
    """

    pass


class DuplicateDatabaseNameError(Exception):
    """Raised when a database name is already assigned to another tenant."""

    pass


class TenantNotFoundError(Exception):
    """Raised when an operation targets a tenant id that does not exist."""

    pass


class UserNotFoundError(Exception):
    """Raised when a membership operation targets an unknown user."""

    pass


class ProvisioningConfigurationError(Exception):
    """Raised when provisioning cannot start because configuration is missing.

    The typical cause is a tenant without an explicit connection string
    while no connection-string template is configured.
    """

    pass


class ProvisioningError(Exception):
    """Raised when a provisioning step fails.

    No compensation is attempted; the tenant database may exist in an
    incomplete state and provisioning may be retried.

    Attributes:
        step: Name of the step that failed
        tenant_slug: Slug of the tenant being provisioned
    """

    def __init__(self, step: str, tenant_slug: str, message: str):
        super().__init__(f"Provisioning step '{step}' failed for '{tenant_slug}': {message}")
        self.step = step
        self.tenant_slug = tenant_slug
