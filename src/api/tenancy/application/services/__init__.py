"""Application services for the tenancy bounded context.

Application services orchestrate domain aggregates, repositories, and
other infrastructure to fulfill use cases. They are the "front door" to
the tenancy context.
"""

from tenancy.application.services.tenant_provisioning_service import (
    TenantProvisioningService,
)
from tenancy.application.services.tenant_service import TenantService

__all__ = [
    "TenantProvisioningService",
    "TenantService",
]
