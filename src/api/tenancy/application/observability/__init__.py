"""Application-level domain probes for the tenancy bounded context."""

from tenancy.application.observability.connection_resolver_probe import (
    ConnectionResolverProbe,
    DefaultConnectionResolverProbe,
)
from tenancy.application.observability.provisioning_probe import (
    DefaultProvisioningProbe,
    ProvisioningProbe,
)
from tenancy.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)

__all__ = [
    "ConnectionResolverProbe",
    "DefaultConnectionResolverProbe",
    "DefaultProvisioningProbe",
    "DefaultTenantServiceProbe",
    "ProvisioningProbe",
    "TenantServiceProbe",
]
