"""Domain-Oriented Observability for the tenancy application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from tenancy.application.observability.provisioning_service_probe import (
    DefaultProvisioningServiceProbe,
    ProvisioningServiceProbe,
)
from tenancy.application.observability.statistics_service_probe import (
    DefaultStatisticsServiceProbe,
    StatisticsServiceProbe,
)
from tenancy.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)

__all__ = [
    "ProvisioningServiceProbe",
    "DefaultProvisioningServiceProbe",
    "StatisticsServiceProbe",
    "DefaultStatisticsServiceProbe",
    "TenantServiceProbe",
    "DefaultTenantServiceProbe",
]
