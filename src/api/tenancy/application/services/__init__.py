"""Application services for the tenancy bounded context."""

from tenancy.application.services.provisioning_service import ProvisioningService
from tenancy.application.services.statistics_service import StatisticsService
from tenancy.application.services.tenant_service import TenantService

__all__ = [
    "ProvisioningService",
    "StatisticsService",
    "TenantService",
]
