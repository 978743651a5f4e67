"""Ports for the tenancy bounded context."""

from tenancy.ports.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ProvisioningError,
    StatisticsError,
    TenancyError,
    TenantExpiredError,
    TenantSuspendedError,
    TenantUnavailableError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProvisioningError",
    "StatisticsError",
    "TenancyError",
    "TenantExpiredError",
    "TenantSuspendedError",
    "TenantUnavailableError",
    "ValidationError",
]
