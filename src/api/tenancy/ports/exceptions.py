"""Exceptions raised by the tenancy engine.

Every error the engine surfaces to its collaborators derives from
TenancyError, so callers can catch the whole family at their boundary
and translate it to a transport-level response.
"""


class TenancyError(Exception):
    """Base class for all tenancy engine errors."""

    pass


class ValidationError(TenancyError):
    """Raised when input is malformed.

    Always raised before any storage is touched.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ConflictError(TenancyError):
    """Raised when a non-deleted tenant already owns the requested subdomain.

    The catalog is left unchanged.
    """

    pass


class ProvisioningError(TenancyError):
    """Raised when a tenant could not be provisioned.

    Covers DDL and storage failures, tenant schema name collisions and
    timeouts. Nothing from the failed attempt remains in the database.
    """

    pass


class NotFoundError(TenancyError):
    """Raised when a tenant id, subdomain or domain is unknown."""

    pass


class PermissionDeniedError(TenancyError):
    """Raised when a non-elevated caller changes a privileged tenant field."""

    pass


class TenantUnavailableError(TenancyError):
    """Raised when a tenant exists but may not serve traffic."""

    def __init__(self, message: str, tenant_id: str):
        self.tenant_id = tenant_id
        super().__init__(message)


class TenantSuspendedError(TenantUnavailableError):
    """Raised when resolving a suspended tenant."""

    pass


class TenantExpiredError(TenantUnavailableError):
    """Raised when resolving an expired tenant or a lapsed trial."""

    pass


class StatisticsError(TenancyError):
    """Raised when a tenant count query fails.

    Partial statistics are never returned.
    """

    pass
