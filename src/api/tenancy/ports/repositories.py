"""Repository protocols (ports) for the tenancy bounded context.

The tenant catalog is the single source of truth for which tenants exist
and which schema each of them owns.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import Page, PageRequest, TenantFilter, TenantId


@runtime_checkable
class ITenantCatalog(Protocol):
    """Catalog of tenants stored in the shared schema.

    Implementations operate inside the caller's transaction; they flush
    but never commit.
    """

    async def create(self, tenant: Tenant) -> Tenant:
        """Insert a new catalog row.

        Raises:
            ConflictError: If a non-deleted tenant owns the subdomain
            ProvisioningError: If the tenant schema name is already taken
        """
        ...

    async def get(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by ID, deleted tenants included."""
        ...

    async def find_by_subdomain(self, subdomain: str) -> Tenant | None:
        """Retrieve the non-deleted tenant owning a subdomain."""
        ...

    async def find_by_custom_domain(self, domain: str) -> Tenant | None:
        """Retrieve the non-deleted tenant whose settings name this custom domain."""
        ...

    async def update(
        self,
        tenant_id: TenantId,
        changes: Mapping[str, Any],
        *,
        elevated: bool = False,
    ) -> Tenant:
        """Apply a partial update and persist it.

        Raises:
            NotFoundError: If the tenant does not exist
            PermissionDeniedError: If a non-elevated caller changes status or plan
            ConflictError: If reactivation collides with an active subdomain
        """
        ...

    async def soft_delete(self, tenant_id: TenantId) -> Tenant:
        """Mark a tenant deleted. Idempotent.

        Raises:
            NotFoundError: If the tenant does not exist
        """
        ...

    async def list(
        self, tenant_filter: TenantFilter, page: PageRequest
    ) -> Page[Tenant]:
        """List tenants newest first."""
        ...

    async def is_subdomain_available(self, subdomain: str) -> bool:
        """Check whether no non-deleted tenant owns the subdomain."""
        ...
