"""Tenant application service for the tenancy bounded context.

Handles catalog reads and writes issued by collaborators, and resolves
incoming hosts to the tenant that should serve them.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.settings import TenancySettings, get_tenancy_settings
from tenancy.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from tenancy.application.services._common import CatalogFactory, coerce_tenant_id
from tenancy.application.value_objects import CallerContext, TenantPatch
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import (
    Page,
    PageRequest,
    TenantFilter,
    TenantId,
    is_valid_subdomain,
)
from tenancy.infrastructure.tenant_catalog import TenantCatalog
from tenancy.ports.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    TenantUnavailableError,
)


class TenantService:
    """Application service for tenant catalog management.

    Every call runs in its own session; write operations commit before
    returning.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: TenancySettings | None = None,
        catalog_factory: CatalogFactory = TenantCatalog,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            session_factory: Factory for per-call database sessions
            settings: Tenancy settings (defaults to the cached environment settings)
            catalog_factory: Builds a catalog bound to a session
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._settings = settings or get_tenancy_settings()
        self._catalog_factory = catalog_factory
        self._probe = probe or DefaultTenantServiceProbe()

    async def get_tenant(self, tenant_id: TenantId | str) -> Tenant:
        """Retrieve a tenant by ID, deleted tenants included.

        Raises:
            NotFoundError: If the tenant does not exist
        """
        tenant_id = coerce_tenant_id(tenant_id)
        async with self._session_factory() as session:
            tenant = await self._catalog_factory(session).get(tenant_id)

        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
            raise NotFoundError(f"Tenant {tenant_id} not found")

        self._probe.tenant_retrieved(tenant_id=tenant_id.value)
        return tenant

    async def list_tenants(
        self,
        tenant_filter: TenantFilter | None = None,
        page: PageRequest | None = None,
    ) -> Page[Tenant]:
        """List tenants newest first, excluding deleted ones by default."""
        tenant_filter = tenant_filter or TenantFilter()
        page = page or PageRequest()
        async with self._session_factory() as session:
            result = await self._catalog_factory(session).list(tenant_filter, page)

        self._probe.tenants_listed(count=len(result.items), total=result.total)
        return result

    async def update_tenant(
        self,
        tenant_id: TenantId | str,
        patch: TenantPatch,
        caller: CallerContext | None = None,
    ) -> Tenant:
        """Apply a partial update to a tenant.

        Settings are merged into the stored document. Status and plan may
        only be changed by elevated callers.

        Raises:
            NotFoundError: If the tenant does not exist
            PermissionDeniedError: If a non-elevated caller changes status or plan
            ValidationError: If the patch sets a required field to null
            ConflictError: If reactivation collides with an active subdomain
        """
        tenant_id = coerce_tenant_id(tenant_id)
        caller = caller or CallerContext()
        changes = patch.changes()

        try:
            async with self._session_factory() as session, session.begin():
                tenant = await self._catalog_factory(session).update(
                    tenant_id, changes, elevated=caller.elevated
                )
        except PermissionDeniedError:
            self._probe.tenant_update_denied(
                tenant_id=tenant_id.value, fields=sorted(changes)
            )
            raise

        self._probe.tenant_updated(
            tenant_id=tenant.id.value,
            fields=sorted(changes),
            elevated=caller.elevated,
        )
        return tenant

    async def soft_delete_tenant(self, tenant_id: TenantId | str) -> Tenant:
        """Mark a tenant deleted. Idempotent; the schema is retained.

        Raises:
            NotFoundError: If the tenant does not exist
        """
        tenant_id = coerce_tenant_id(tenant_id)
        async with self._session_factory() as session, session.begin():
            tenant = await self._catalog_factory(session).soft_delete(tenant_id)

        self._probe.tenant_deleted(tenant_id=tenant.id.value)
        return tenant

    async def is_subdomain_available(self, subdomain: str) -> bool:
        """Check whether a subdomain could be provisioned right now.

        Reserved and syntactically invalid subdomains are never available.
        """
        subdomain = subdomain.strip().lower()
        if subdomain in self._settings.reserved_subdomains or not is_valid_subdomain(
            subdomain
        ):
            return False
        async with self._session_factory() as session:
            return await self._catalog_factory(session).is_subdomain_available(
                subdomain
            )

    async def resolve_tenant(self, host_or_subdomain: str) -> Tenant:
        """Resolve a host, bare subdomain or custom domain to its tenant.

        Hosts are lowercased and stripped of any port. A host under the
        platform base domain resolves by its first label, a bare label is
        treated as a subdomain, and any other dotted host is looked up as a
        custom domain. Reserved labels never resolve.

        Raises:
            NotFoundError: If no non-deleted tenant matches
            TenantSuspendedError: If the tenant is suspended
            TenantExpiredError: If the tenant or its trial has expired
        """
        host = normalize_host(host_or_subdomain)
        subdomain = self._subdomain_for(host)

        if subdomain == "":
            self._probe.tenant_unresolved(host=host, reason="no_tenant_label")
            raise NotFoundError(f"No tenant for '{host}'")
        if subdomain in self._settings.reserved_subdomains:
            self._probe.tenant_unresolved(host=host, reason="reserved")
            raise NotFoundError(f"No tenant for '{host}'")

        async with self._session_factory() as session:
            catalog = self._catalog_factory(session)
            if subdomain is not None:
                tenant = await catalog.find_by_subdomain(subdomain)
            else:
                tenant = await catalog.find_by_custom_domain(host)

        if tenant is None:
            self._probe.tenant_unresolved(host=host, reason="not_found")
            raise NotFoundError(f"No tenant for '{host}'")

        try:
            tenant.ensure_serviceable()
        except TenantUnavailableError:
            self._probe.tenant_unresolved(host=host, reason=tenant.status.value)
            raise

        self._probe.tenant_resolved(host=host, tenant_id=tenant.id.value)
        return tenant

    def _subdomain_for(self, host: str) -> str | None:
        """Return the subdomain a host names, or None for a custom domain.

        An empty string means the host is under the base domain but names no
        tenant.
        """
        base_domain = self._settings.base_domain
        if host == base_domain:
            return ""
        if host.endswith(f".{base_domain}"):
            label = host[: -len(base_domain) - 1]
            # Only one label may precede the base domain
            return "" if "." in label else label
        if "." not in host:
            return host
        return None


def normalize_host(host: str) -> str:
    """Lowercase a host and drop any port and trailing dot."""
    host = host.strip().lower()
    name, sep, port = host.rpartition(":")
    if sep and port.isdigit():
        host = name
    return host.rstrip(".")
