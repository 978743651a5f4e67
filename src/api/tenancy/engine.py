"""Entry point of the tenancy engine.

TenancyEngine is what the rest of the platform talks to: request routing
resolves tenants through it, onboarding provisions through it and every
tenant-scoped query runs through ``with_tenant_context``.

Example:
    engine = TenancyEngine()
    result = await engine.provision_tenant(
        {
            "name": "Acme",
            "subdomain": "acme",
            "admin_email": "owner@acme.com",
            "admin_password_hash": hash_password("s3cret-pass"),
            "admin_name": "Ada Owner",
        }
    )
    stats = await engine.get_statistics(result.tenant.id)
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from infrastructure.database.dependencies import get_engine, get_sessionmaker
from infrastructure.settings import TenancySettings, get_tenancy_settings
from tenancy.application.services import (
    ProvisioningService,
    StatisticsService,
    TenantService,
)
from tenancy.application.value_objects import (
    CallerContext,
    ProvisioningRequest,
    ProvisioningResult,
    TenantPatch,
    TenantStatistics,
)
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import Page, PageRequest, TenantFilter, TenantId
from tenancy.infrastructure.observability import (
    DefaultTenantScopeProbe,
    TenantScopeProbe,
)
from tenancy.infrastructure.schema_context import tenant_scope, with_tenant_context

T = TypeVar("T")


class TenancyEngine:
    """Facade over tenant resolution, provisioning, scoping and statistics.

    Holds no mutable state of its own; every call checks out its own
    session or connection, so one instance is shared by all requests.
    """

    def __init__(
        self,
        engine: AsyncEngine | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        settings: TenancySettings | None = None,
        scope_probe: TenantScopeProbe | None = None,
    ):
        """Wire the engine's services.

        Args:
            engine: Database engine (defaults to the process-wide engine)
            session_factory: Session factory bound to ``engine``; built from it
                when omitted
            settings: Tenancy settings (defaults to the cached environment settings)
            scope_probe: Optional domain probe for tenant scopes
        """
        if engine is None:
            engine = get_engine()
            session_factory = session_factory or get_sessionmaker()
        elif session_factory is None:
            session_factory = async_sessionmaker(engine, expire_on_commit=False)

        self._engine = engine
        self._settings = settings or get_tenancy_settings()
        self._scope_probe = scope_probe or DefaultTenantScopeProbe()
        self.tenants = TenantService(session_factory, settings=self._settings)
        self.provisioning = ProvisioningService(
            session_factory, settings=self._settings
        )
        self.statistics = StatisticsService(
            engine, session_factory, settings=self._settings
        )

    async def resolve_tenant(self, subdomain_or_domain: str) -> Tenant:
        """Resolve a host, subdomain or custom domain to a serviceable tenant."""
        return await self.tenants.resolve_tenant(subdomain_or_domain)

    async def provision_tenant(
        self, request: ProvisioningRequest | Mapping[str, Any]
    ) -> ProvisioningResult:
        """Provision a tenant with its schema and first administrator.

        Raw mappings are validated first and rejected with ValidationError.
        """
        if not isinstance(request, ProvisioningRequest):
            request = ProvisioningRequest.from_input(request)
        return await self.provisioning.provision(request)

    async def with_tenant_context(
        self,
        schema_name: str,
        operation: Callable[[AsyncConnection], Awaitable[T]],
        *,
        read_only: bool = False,
    ) -> T:
        """Run an operation against a tenant schema and return its result."""
        return await with_tenant_context(
            self._engine,
            schema_name,
            operation,
            read_only=read_only,
            shared_schema=self._settings.shared_schema,
            probe=self._scope_probe,
        )

    @asynccontextmanager
    async def tenant_scope(
        self, schema_name: str, *, read_only: bool = False
    ) -> AsyncIterator[AsyncConnection]:
        """Context manager form of ``with_tenant_context``."""
        async with tenant_scope(
            self._engine,
            schema_name,
            read_only=read_only,
            shared_schema=self._settings.shared_schema,
            probe=self._scope_probe,
        ) as connection:
            yield connection

    async def get_statistics(
        self, tenant_id: TenantId | str, include_deleted: bool = False
    ) -> TenantStatistics:
        """Count the content of a tenant."""
        return await self.statistics.get_statistics(
            tenant_id, include_deleted=include_deleted
        )

    async def get_tenant(self, tenant_id: TenantId | str) -> Tenant:
        return await self.tenants.get_tenant(tenant_id)

    async def list_tenants(
        self,
        tenant_filter: TenantFilter | None = None,
        page: PageRequest | None = None,
    ) -> Page[Tenant]:
        return await self.tenants.list_tenants(tenant_filter, page)

    async def update_tenant(
        self,
        tenant_id: TenantId | str,
        patch: TenantPatch | Mapping[str, Any],
        caller: CallerContext | None = None,
    ) -> Tenant:
        """Apply a partial update; raw mappings are validated first."""
        if not isinstance(patch, TenantPatch):
            patch = TenantPatch.from_input(patch)
        return await self.tenants.update_tenant(tenant_id, patch, caller)

    async def soft_delete_tenant(self, tenant_id: TenantId | str) -> Tenant:
        return await self.tenants.soft_delete_tenant(tenant_id)

    async def is_subdomain_available(self, subdomain: str) -> bool:
        return await self.tenants.is_subdomain_available(subdomain)
