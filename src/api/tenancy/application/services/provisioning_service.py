"""Provisioning application service for the tenancy bounded context.

Creates the catalog row, the tenant schema with all template tables and
the first administrator in one transaction.
"""

from __future__ import annotations

import asyncio

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.exceptions import DatabaseError
from infrastructure.settings import TenancySettings, get_tenancy_settings
from tenancy.application.observability import (
    DefaultProvisioningServiceProbe,
    ProvisioningServiceProbe,
)
from tenancy.application.services._common import CatalogFactory
from tenancy.application.value_objects import ProvisioningRequest, ProvisioningResult
from tenancy.domain.aggregates import Tenant, TenantUser
from tenancy.infrastructure.schema_provisioner import SchemaProvisioner
from tenancy.infrastructure.tenant_catalog import TenantCatalog
from tenancy.ports.exceptions import ConflictError, ProvisioningError, ValidationError


class ProvisioningService:
    """Application service provisioning new tenants.

    A tenant exists for other components only once its catalog row, its
    schema with every template table and its administrator have been
    committed together. Any failure before commit, including a timeout or
    caller cancellation, leaves neither a catalog row nor a schema behind.
    Once committed, undoing a provisioning requires an explicit soft delete.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: TenancySettings | None = None,
        catalog_factory: CatalogFactory = TenantCatalog,
        provisioner: SchemaProvisioner | None = None,
        probe: ProvisioningServiceProbe | None = None,
    ):
        """Initialize ProvisioningService with dependencies.

        Args:
            session_factory: Factory for per-call database sessions
            settings: Tenancy settings (defaults to the cached environment settings)
            catalog_factory: Builds a catalog bound to a session
            provisioner: Creates tenant schemas and seeds the administrator
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._settings = settings or get_tenancy_settings()
        self._catalog_factory = catalog_factory
        self._provisioner = provisioner or SchemaProvisioner()
        self._probe = probe or DefaultProvisioningServiceProbe()

    async def provision(self, request: ProvisioningRequest) -> ProvisioningResult:
        """Provision a tenant.

        Args:
            request: Validated provisioning input

        Returns:
            The committed tenant and its administrator

        Raises:
            ValidationError: If the subdomain is reserved
            ConflictError: If a non-deleted tenant owns the subdomain
            ProvisioningError: If storage or DDL fails, the schema name is
                taken, or the time limit is exceeded
        """
        if request.subdomain in self._settings.reserved_subdomains:
            self._probe.reserved_subdomain(request.subdomain)
            raise ValidationError(
                f"Subdomain '{request.subdomain}' is reserved", field="subdomain"
            )

        tenant = Tenant.create(
            name=request.name,
            subdomain=request.subdomain,
            plan=request.plan,
            schema_prefix=self._settings.schema_prefix,
        )
        admin = TenantUser.create_admin(
            tenant_id=tenant.id,
            email=str(request.admin_email),
            name=request.admin_name,
            password_hash=request.admin_password_hash,
        )

        timeout = self._settings.provisioning_timeout_seconds
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                await self._provision(tenant, admin)
        except TimeoutError as e:
            # Driver timeouts surface as TimeoutError too
            if not deadline.expired():
                self._probe.provisioning_failed(tenant.subdomain, e)
                raise ProvisioningError(
                    f"Could not provision tenant '{tenant.subdomain}'"
                ) from e
            self._probe.provisioning_timed_out(tenant.subdomain, timeout)
            raise ProvisioningError(
                f"Provisioning '{tenant.subdomain}' timed out after {timeout}s"
            ) from e
        except ConflictError:
            self._probe.duplicate_subdomain(tenant.subdomain)
            raise
        except ProvisioningError as e:
            self._probe.provisioning_failed(tenant.subdomain, e)
            raise
        except (SQLAlchemyError, DatabaseError, OSError) as e:
            self._probe.provisioning_failed(tenant.subdomain, e)
            raise ProvisioningError(
                f"Could not provision tenant '{tenant.subdomain}'"
            ) from e

        self._probe.tenant_provisioned(
            tenant_id=tenant.id.value,
            subdomain=tenant.subdomain,
            schema_name=tenant.schema_name,
            plan=tenant.plan.value,
        )
        return ProvisioningResult(tenant=tenant, admin_user=admin)

    async def _provision(self, tenant: Tenant, admin: TenantUser) -> None:
        """Run every provisioning step inside one transaction."""
        async with self._session_factory() as session, session.begin():
            await self._catalog_factory(session).create(tenant)
            connection = await session.connection()
            await self._provisioner.create_schema(connection, tenant.schema_name)
            await self._provisioner.seed_admin_user(
                connection, tenant.schema_name, admin
            )
