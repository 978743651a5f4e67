"""PostgreSQL implementation of ITenantCatalog.

The catalog stores one row per tenant in the shared schema. It works inside
the caller's transaction: writes are flushed so integrity errors surface
early, but committing is left to the application service that owns the
unit of work.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import (
    Page,
    PageRequest,
    TenantFilter,
    TenantId,
    TenantPlan,
    TenantStatus,
)
from tenancy.infrastructure.models import (
    SCHEMA_NAME_CONSTRAINT,
    SUBDOMAIN_ACTIVE_INDEX,
    TenantModel,
)
from tenancy.infrastructure.observability import (
    DefaultTenantCatalogProbe,
    TenantCatalogProbe,
)
from tenancy.ports.exceptions import ConflictError, NotFoundError, ProvisioningError
from tenancy.ports.repositories import ITenantCatalog


class TenantCatalog(ITenantCatalog):
    """Catalog of tenants backed by the shared ``tenants`` table.

    Subdomain uniqueness among non-deleted tenants is checked before insert
    for a clear error, but the partial unique index is the final authority:
    a concurrent insert that slips past the check fails on the index and is
    reported the same way.
    """

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantCatalogProbe | None = None,
    ) -> None:
        """Initialize the catalog with a database session.

        Args:
            session: AsyncSession owned by the calling service
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultTenantCatalogProbe()

    async def create(self, tenant: Tenant) -> Tenant:
        """Insert a catalog row for a new tenant.

        Args:
            tenant: The Tenant aggregate to insert

        Returns:
            The inserted tenant

        Raises:
            ConflictError: If a non-deleted tenant owns the subdomain
            ProvisioningError: If the schema name is already recorded
        """
        if await self.find_by_subdomain(tenant.subdomain) is not None:
            self._probe.duplicate_subdomain(tenant.subdomain)
            raise ConflictError(f"Subdomain '{tenant.subdomain}' is already taken")

        model = TenantModel(
            id=tenant.id.value,
            name=tenant.name,
            subdomain=tenant.subdomain,
            schema_name=tenant.schema_name,
            status=tenant.status.value,
            plan=tenant.plan.value,
            settings=tenant.settings,
            created_at=tenant.created_at,
            updated_at=tenant.updated_at,
            expires_at=tenant.expires_at,
        )
        try:
            # Savepoint keeps the transaction usable for the re-check below
            async with self._session.begin_nested():
                self._session.add(model)
        except IntegrityError as e:
            # A concurrent insert of the same subdomain may trip the schema
            # name constraint before the subdomain index
            if SUBDOMAIN_ACTIVE_INDEX in str(e) or (
                SCHEMA_NAME_CONSTRAINT in str(e)
                and await self.find_by_subdomain(tenant.subdomain) is not None
            ):
                self._probe.duplicate_subdomain(tenant.subdomain)
                raise ConflictError(
                    f"Subdomain '{tenant.subdomain}' is already taken"
                ) from e
            if SCHEMA_NAME_CONSTRAINT in str(e):
                self._probe.schema_name_collision(tenant.schema_name)
                raise ProvisioningError(
                    f"Schema name '{tenant.schema_name}' is already in use"
                ) from e
            raise

        self._probe.tenant_inserted(
            tenant.id.value, tenant.subdomain, tenant.schema_name
        )
        return tenant

    async def get(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch a tenant by ID, whatever its status.

        Args:
            tenant_id: The unique identifier of the tenant

        Returns:
            The Tenant aggregate, or None if not found
        """
        model = await self._session.get(TenantModel, tenant_id.value)
        if model is None:
            self._probe.tenant_not_found("id", tenant_id.value)
            return None

        self._probe.tenant_retrieved(model.id)
        return self._to_domain(model)

    async def find_by_subdomain(self, subdomain: str) -> Tenant | None:
        """Fetch the non-deleted tenant owning a subdomain."""
        stmt = select(TenantModel).where(
            TenantModel.subdomain == subdomain,
            TenantModel.status != TenantStatus.DELETED.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found("subdomain", subdomain)
            return None

        self._probe.tenant_retrieved(model.id)
        return self._to_domain(model)

    async def find_by_custom_domain(self, domain: str) -> Tenant | None:
        """Fetch the non-deleted tenant whose settings name this custom domain.

        Domains compare case-insensitively.
        """
        custom_domain = TenantModel.settings["custom_domain"].astext
        stmt = (
            select(TenantModel)
            .where(
                func.lower(custom_domain) == domain.lower(),
                TenantModel.status != TenantStatus.DELETED.value,
            )
            .order_by(TenantModel.created_at)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found("custom_domain", domain)
            return None

        self._probe.tenant_retrieved(model.id)
        return self._to_domain(model)

    async def update(
        self,
        tenant_id: TenantId,
        changes: Mapping[str, Any],
        *,
        elevated: bool = False,
    ) -> Tenant:
        """Apply a partial update to a tenant.

        The row is locked for the rest of the transaction so concurrent
        settings merges do not lose each other's keys.

        Raises:
            NotFoundError: If the tenant does not exist
            PermissionDeniedError: If a non-elevated caller changes status or plan
            ConflictError: If reactivating a tenant whose subdomain is taken
        """
        model = await self._get_model_for_update(tenant_id)
        tenant = self._to_domain(model)
        tenant.apply_update(changes, elevated=elevated)
        self._copy_to_model(tenant, model)

        try:
            await self._session.flush()
        except IntegrityError as e:
            if SUBDOMAIN_ACTIVE_INDEX in str(e):
                self._probe.duplicate_subdomain(tenant.subdomain)
                raise ConflictError(
                    f"Subdomain '{tenant.subdomain}' is already taken"
                ) from e
            raise

        self._probe.tenant_updated(tenant.id.value, sorted(changes))
        return tenant

    async def soft_delete(self, tenant_id: TenantId) -> Tenant:
        """Mark a tenant deleted, leaving its schema untouched.

        Deleting an already-deleted tenant succeeds without changes.

        Raises:
            NotFoundError: If the tenant does not exist
        """
        model = await self._get_model_for_update(tenant_id)
        tenant = self._to_domain(model)

        changed = tenant.soft_delete()
        if changed:
            self._copy_to_model(tenant, model)
            await self._session.flush()

        self._probe.tenant_soft_deleted(tenant.id.value, already_deleted=not changed)
        return tenant

    async def list(
        self, tenant_filter: TenantFilter, page: PageRequest
    ) -> Page[Tenant]:
        """List tenants matching a filter, newest first.

        Deleted tenants only appear when the filter includes them or asks
        for the deleted status explicitly.
        """
        conditions = []
        if tenant_filter.status is not None:
            status = TenantStatus(tenant_filter.status)
            conditions.append(TenantModel.status == status.value)
        elif not tenant_filter.include_deleted:
            conditions.append(TenantModel.status != TenantStatus.DELETED.value)
        if tenant_filter.plan is not None:
            conditions.append(TenantModel.plan == TenantPlan(tenant_filter.plan).value)

        count_stmt = select(func.count()).select_from(TenantModel).where(*conditions)
        total = (await self._session.execute(count_stmt)).scalar_one()

        stmt = (
            select(TenantModel)
            .where(*conditions)
            .order_by(TenantModel.created_at.desc(), TenantModel.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        result = await self._session.execute(stmt)
        tenants = [self._to_domain(model) for model in result.scalars().all()]

        self._probe.tenants_listed(count=len(tenants), total=total)
        return Page(items=tenants, total=total, page=page.page, limit=page.limit)

    async def is_subdomain_available(self, subdomain: str) -> bool:
        """Check whether no non-deleted tenant owns a subdomain."""
        stmt = select(func.count()).select_from(TenantModel).where(
            TenantModel.subdomain == subdomain,
            TenantModel.status != TenantStatus.DELETED.value,
        )
        return (await self._session.execute(stmt)).scalar_one() == 0

    async def _get_model_for_update(self, tenant_id: TenantId) -> TenantModel:
        stmt = (
            select(TenantModel)
            .where(TenantModel.id == tenant_id.value)
            .with_for_update()
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.tenant_not_found("id", tenant_id.value)
            raise NotFoundError(f"Tenant {tenant_id} not found")
        return model

    @staticmethod
    def _to_domain(model: TenantModel) -> Tenant:
        """Reconstitute a Tenant aggregate from its row."""
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            subdomain=model.subdomain,
            schema_name=model.schema_name,
            status=TenantStatus(model.status),
            plan=TenantPlan(model.plan),
            settings=dict(model.settings or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
            expires_at=model.expires_at,
        )

    @staticmethod
    def _copy_to_model(tenant: Tenant, model: TenantModel) -> None:
        model.name = tenant.name
        model.status = tenant.status.value
        model.plan = tenant.plan.value
        model.settings = tenant.settings
        model.expires_at = tenant.expires_at
        model.updated_at = tenant.updated_at
