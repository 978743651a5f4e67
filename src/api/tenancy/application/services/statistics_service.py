"""Statistics application service for the tenancy bounded context."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from infrastructure.database.exceptions import DatabaseError
from infrastructure.settings import TenancySettings, get_tenancy_settings
from tenancy.application.observability import (
    DefaultStatisticsServiceProbe,
    StatisticsServiceProbe,
)
from tenancy.application.services._common import CatalogFactory, coerce_tenant_id
from tenancy.application.value_objects import TenantStatistics
from tenancy.domain.value_objects import TenantId
from tenancy.infrastructure.schema_context import with_tenant_context
from tenancy.infrastructure.schema_template import (
    articles,
    categories,
    comments,
    tags,
    users,
)
from tenancy.infrastructure.tenant_catalog import TenantCatalog
from tenancy.ports.exceptions import NotFoundError, StatisticsError


async def count_content(connection: AsyncConnection) -> TenantStatistics:
    """Count the rows of a tenant's content tables on a scoped connection."""
    counts: dict[str, int] = {}
    for table in (articles, users, categories, tags, comments):
        result = await connection.execute(select(func.count()).select_from(table))
        counts[table.name] = result.scalar_one()
    return TenantStatistics(**counts)


class StatisticsService:
    """Application service aggregating per-tenant content counts.

    All counts run in one read-only tenant scope and therefore observe the
    same snapshot. Either every count succeeds or the call fails.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        settings: TenancySettings | None = None,
        catalog_factory: CatalogFactory = TenantCatalog,
        probe: StatisticsServiceProbe | None = None,
    ):
        self._engine = engine
        self._session_factory = session_factory
        self._settings = settings or get_tenancy_settings()
        self._catalog_factory = catalog_factory
        self._probe = probe or DefaultStatisticsServiceProbe()

    async def get_statistics(
        self, tenant_id: TenantId | str, include_deleted: bool = False
    ) -> TenantStatistics:
        """Count articles, users, categories, tags and comments of a tenant.

        Args:
            tenant_id: Tenant to aggregate
            include_deleted: Also serve soft-deleted tenants

        Raises:
            NotFoundError: If the tenant is unknown, or deleted without
                include_deleted
            StatisticsError: If any count fails
        """
        tenant_id = coerce_tenant_id(tenant_id)
        async with self._session_factory() as session:
            tenant = await self._catalog_factory(session).get(tenant_id)

        if tenant is None or (tenant.is_deleted and not include_deleted):
            raise NotFoundError(f"Tenant {tenant_id} not found")

        try:
            statistics = await with_tenant_context(
                self._engine,
                tenant.schema_name,
                count_content,
                read_only=True,
                shared_schema=self._settings.shared_schema,
            )
        except (SQLAlchemyError, DatabaseError, OSError) as e:
            self._probe.tenant_statistics_failed(
                tenant.id.value, tenant.schema_name, e
            )
            raise StatisticsError(
                f"Could not compute statistics for tenant {tenant_id}"
            ) from e

        self._probe.tenant_statistics_computed(
            tenant.id.value, tenant.schema_name, statistics.as_dict()
        )
        return statistics
