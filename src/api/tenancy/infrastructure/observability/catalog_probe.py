"""Domain probe for tenant catalog operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to catalog persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TenantCatalogProbe(Protocol):
    """Domain probe for tenant catalog operations."""

    def tenant_inserted(self, tenant_id: str, subdomain: str, schema_name: str) -> None:
        """Record that a catalog row was inserted (not yet committed)."""
        ...

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_not_found(self, lookup: str, value: str) -> None:
        """Record that a lookup found no tenant."""
        ...

    def tenant_updated(self, tenant_id: str, fields: list[str]) -> None:
        """Record that a tenant was updated."""
        ...

    def tenant_soft_deleted(self, tenant_id: str, already_deleted: bool) -> None:
        """Record that a tenant was marked deleted."""
        ...

    def tenants_listed(self, count: int, total: int) -> None:
        """Record that a page of tenants was listed."""
        ...

    def duplicate_subdomain(self, subdomain: str) -> None:
        """Record that an active tenant already owns a subdomain."""
        ...

    def schema_name_collision(self, schema_name: str) -> None:
        """Record that a schema name is already recorded in the catalog."""
        ...

    def with_context(self, context: ObservationContext) -> TenantCatalogProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantCatalogProbe:
    """Default implementation of TenantCatalogProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context
        self._log = (
            self._logger.bind(**context.as_dict()) if context else self._logger
        )

    def with_context(self, context: ObservationContext) -> DefaultTenantCatalogProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantCatalogProbe(logger=self._logger, context=context)

    def tenant_inserted(self, tenant_id: str, subdomain: str, schema_name: str) -> None:
        self._log.debug(
            "tenant_catalog_row_inserted",
            tenant_id=tenant_id,
            subdomain=subdomain,
            schema_name=schema_name,
        )

    def tenant_retrieved(self, tenant_id: str) -> None:
        self._log.debug(
            "tenant_retrieved",
            tenant_id=tenant_id,
        )

    def tenant_not_found(self, lookup: str, value: str) -> None:
        self._log.debug(
            "tenant_not_found",
            lookup=lookup,
            value=value,
        )

    def tenant_updated(self, tenant_id: str, fields: list[str]) -> None:
        self._log.info(
            "tenant_updated",
            tenant_id=tenant_id,
            fields=fields,
        )

    def tenant_soft_deleted(self, tenant_id: str, already_deleted: bool) -> None:
        self._log.info(
            "tenant_soft_deleted",
            tenant_id=tenant_id,
            already_deleted=already_deleted,
        )

    def tenants_listed(self, count: int, total: int) -> None:
        self._log.debug(
            "tenants_listed",
            count=count,
            total=total,
        )

    def duplicate_subdomain(self, subdomain: str) -> None:
        self._log.warning(
            "duplicate_subdomain",
            subdomain=subdomain,
        )

    def schema_name_collision(self, schema_name: str) -> None:
        self._log.error(
            "schema_name_collision",
            schema_name=schema_name,
        )
