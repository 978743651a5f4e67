"""Protocol for tenant application service observability.

Defines the interface for domain probes that capture application-level
domain events for catalog reads, updates and tenant resolution.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class TenantServiceProbe(Protocol):
    """Domain probe for tenant application service operations."""

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        ...

    def tenants_listed(self, count: int, total: int) -> None:
        """Record that tenants were listed."""
        ...

    def tenant_updated(self, tenant_id: str, fields: list[str], elevated: bool) -> None:
        """Record that a tenant was updated."""
        ...

    def tenant_update_denied(self, tenant_id: str, fields: list[str]) -> None:
        """Record that a non-elevated caller tried to change privileged fields."""
        ...

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was soft-deleted."""
        ...

    def tenant_resolved(self, host: str, tenant_id: str) -> None:
        """Record that a host or subdomain resolved to a tenant."""
        ...

    def tenant_unresolved(self, host: str, reason: str) -> None:
        """Record that a host or subdomain did not resolve to a usable tenant."""
        ...

    def with_context(self, context: ObservationContext) -> TenantServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantServiceProbe:
    """Default implementation of TenantServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantServiceProbe(logger=self._logger, context=context)

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a tenant was retrieved."""
        self._log.debug(
            "tenant_retrieved",
            tenant_id=tenant_id,
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        self._log.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
        )

    def tenants_listed(self, count: int, total: int) -> None:
        """Record that tenants were listed."""
        self._log.debug(
            "tenants_listed",
            count=count,
            total=total,
        )

    def tenant_updated(self, tenant_id: str, fields: list[str], elevated: bool) -> None:
        """Record that a tenant was updated."""
        self._log.info(
            "tenant_updated",
            tenant_id=tenant_id,
            fields=fields,
            elevated=elevated,
        )

    def tenant_update_denied(self, tenant_id: str, fields: list[str]) -> None:
        """Record that a non-elevated caller tried to change privileged fields."""
        self._log.warning(
            "tenant_update_denied",
            tenant_id=tenant_id,
            fields=fields,
        )

    def tenant_deleted(self, tenant_id: str) -> None:
        """Record that a tenant was soft-deleted."""
        self._log.info(
            "tenant_deleted",
            tenant_id=tenant_id,
        )

    def tenant_resolved(self, host: str, tenant_id: str) -> None:
        """Record that a host or subdomain resolved to a tenant."""
        self._log.debug(
            "tenant_resolved",
            host=host,
            tenant_id=tenant_id,
        )

    def tenant_unresolved(self, host: str, reason: str) -> None:
        """Record that a host or subdomain did not resolve to a usable tenant."""
        self._log.info(
            "tenant_unresolved",
            host=host,
            reason=reason,
        )
