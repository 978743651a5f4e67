"""Domain probes for tenant schema operations.

Covers schema materialization during provisioning and the per-call
tenant scopes used for data access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class SchemaProvisionerProbe(Protocol):
    """Domain probe for tenant schema materialization."""

    def tenant_schema_created(
        self, schema_name: str, table_count: int, template_version: int
    ) -> None:
        """Record that a tenant schema and its tables were created."""
        ...

    def tenant_schema_creation_failed(self, schema_name: str, error: Exception) -> None:
        """Record that creating a tenant schema failed."""
        ...

    def admin_user_seeded(self, schema_name: str, user_id: str) -> None:
        """Record that the first administrator was inserted."""
        ...

    def with_context(self, context: ObservationContext) -> SchemaProvisionerProbe:
        """Create a new probe with observation context bound."""
        ...


class TenantScopeProbe(Protocol):
    """Domain probe for tenant-scoped units of work."""

    def tenant_scope_entered(self, schema_name: str, read_only: bool) -> None:
        """Record that a unit of work was bound to a tenant schema."""
        ...

    def tenant_scope_failed(self, schema_name: str, error: Exception) -> None:
        """Record that a tenant-scoped unit of work failed and was rolled back."""
        ...

    def with_context(self, context: ObservationContext) -> TenantScopeProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSchemaProvisionerProbe:
    """Default implementation of SchemaProvisionerProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultSchemaProvisionerProbe:
        """Create a new probe with observation context bound."""
        return DefaultSchemaProvisionerProbe(logger=self._logger, context=context)

    def tenant_schema_created(
        self, schema_name: str, table_count: int, template_version: int
    ) -> None:
        self._log.info(
            "tenant_schema_created",
            schema_name=schema_name,
            table_count=table_count,
            template_version=template_version,
        )

    def tenant_schema_creation_failed(self, schema_name: str, error: Exception) -> None:
        self._log.error(
            "tenant_schema_creation_failed",
            schema_name=schema_name,
            error=str(error),
            error_type=type(error).__name__,
        )

    def admin_user_seeded(self, schema_name: str, user_id: str) -> None:
        self._log.debug(
            "tenant_admin_user_seeded",
            schema_name=schema_name,
            user_id=user_id,
        )


class DefaultTenantScopeProbe:
    """Default implementation of TenantScopeProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantScopeProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantScopeProbe(logger=self._logger, context=context)

    def tenant_scope_entered(self, schema_name: str, read_only: bool) -> None:
        self._log.debug(
            "tenant_scope_entered",
            schema_name=schema_name,
            read_only=read_only,
        )

    def tenant_scope_failed(self, schema_name: str, error: Exception) -> None:
        self._log.warning(
            "tenant_scope_failed",
            schema_name=schema_name,
            error=str(error),
            error_type=type(error).__name__,
        )
