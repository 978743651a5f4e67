"""Protocol for statistics service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class StatisticsServiceProbe(Protocol):
    """Domain probe for tenant statistics aggregation."""

    def tenant_statistics_computed(
        self, tenant_id: str, schema_name: str, counts: dict[str, int]
    ) -> None:
        """Record that statistics were computed for a tenant."""
        ...

    def tenant_statistics_failed(
        self, tenant_id: str, schema_name: str, error: Exception
    ) -> None:
        """Record that a count query failed and no statistics were returned."""
        ...

    def with_context(self, context: ObservationContext) -> StatisticsServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStatisticsServiceProbe:
    """Default implementation of StatisticsServiceProbe using structlog."""

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
    ) -> DefaultStatisticsServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultStatisticsServiceProbe(logger=self._logger, context=context)

    def tenant_statistics_computed(
        self, tenant_id: str, schema_name: str, counts: dict[str, int]
    ) -> None:
        self._log.debug(
            "tenant_statistics_computed",
            tenant_id=tenant_id,
            schema_name=schema_name,
            **counts,
        )

    def tenant_statistics_failed(
        self, tenant_id: str, schema_name: str, error: Exception
    ) -> None:
        self._log.error(
            "tenant_statistics_failed",
            tenant_id=tenant_id,
            schema_name=schema_name,
            error=str(error),
            error_type=type(error).__name__,
        )
