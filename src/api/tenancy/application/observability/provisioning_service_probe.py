"""Protocol for provisioning service observability.

Defines the interface for domain probes that capture application-level
domain events for tenant provisioning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ProvisioningServiceProbe(Protocol):
    """Domain probe for tenant provisioning."""

    def tenant_provisioned(
        self, tenant_id: str, subdomain: str, schema_name: str, plan: str
    ) -> None:
        """Record that a tenant was fully provisioned and committed."""
        ...

    def duplicate_subdomain(self, subdomain: str) -> None:
        """Record that provisioning was refused for a taken subdomain."""
        ...

    def reserved_subdomain(self, subdomain: str) -> None:
        """Record that provisioning was refused for a reserved subdomain."""
        ...

    def provisioning_failed(self, subdomain: str, error: Exception) -> None:
        """Record that provisioning failed and was rolled back."""
        ...

    def provisioning_timed_out(self, subdomain: str, timeout_seconds: float) -> None:
        """Record that provisioning exceeded its time limit and was rolled back."""
        ...

    def with_context(self, context: ObservationContext) -> ProvisioningServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProvisioningServiceProbe:
    """Default implementation of ProvisioningServiceProbe using structlog."""

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
    ) -> DefaultProvisioningServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultProvisioningServiceProbe(logger=self._logger, context=context)

    def tenant_provisioned(
        self, tenant_id: str, subdomain: str, schema_name: str, plan: str
    ) -> None:
        """Record that a tenant was fully provisioned and committed."""
        self._log.info(
            "tenant_provisioned",
            tenant_id=tenant_id,
            subdomain=subdomain,
            schema_name=schema_name,
            plan=plan,
        )

    def duplicate_subdomain(self, subdomain: str) -> None:
        """Record that provisioning was refused for a taken subdomain."""
        self._log.warning(
            "duplicate_subdomain",
            subdomain=subdomain,
        )

    def reserved_subdomain(self, subdomain: str) -> None:
        """Record that provisioning was refused for a reserved subdomain."""
        self._log.warning(
            "reserved_subdomain",
            subdomain=subdomain,
        )

    def provisioning_failed(self, subdomain: str, error: Exception) -> None:
        """Record that provisioning failed and was rolled back."""
        self._log.error(
            "provisioning_failed",
            subdomain=subdomain,
            error=str(error),
            error_type=type(error).__name__,
        )

    def provisioning_timed_out(self, subdomain: str, timeout_seconds: float) -> None:
        """Record that provisioning exceeded its time limit and was rolled back."""
        self._log.error(
            "provisioning_timed_out",
            subdomain=subdomain,
            timeout_seconds=timeout_seconds,
        )
