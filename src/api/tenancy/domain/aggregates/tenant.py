"""Tenant aggregate for the tenancy context."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from tenancy.domain.tenant_settings import default_settings, merge_settings
from tenancy.domain.value_objects import (
    DEFAULT_SCHEMA_PREFIX,
    TenantId,
    TenantPlan,
    TenantStatus,
    derive_schema_name,
)
from tenancy.ports.exceptions import (
    PermissionDeniedError,
    TenantExpiredError,
    TenantSuspendedError,
    ValidationError,
)

# Fields only an elevated caller may change
PRIVILEGED_FIELDS = frozenset({"status", "plan"})
UPDATABLE_FIELDS = frozenset({"name", "status", "plan", "settings", "expires_at"})


@dataclass
class Tenant:
    """Tenant aggregate representing one isolated blog.

    A tenant owns a catalog row in the shared schema and a dedicated
    PostgreSQL schema holding its content tables.

    Business rules:
    - The subdomain is unique among non-deleted tenants
    - The schema name is derived from the subdomain and never changes
    - Deletion is a status transition; the schema is retained
    - Only elevated callers may change status or plan
    """

    id: TenantId
    name: str
    subdomain: str
    schema_name: str
    status: TenantStatus
    plan: TenantPlan
    settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    expires_at: datetime | None = None

    @classmethod
    def create(
        cls,
        name: str,
        subdomain: str,
        plan: TenantPlan = TenantPlan.FREE,
        schema_prefix: str = DEFAULT_SCHEMA_PREFIX,
        expires_at: datetime | None = None,
    ) -> Tenant:
        """Factory method for a new, active tenant.

        Generates the ID, derives the schema name and seeds the settings
        document with the plan's limits.

        Raises:
            ValidationError: If the subdomain is not syntactically valid
        """
        try:
            schema_name = derive_schema_name(subdomain, schema_prefix)
        except ValueError as e:
            raise ValidationError(str(e), field="subdomain") from e

        now = datetime.now(UTC)
        plan = TenantPlan(plan)
        return cls(
            id=TenantId.generate(),
            name=name,
            subdomain=subdomain,
            schema_name=schema_name,
            status=TenantStatus.ACTIVE,
            plan=plan,
            settings=default_settings(plan),
            created_at=now,
            updated_at=now,
            expires_at=expires_at,
        )

    @property
    def is_deleted(self) -> bool:
        return self.status == TenantStatus.DELETED

    @property
    def custom_domain(self) -> str | None:
        return self.settings.get("custom_domain")

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the tenant has expired.

        A tenant is expired when its status says so, or when it is on a
        trial whose expiry date has passed.
        """
        if self.status == TenantStatus.EXPIRED:
            return True
        if self.status == TenantStatus.TRIAL and self.expires_at is not None:
            return self.expires_at <= (now or datetime.now(UTC))
        return False

    def ensure_serviceable(self, now: datetime | None = None) -> None:
        """Raise if the tenant may not serve traffic.

        Deleted tenants are handled by the caller as not found.

        Raises:
            TenantSuspendedError: If the tenant is suspended
            TenantExpiredError: If the tenant or its trial has expired
        """
        if self.status == TenantStatus.SUSPENDED:
            raise TenantSuspendedError(
                f"Tenant '{self.subdomain}' is suspended", tenant_id=self.id.value
            )
        if self.is_expired(now):
            raise TenantExpiredError(
                f"Tenant '{self.subdomain}' has expired", tenant_id=self.id.value
            )

    def apply_update(self, changes: Mapping[str, Any], *, elevated: bool) -> None:
        """Apply a partial update to the tenant.

        Settings are merged into the existing document. Limits are not
        recomputed when the plan changes.

        Args:
            changes: Field name to new value, only for fields being changed
            elevated: Whether the caller may change privileged fields

        Raises:
            ValidationError: If an unknown field is given
            PermissionDeniedError: If a non-elevated caller changes status or plan
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}"
            )

        privileged = {
            field
            for field in PRIVILEGED_FIELDS & set(changes)
            if changes[field] != getattr(self, field)
        }
        if privileged and not elevated:
            raise PermissionDeniedError(
                f"Changing {', '.join(sorted(privileged))} requires elevated privileges"
            )

        if "name" in changes:
            self.name = changes["name"]
        if "status" in changes:
            self.status = TenantStatus(changes["status"])
        if "plan" in changes:
            self.plan = TenantPlan(changes["plan"])
        if "settings" in changes and changes["settings"] is not None:
            self.settings = merge_settings(self.settings, changes["settings"])
        if "expires_at" in changes:
            self.expires_at = changes["expires_at"]

        self.updated_at = datetime.now(UTC)

    def soft_delete(self) -> bool:
        """Mark the tenant deleted.

        Returns:
            True if the status changed, False if it was already deleted
        """
        if self.is_deleted:
            return False
        self.status = TenantStatus.DELETED
        self.updated_at = datetime.now(UTC)
        return True
