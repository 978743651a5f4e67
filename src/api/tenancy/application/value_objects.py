"""Application-layer value objects for the tenancy bounded context.

Requests entering the engine are pydantic models so that malformed input
is rejected before any storage is touched. Results leaving the engine are
plain frozen dataclasses.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from tenancy.domain.aggregates import Tenant, TenantUser
from tenancy.domain.value_objects import (
    SUBDOMAIN_MAX_LENGTH,
    SUBDOMAIN_MIN_LENGTH,
    SUBDOMAIN_PATTERN,
    TenantPlan,
    TenantStatus,
)
from tenancy.ports.exceptions import ValidationError


def _to_validation_error(error: pydantic.ValidationError) -> ValidationError:
    """Convert the first pydantic error into an engine ValidationError."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or None
    message = f"{location}: {first['msg']}" if location else first["msg"]
    return ValidationError(message, field=location)


class ProvisioningRequest(BaseModel):
    """Input for provisioning a tenant.

    Subdomains and admin emails are normalized to lowercase. Reserved
    subdomains depend on configuration and are checked by the service.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=100)
    subdomain: str = Field(
        min_length=SUBDOMAIN_MIN_LENGTH,
        max_length=SUBDOMAIN_MAX_LENGTH,
    )
    plan: TenantPlan = TenantPlan.FREE
    admin_email: EmailStr
    admin_password_hash: str = Field(min_length=1, repr=False)
    admin_name: str = Field(min_length=2, max_length=255)

    @field_validator("subdomain", mode="before")
    @classmethod
    def normalize_subdomain(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("subdomain")
    @classmethod
    def validate_subdomain(cls, value: str) -> str:
        if not SUBDOMAIN_PATTERN.fullmatch(value):
            raise ValueError(
                "must contain only lowercase letters, digits and hyphens, "
                "and start and end with a letter or digit"
            )
        return value

    @field_validator("admin_email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    @classmethod
    def from_input(cls, data: Mapping[str, Any]) -> ProvisioningRequest:
        """Validate raw input into a request.

        Raises:
            ValidationError: If any field is missing or malformed
        """
        try:
            return cls.model_validate(dict(data))
        except pydantic.ValidationError as e:
            raise _to_validation_error(e) from e


class TenantPatch(BaseModel):
    """Partial update of a tenant.

    Only fields explicitly set are applied; setting ``expires_at`` to None
    clears the expiry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=2, max_length=100)
    status: TenantStatus | None = None
    plan: TenantPlan | None = None
    settings: dict[str, Any] | None = None
    expires_at: datetime | None = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: TenantStatus | None) -> TenantStatus | None:
        if value == TenantStatus.DELETED:
            raise ValueError("use soft delete to delete a tenant")
        return value

    def changes(self) -> dict[str, Any]:
        """Return the fields that were explicitly set."""
        changes = self.model_dump(exclude_unset=True)
        for key in ("name", "status", "plan", "settings"):
            if key in changes and changes[key] is None:
                raise ValidationError(f"{key} cannot be null", field=key)
        return changes

    @classmethod
    def from_input(cls, data: Mapping[str, Any]) -> TenantPatch:
        """Validate raw input into a patch.

        Raises:
            ValidationError: If a field is unknown or malformed
        """
        try:
            return cls.model_validate(dict(data))
        except pydantic.ValidationError as e:
            raise _to_validation_error(e) from e


@dataclass(frozen=True)
class CallerContext:
    """Who is calling the engine.

    Elevated callers are platform operators; only they may change a
    tenant's status or plan.
    """

    user_id: str | None = None
    elevated: bool = False


@dataclass(frozen=True)
class ProvisioningResult:
    """Outcome of a successful provisioning."""

    tenant: Tenant
    admin_user: TenantUser


@dataclass(frozen=True)
class TenantStatistics:
    """Row counts of a tenant's content tables."""

    articles: int
    users: int
    categories: int
    tags: int
    comments: int

    def as_dict(self) -> dict[str, int]:
        return {
            "articles": self.articles,
            "users": self.users,
            "categories": self.categories,
            "tags": self.tags,
            "comments": self.comments,
        }
