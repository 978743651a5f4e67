"""Value objects for the tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from ulid import ULID

from tenancy.ports.exceptions import ValidationError

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
SUBDOMAIN_MIN_LENGTH = 2
SUBDOMAIN_MAX_LENGTH = 50

# PostgreSQL truncates identifiers beyond 63 bytes
SCHEMA_NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")

DEFAULT_SCHEMA_PREFIX = "tenant_"


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid TenantId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class UserId:
    """Identifier for a user inside a tenant schema."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new UserId using ULID."""
        return cls(value=str(ULID()))


class TenantStatus(StrEnum):
    """Lifecycle status of a tenant.

    DELETED is terminal for traffic but the tenant schema stays in place.
    """

    ACTIVE = "active"
    SUSPENDED = "suspended"
    TRIAL = "trial"
    EXPIRED = "expired"
    DELETED = "deleted"


class TenantPlan(StrEnum):
    """Subscription plan of a tenant."""

    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class UserRole(StrEnum):
    """Role of a user inside a tenant."""

    ADMIN = "admin"
    EDITOR = "editor"
    AUTHOR = "author"
    REVIEWER = "reviewer"


class UserStatus(StrEnum):
    """Account status of a user inside a tenant."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class ArticleStatus(StrEnum):
    """Publication status of an article."""

    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"
    ARCHIVED = "archived"


class CommentStatus(StrEnum):
    """Moderation status of a comment."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SPAM = "spam"


UNLIMITED = -1


@dataclass(frozen=True)
class PlanLimits:
    """Resource limits granted by a plan.

    A value of -1 means unlimited.
    """

    max_articles: int
    max_users: int
    max_storage_mb: int

    @classmethod
    def for_plan(cls, plan: TenantPlan) -> PlanLimits:
        """Return the default limits for a plan."""
        return _PLAN_LIMITS[TenantPlan(plan)]

    def as_dict(self) -> dict[str, int]:
        return {
            "max_articles": self.max_articles,
            "max_users": self.max_users,
            "max_storage_mb": self.max_storage_mb,
        }


_PLAN_LIMITS: dict[TenantPlan, PlanLimits] = {
    TenantPlan.FREE: PlanLimits(max_articles=100, max_users=3, max_storage_mb=1000),
    TenantPlan.PRO: PlanLimits(max_articles=10000, max_users=10, max_storage_mb=10000),
    TenantPlan.ENTERPRISE: PlanLimits(
        max_articles=UNLIMITED, max_users=UNLIMITED, max_storage_mb=UNLIMITED
    ),
}


def is_valid_subdomain(subdomain: str) -> bool:
    """Check subdomain syntax: 2..50 chars of [a-z0-9-], alphanumeric at both ends."""
    return (
        SUBDOMAIN_MIN_LENGTH <= len(subdomain) <= SUBDOMAIN_MAX_LENGTH
        and SUBDOMAIN_PATTERN.fullmatch(subdomain) is not None
    )


def derive_schema_name(subdomain: str, prefix: str = DEFAULT_SCHEMA_PREFIX) -> str:
    """Derive the tenant schema name from a subdomain.

    The result is deterministic: the prefix followed by the subdomain with
    hyphens replaced by underscores, e.g. ``my-blog`` -> ``tenant_my_blog``.

    Raises:
        ValueError: If the subdomain is not syntactically valid
    """
    if not is_valid_subdomain(subdomain):
        raise ValueError(f"Invalid subdomain: {subdomain!r}")
    return f"{prefix}{subdomain.replace('-', '_')}"


def is_valid_schema_name(schema_name: str) -> bool:
    """Check that a schema name is a plain lowercase identifier."""
    return SCHEMA_NAME_PATTERN.fullmatch(schema_name) is not None


E = TypeVar("E", bound=StrEnum)


def _coerce_enum(enum_type: type[E], value: object, field: str) -> E:
    try:
        return enum_type(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(
            f"{field} must be one of: {allowed}", field=field
        ) from e


T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


@dataclass(frozen=True)
class TenantFilter:
    """Criteria for listing tenants.

    Deleted tenants are excluded unless include_deleted is set or the
    status filter asks for them explicitly.
    """

    status: TenantStatus | None = None
    plan: TenantPlan | None = None
    include_deleted: bool = False

    def __post_init__(self) -> None:
        if self.status is not None:
            object.__setattr__(
                self, "status", _coerce_enum(TenantStatus, self.status, "status")
            )
        if self.plan is not None:
            object.__setattr__(
                self, "plan", _coerce_enum(TenantPlan, self.plan, "plan")
            )


@dataclass(frozen=True)
class PageRequest:
    """A 1-based page of at most MAX_PAGE_LIMIT items."""

    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("page must be >= 1", field="page")
        if not 1 <= self.limit <= MAX_PAGE_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {MAX_PAGE_LIMIT}", field="limit"
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus pagination metadata."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
