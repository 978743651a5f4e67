"""Tenant user entity seeded during provisioning."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from tenancy.domain.value_objects import TenantId, UserId, UserRole, UserStatus


@dataclass
class TenantUser:
    """A user row inside a tenant schema.

    Only the first administrator is created by the engine; every other user
    is managed by the blog application against the tenant's own tables.
    """

    id: UserId
    tenant_id: TenantId
    email: str
    name: str
    password_hash: str = field(repr=False)
    role: UserRole = UserRole.AUTHOR
    status: UserStatus = UserStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create_admin(
        cls,
        tenant_id: TenantId,
        email: str,
        name: str,
        password_hash: str,
    ) -> TenantUser:
        """Factory method for the first, active administrator of a tenant."""
        now = datetime.now(UTC)
        return cls(
            id=UserId.generate(),
            tenant_id=tenant_id,
            email=email,
            name=name,
            password_hash=password_hash,
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
