"""SQLAlchemy ORM model for the tenant catalog.

The catalog lives in the shared schema and maps every tenant to the
PostgreSQL schema holding its content tables.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint, DateTime, Index, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin

# Constraint names used to classify integrity errors
SUBDOMAIN_ACTIVE_INDEX = "uq_tenants_subdomain_active"
SCHEMA_NAME_CONSTRAINT = "uq_tenants_schema_name"


class TenantModel(Base, TimestampMixin):
    """ORM model for the tenants table.

    Subdomains are unique among non-deleted tenants only, enforced by a
    partial unique index. Schema names are unique across all rows because
    a deleted tenant keeps its schema.
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    subdomain: Mapped[str] = mapped_column(String(50), nullable=False)
    schema_name: Mapped[str] = mapped_column(String(63), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default="active"
    )
    plan: Mapped[str] = mapped_column(String(20), nullable=False, server_default="free")
    settings: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb")
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'suspended', 'trial', 'expired', 'deleted')",
            name="status",
        ),
        CheckConstraint("plan IN ('free', 'pro', 'enterprise')", name="plan"),
        Index(
            SUBDOMAIN_ACTIVE_INDEX,
            "subdomain",
            unique=True,
            postgresql_where=text("status <> 'deleted'"),
        ),
        Index("ix_tenants_status", "status"),
        Index("ix_tenants_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TenantModel(id={self.id}, subdomain={self.subdomain}, "
            f"schema_name={self.schema_name}, status={self.status})>"
        )
