"""create tenants catalog

Revision ID: 3c9a1f2b7d40
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c9a1f2b7d40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(length=26), nullable=False),  # ULID
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("subdomain", sa.String(length=50), nullable=False),
        sa.Column("schema_name", sa.String(length=63), nullable=False),
        sa.Column(
            "status", sa.String(length=20), server_default="active", nullable=False
        ),
        sa.Column("plan", sa.String(length=20), server_default="free", nullable=False),
        sa.Column(
            "settings",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_tenants"),
        sa.UniqueConstraint("schema_name", name="uq_tenants_schema_name"),
        sa.CheckConstraint(
            "status IN ('active', 'suspended', 'trial', 'expired', 'deleted')",
            name="ck_tenants_status",
        ),
        sa.CheckConstraint(
            "plan IN ('free', 'pro', 'enterprise')", name="ck_tenants_plan"
        ),
    )
    # A deleted tenant releases its subdomain but keeps its schema
    op.create_index(
        "uq_tenants_subdomain_active",
        "tenants",
        ["subdomain"],
        unique=True,
        postgresql_where=sa.text("status <> 'deleted'"),
    )
    op.create_index("ix_tenants_status", "tenants", ["status"])
    op.create_index("ix_tenants_created_at", "tenants", ["created_at"])


def downgrade() -> None:
    """Downgrade schema.

    Tenant schemas are left in place; an operator removes them.
    """
    op.drop_index("ix_tenants_created_at", table_name="tenants")
    op.drop_index("ix_tenants_status", table_name="tenants")
    op.drop_index("uq_tenants_subdomain_active", table_name="tenants")
    op.drop_table("tenants")
