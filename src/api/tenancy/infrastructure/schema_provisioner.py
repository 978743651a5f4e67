"""Materialization of tenant schemas.

The provisioner runs on the connection of an open transaction, so the
schema, its tables and the first administrator become visible together
with the catalog row or not at all. PostgreSQL DDL is transactional, which
makes a rollback remove the schema as well.
"""

from __future__ import annotations

from sqlalchemy import insert, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from tenancy.domain.aggregates import TenantUser
from tenancy.infrastructure.observability import (
    DefaultSchemaProvisionerProbe,
    SchemaProvisionerProbe,
)
from tenancy.infrastructure.schema_context import quote_schema
from tenancy.infrastructure.schema_template import (
    TENANT_SCHEMA_VERSION,
    TENANT_TABLES,
    materialize,
    schema_translate_map,
    users,
)
from tenancy.ports.exceptions import ProvisioningError


class SchemaProvisioner:
    """Creates tenant schemas from the schema template."""

    def __init__(self, probe: SchemaProvisionerProbe | None = None) -> None:
        self._probe = probe or DefaultSchemaProvisionerProbe()

    async def create_schema(
        self, connection: AsyncConnection, schema_name: str
    ) -> None:
        """Create a tenant schema and every template table inside it.

        The schema is created without IF NOT EXISTS, so an existing schema
        of the same name fails the call instead of being reused.

        Args:
            connection: Connection inside the provisioning transaction
            schema_name: Derived tenant schema name

        Raises:
            InvalidSchemaNameError: If schema_name is not a valid schema name
            ProvisioningError: If the schema exists or any DDL fails
        """
        quoted = quote_schema(schema_name)
        try:
            await connection.execute(text(f"CREATE SCHEMA {quoted}"))
            await connection.execution_options(
                schema_translate_map=schema_translate_map(schema_name)
            )
            await connection.run_sync(materialize)
        except SQLAlchemyError as e:
            self._probe.tenant_schema_creation_failed(schema_name, e)
            raise ProvisioningError(
                f"Could not create tenant schema '{schema_name}'"
            ) from e

        self._probe.tenant_schema_created(
            schema_name,
            table_count=len(TENANT_TABLES),
            template_version=TENANT_SCHEMA_VERSION,
        )

    async def seed_admin_user(
        self, connection: AsyncConnection, schema_name: str, admin: TenantUser
    ) -> None:
        """Insert the first administrator into a freshly created schema.

        Raises:
            ProvisioningError: If the insert fails
        """
        stmt = insert(users).values(
            id=admin.id.value,
            tenant_id=admin.tenant_id.value,
            email=admin.email,
            password_hash=admin.password_hash,
            name=admin.name,
            role=admin.role.value,
            status=admin.status.value,
            created_at=admin.created_at,
            updated_at=admin.updated_at,
        )
        try:
            await connection.execute(
                stmt,
                execution_options={
                    "schema_translate_map": schema_translate_map(schema_name)
                },
            )
        except SQLAlchemyError as e:
            self._probe.tenant_schema_creation_failed(schema_name, e)
            raise ProvisioningError(
                f"Could not create the administrator for '{schema_name}'"
            ) from e

        self._probe.admin_user_seeded(schema_name, admin.id.value)
