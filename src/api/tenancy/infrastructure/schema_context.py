"""Binding units of work to a tenant schema.

Each scope checks out one dedicated connection, opens a transaction on it
and issues ``SET LOCAL search_path`` so unqualified table names resolve
against the tenant schema first and the shared schema second. The setting
ends with the transaction, on commit or on rollback, before the connection
goes back to the pool. Template tables are additionally qualified at
compile time through ``schema_translate_map``.

No process-wide state is touched and no locks are taken, so any number of
scopes for different tenants can run concurrently.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import TextClause, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from infrastructure.database.exceptions import InvalidSchemaNameError, TenantScopeError
from tenancy.domain.value_objects import is_valid_schema_name
from tenancy.infrastructure.observability import (
    DefaultTenantScopeProbe,
    TenantScopeProbe,
)
from tenancy.infrastructure.schema_template import schema_translate_map

T = TypeVar("T")

DEFAULT_SHARED_SCHEMA = "public"


def quote_schema(schema_name: str) -> str:
    """Validate a schema name and return it as a quoted identifier.

    Raises:
        InvalidSchemaNameError: If the name is not a plain lowercase identifier
    """
    if not is_valid_schema_name(schema_name):
        raise InvalidSchemaNameError(schema_name)
    return f'"{schema_name}"'


def search_path_statement(
    schema_name: str, shared_schema: str = DEFAULT_SHARED_SCHEMA
) -> TextClause:
    """Build the transaction-scoped search_path statement for a tenant."""
    return text(
        f"SET LOCAL search_path TO {quote_schema(schema_name)}, "
        f"{quote_schema(shared_schema)}"
    )


@asynccontextmanager
async def tenant_scope(
    engine: AsyncEngine,
    schema_name: str,
    *,
    read_only: bool = False,
    shared_schema: str = DEFAULT_SHARED_SCHEMA,
    probe: TenantScopeProbe | None = None,
) -> AsyncIterator[AsyncConnection]:
    """Open a transaction bound to a tenant schema.

    Commits when the block exits normally and rolls back when it raises.
    Errors raised by the block propagate unchanged.

    Args:
        engine: Engine to check the dedicated connection out of
        schema_name: Tenant schema to resolve unqualified names against
        read_only: Run at REPEATABLE READ in a read-only transaction so that
            every statement sees the same snapshot
        shared_schema: Schema searched after the tenant schema
        probe: Optional domain probe for observability

    Yields:
        The connection bound to the tenant schema

    Raises:
        InvalidSchemaNameError: If schema_name is not a valid schema name
        TenantScopeError: If the scope could not be established
    """
    statement = search_path_statement(schema_name, shared_schema)
    probe = probe or DefaultTenantScopeProbe()

    options: dict[str, Any] = {
        "schema_translate_map": schema_translate_map(schema_name)
    }
    if read_only:
        options["isolation_level"] = "REPEATABLE READ"
        options["postgresql_readonly"] = True

    entered = False
    try:
        async with engine.connect() as connection:
            connection = await connection.execution_options(**options)
            async with connection.begin():
                await connection.execute(statement)
                probe.tenant_scope_entered(schema_name, read_only=read_only)
                entered = True
                yield connection
    except (SQLAlchemyError, OSError) as e:
        probe.tenant_scope_failed(schema_name, e)
        if entered:
            raise
        raise TenantScopeError(
            f"Could not enter tenant scope for schema {schema_name!r}",
            schema_name=schema_name,
        ) from e
    except Exception as e:
        probe.tenant_scope_failed(schema_name, e)
        raise


async def with_tenant_context(
    engine: AsyncEngine,
    schema_name: str,
    operation: Callable[[AsyncConnection], Awaitable[T]],
    *,
    read_only: bool = False,
    shared_schema: str = DEFAULT_SHARED_SCHEMA,
    probe: TenantScopeProbe | None = None,
) -> T:
    """Run an operation with table references resolved against a tenant schema.

    The operation receives the scoped connection and may use unqualified
    table names in textual SQL or template tables in Core statements. Its
    result is returned after the transaction commits.

    Example:
        async def count_articles(conn: AsyncConnection) -> int:
            result = await conn.execute(text("SELECT count(*) FROM articles"))
            return result.scalar_one()

        total = await with_tenant_context(engine, "tenant_acme", count_articles)
    """
    async with tenant_scope(
        engine,
        schema_name,
        read_only=read_only,
        shared_schema=shared_schema,
        probe=probe,
    ) as connection:
        return await operation(connection)
