"""Database-specific exceptions shared by the tenancy engine."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class InvalidSchemaNameError(DatabaseError):
    """Raised when a schema name does not match the tenant naming pattern.

    Schema names end up in DDL and in ``SET LOCAL search_path``, so anything
    that was not produced by the schema name derivation is refused before it
    reaches the database.
    """

    def __init__(self, schema_name: str):
        super().__init__(f"Invalid tenant schema name: {schema_name!r}")
        self.schema_name = schema_name


class TenantScopeError(DatabaseError):
    """Raised when a unit of work inside a tenant scope fails at the database."""

    def __init__(self, message: str, schema_name: str | None = None):
        super().__init__(message)
        self.schema_name = schema_name
