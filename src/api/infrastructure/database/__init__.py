"""Database infrastructure - shared connection primitives."""

from infrastructure.database.exceptions import (
    DatabaseError,
    InvalidSchemaNameError,
    TenantScopeError,
)

__all__ = [
    "DatabaseError",
    "InvalidSchemaNameError",
    "TenantScopeError",
]
