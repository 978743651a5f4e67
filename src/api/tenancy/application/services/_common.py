"""Helpers shared by the tenancy application services."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.value_objects import TenantId
from tenancy.ports.exceptions import NotFoundError
from tenancy.ports.repositories import ITenantCatalog

CatalogFactory = Callable[[AsyncSession], ITenantCatalog]


def coerce_tenant_id(tenant_id: TenantId | str) -> TenantId:
    """Accept a TenantId or its string form.

    A malformed id cannot name any tenant, so it is reported as not found.

    Raises:
        NotFoundError: If the string is not a valid tenant id
    """
    if isinstance(tenant_id, TenantId):
        return tenant_id
    try:
        return TenantId.from_string(tenant_id)
    except ValueError as e:
        raise NotFoundError(f"Tenant {tenant_id} not found") from e
