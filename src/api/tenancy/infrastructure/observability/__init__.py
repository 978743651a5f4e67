"""Domain-Oriented Observability for tenancy infrastructure."""

from tenancy.infrastructure.observability.catalog_probe import (
    DefaultTenantCatalogProbe,
    TenantCatalogProbe,
)
from tenancy.infrastructure.observability.schema_probe import (
    DefaultSchemaProvisionerProbe,
    DefaultTenantScopeProbe,
    SchemaProvisionerProbe,
    TenantScopeProbe,
)

__all__ = [
    "DefaultSchemaProvisionerProbe",
    "DefaultTenantCatalogProbe",
    "DefaultTenantScopeProbe",
    "SchemaProvisionerProbe",
    "TenantCatalogProbe",
    "TenantScopeProbe",
]
