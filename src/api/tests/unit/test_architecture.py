"""Architecture tests using pytest-archon.

These tests enforce the layer boundaries of the tenancy bounded context
and keep the shared infrastructure package independent of it.
"""

from pytest_archon import archrule


class TestTenancyDomainLayerBoundaries:
    """Tests that the domain layer has no forbidden dependencies."""

    def test_domain_does_not_import_infrastructure(self):
        """Domain layer should not depend on infrastructure.

        Tenants and their users are plain aggregates; catalog rows and
        schema DDL live elsewhere.
        """
        (
            archrule("domain_no_infrastructure")
            .match("tenancy.domain*")
            .should_not_import("tenancy.infrastructure*", "infrastructure*")
            .check("tenancy")
        )

    def test_domain_does_not_import_application(self):
        (
            archrule("domain_no_application")
            .match("tenancy.domain*")
            .should_not_import("tenancy.application*", "tenancy.engine")
            .check("tenancy")
        )

    def test_domain_does_not_import_sqlalchemy(self):
        """Domain objects should be usable without a database driver."""
        (
            archrule("domain_no_sqlalchemy")
            .match("tenancy.domain*")
            .should_not_import("sqlalchemy*", "asyncpg*")
            .check("tenancy")
        )


class TestTenancyPortsLayerBoundaries:
    """Tests that the ports layer has no forbidden dependencies."""

    def test_ports_does_not_import_infrastructure(self):
        """Ports define the catalog interface, not its PostgreSQL implementation."""
        (
            archrule("ports_no_infrastructure")
            .match("tenancy.ports*")
            .should_not_import("tenancy.infrastructure*")
            .check("tenancy")
        )

    def test_ports_does_not_import_application(self):
        (
            archrule("ports_no_application")
            .match("tenancy.ports*")
            .should_not_import("tenancy.application*")
            .check("tenancy")
        )


class TestTenancyInfrastructureLayerBoundaries:
    """Tests for the tenancy infrastructure layer."""

    def test_infrastructure_does_not_import_application(self):
        """Infrastructure should not depend on application services.

        The catalog, provisioner and context switcher are composed by
        the services, never the other way around.
        """
        (
            archrule("infrastructure_no_application")
            .match("tenancy.infrastructure*")
            .should_not_import("tenancy.application*", "tenancy.engine")
            .check("tenancy")
        )

    def test_infrastructure_can_import_domain_and_ports(self):
        (
            archrule("infrastructure_imports_domain")
            .match("tenancy.infrastructure*")
            .may_import("tenancy.domain*", "tenancy.ports*")
            .check("tenancy")
        )


class TestSharedInfrastructureBoundaries:
    """Tests that shared infrastructure stays free of bounded contexts."""

    def test_database_package_does_not_import_tenancy(self):
        """Engines, sessions and base models are reusable by any context."""
        (
            archrule("database_no_tenancy")
            .match("infrastructure.database*")
            .should_not_import("tenancy*")
            .check("infrastructure")
        )

    def test_settings_and_logging_do_not_import_tenancy(self):
        (
            archrule("settings_no_tenancy")
            .match("infrastructure.settings", "infrastructure.logging")
            .should_not_import("tenancy*")
            .check("infrastructure")
        )
