"""Unit tests for the Tenant aggregate."""

from datetime import UTC, datetime, timedelta

import pytest

from tenancy.domain.aggregates import Tenant, TenantUser
from tenancy.domain.value_objects import TenantPlan, TenantStatus, UserRole, UserStatus
from tenancy.ports.exceptions import (
    PermissionDeniedError,
    TenantExpiredError,
    TenantSuspendedError,
    TenantUnavailableError,
    ValidationError,
)


@pytest.fixture
def tenant() -> Tenant:
    return Tenant.create(name="Acme", subdomain="acme")


class TestTenantCreate:
    """Tests for Tenant.create() factory method."""

    def test_free_tenant_gets_free_limits_and_derived_schema(self):
        """A free tenant should start active with free limits and a derived schema."""
        tenant = Tenant.create(name="Acme", subdomain="acme", plan=TenantPlan.FREE)

        assert tenant.schema_name == "tenant_acme"
        assert tenant.status == TenantStatus.ACTIVE
        assert tenant.plan == TenantPlan.FREE
        assert tenant.settings["limits"] == {
            "max_articles": 100,
            "max_users": 3,
            "max_storage_mb": 1000,
        }

    def test_defaults_to_free_plan(self):
        """Plan should default to free."""
        tenant = Tenant.create(name="Acme", subdomain="acme")
        assert tenant.plan == TenantPlan.FREE

    def test_seeds_default_settings_document(self):
        """Settings should start from the default document."""
        tenant = Tenant.create(name="Acme", subdomain="acme", plan="pro")

        assert tenant.settings["theme"] == "default"
        assert set(tenant.settings["integrations"]) == {
            "bigwriter",
            "social_media",
            "newsletter",
            "analytics",
        }
        assert set(tenant.settings["features"]) == {
            "comments",
            "social_sharing",
            "newsletter_signup",
            "search",
        }
        assert tenant.settings["limits"]["max_users"] == 10

    def test_hyphenated_subdomain(self):
        """Hyphens should become underscores in the schema name."""
        tenant = Tenant.create(name="My Blog", subdomain="my-blog")
        assert tenant.schema_name == "tenant_my_blog"

    def test_generates_unique_ids(self):
        """Each tenant should get its own ULID."""
        first = Tenant.create(name="One", subdomain="one")
        second = Tenant.create(name="Two", subdomain="two")
        assert first.id != second.id

    def test_invalid_subdomain_raises_validation_error(self):
        """Invalid subdomains should be reported against the subdomain field."""
        with pytest.raises(ValidationError) as exc_info:
            Tenant.create(name="Acme", subdomain="Not Valid")

        assert exc_info.value.field == "subdomain"

    def test_settings_documents_are_independent(self):
        """Mutating one tenant's settings must not leak into another."""
        first = Tenant.create(name="One", subdomain="one")
        second = Tenant.create(name="Two", subdomain="two")

        first.settings["features"]["comments"] = False

        assert second.settings["features"]["comments"] is True


class TestTenantApplyUpdate:
    """Tests for Tenant.apply_update()."""

    def test_updates_name(self, tenant):
        """Name changes need no elevation."""
        tenant.apply_update({"name": "Acme Inc"}, elevated=False)
        assert tenant.name == "Acme Inc"

    def test_non_elevated_caller_cannot_change_status(self, tenant):
        """Status changes should require elevation."""
        with pytest.raises(PermissionDeniedError):
            tenant.apply_update({"status": "suspended"}, elevated=False)

        assert tenant.status == TenantStatus.ACTIVE

    def test_non_elevated_caller_cannot_change_plan(self, tenant):
        """Plan changes should require elevation."""
        with pytest.raises(PermissionDeniedError):
            tenant.apply_update({"plan": "pro", "name": "New"}, elevated=False)

        assert tenant.plan == TenantPlan.FREE
        assert tenant.name == "Acme"

    def test_non_elevated_caller_may_repeat_current_status_and_plan(self, tenant):
        """Restating privileged fields unchanged is not a privileged change."""
        tenant.apply_update(
            {"status": "active", "plan": "free", "name": "Acme Inc"}, elevated=False
        )

        assert tenant.status == TenantStatus.ACTIVE
        assert tenant.plan == TenantPlan.FREE
        assert tenant.name == "Acme Inc"

    def test_elevated_caller_changes_status_and_plan(self, tenant):
        tenant.apply_update({"status": "suspended", "plan": "pro"}, elevated=True)

        assert tenant.status == TenantStatus.SUSPENDED
        assert tenant.plan == TenantPlan.PRO

    def test_plan_change_keeps_existing_limits(self, tenant):
        """Changing plan should leave stored limits alone."""
        tenant.apply_update({"plan": "enterprise"}, elevated=True)
        assert tenant.settings["limits"]["max_articles"] == 100

    def test_settings_are_merged(self, tenant):
        """Settings patches should merge into the stored document."""
        tenant.apply_update(
            {"settings": {"theme": "dark", "features": {"comments": False}}},
            elevated=False,
        )

        assert tenant.settings["theme"] == "dark"
        assert tenant.settings["features"]["comments"] is False
        assert tenant.settings["features"]["search"] is True
        assert tenant.settings["limits"]["max_users"] == 3

    def test_expires_at_can_be_cleared(self):
        expiry = datetime.now(UTC) + timedelta(days=14)
        tenant = Tenant.create(name="Acme", subdomain="acme", expires_at=expiry)

        tenant.apply_update({"expires_at": None}, elevated=False)

        assert tenant.expires_at is None

    def test_unknown_field_raises_validation_error(self, tenant):
        """Fields outside the updatable set should be rejected."""
        with pytest.raises(ValidationError):
            tenant.apply_update({"subdomain": "other"}, elevated=True)

    def test_touches_updated_at(self, tenant):
        before = tenant.updated_at
        tenant.apply_update({"name": "Renamed"}, elevated=False)
        assert tenant.updated_at >= before


class TestTenantSoftDelete:
    """Tests for Tenant.soft_delete()."""

    def test_marks_deleted(self, tenant):
        """soft_delete should flip the status and report a change."""
        assert tenant.soft_delete() is True
        assert tenant.is_deleted
        assert tenant.schema_name == "tenant_acme"

    def test_is_idempotent(self, tenant):
        """Deleting twice should report no change the second time."""
        tenant.soft_delete()
        assert tenant.soft_delete() is False
        assert tenant.status == TenantStatus.DELETED


class TestTenantServiceability:
    """Tests for expiry and serviceability checks."""

    def test_active_tenant_is_serviceable(self, tenant):
        tenant.ensure_serviceable()

    def test_suspended_tenant_raises(self, tenant):
        """Suspended tenants should not be serviceable."""
        tenant.status = TenantStatus.SUSPENDED

        with pytest.raises(TenantSuspendedError) as exc_info:
            tenant.ensure_serviceable()

        assert isinstance(exc_info.value, TenantUnavailableError)
        assert exc_info.value.tenant_id == tenant.id.value

    def test_expired_status_raises(self, tenant):
        tenant.status = TenantStatus.EXPIRED

        with pytest.raises(TenantExpiredError):
            tenant.ensure_serviceable()

    def test_lapsed_trial_is_expired(self, tenant):
        """A trial past its expiry date counts as expired."""
        now = datetime.now(UTC)
        tenant.status = TenantStatus.TRIAL
        tenant.expires_at = now - timedelta(minutes=1)

        assert tenant.is_expired(now)
        with pytest.raises(TenantExpiredError):
            tenant.ensure_serviceable(now)

    def test_running_trial_is_serviceable(self, tenant):
        """A trial before its expiry date is serviceable."""
        tenant.status = TenantStatus.TRIAL
        tenant.expires_at = datetime.now(UTC) + timedelta(days=3)

        tenant.ensure_serviceable()

    def test_custom_domain_reads_settings(self, tenant):
        assert tenant.custom_domain is None
        tenant.settings["custom_domain"] = "blog.acme.org"
        assert tenant.custom_domain == "blog.acme.org"


class TestTenantUser:
    """Tests for the TenantUser entity."""

    def test_create_admin(self, tenant):
        """create_admin should produce an active admin for the tenant."""
        admin = TenantUser.create_admin(
            tenant_id=tenant.id,
            email="owner@acme.com",
            name="Ada Owner",
            password_hash="$2b$12$hash",
        )

        assert admin.role == UserRole.ADMIN
        assert admin.status == UserStatus.ACTIVE
        assert admin.tenant_id == tenant.id
        assert "$2b$12$hash" not in repr(admin)
