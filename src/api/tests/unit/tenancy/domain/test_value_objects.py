"""Unit tests for tenancy domain value objects."""

import pytest

from tenancy.domain.value_objects import (
    Page,
    PageRequest,
    PlanLimits,
    TenantFilter,
    TenantId,
    TenantPlan,
    TenantStatus,
    derive_schema_name,
    is_valid_schema_name,
    is_valid_subdomain,
)
from tenancy.ports.exceptions import ValidationError


class TestTenantId:
    """Tests for TenantId value object."""

    def test_generate_creates_valid_ulid(self):
        tenant_id = TenantId.generate()

        assert len(tenant_id.value) == 26
        assert TenantId.from_string(tenant_id.value) == tenant_id

    def test_from_string_rejects_malformed_value(self):
        with pytest.raises(ValueError, match="Invalid TenantId"):
            TenantId.from_string("not-a-ulid")

    def test_str_returns_value(self):
        tenant_id = TenantId.generate()
        assert str(tenant_id) == tenant_id.value


class TestSubdomainValidation:
    """Tests for subdomain syntax rules."""

    @pytest.mark.parametrize("subdomain", ["acme", "my-blog", "a1", "blog-2024"])
    def test_accepts_valid_subdomains(self, subdomain):
        assert is_valid_subdomain(subdomain)

    @pytest.mark.parametrize(
        "subdomain",
        ["a", "-acme", "acme-", "Acme", "my_blog", "my.blog", "", "a" * 51],
    )
    def test_rejects_invalid_subdomains(self, subdomain):
        assert not is_valid_subdomain(subdomain)

    def test_accepts_fifty_characters(self):
        assert is_valid_subdomain("a" * 50)


class TestDeriveSchemaName:
    """Tests for the deterministic schema name derivation."""

    def test_prefixes_subdomain(self):
        assert derive_schema_name("acme") == "tenant_acme"

    def test_replaces_hyphens_with_underscores(self):
        assert derive_schema_name("my-cool-blog") == "tenant_my_cool_blog"

    def test_uses_custom_prefix(self):
        assert derive_schema_name("acme", prefix="t_") == "t_acme"

    def test_rejects_invalid_subdomain(self):
        with pytest.raises(ValueError):
            derive_schema_name("bad_subdomain")

    def test_derived_names_are_valid_schema_names(self):
        assert is_valid_schema_name(derive_schema_name("a" * 50))


class TestSchemaNameValidation:
    """Tests for schema name validation."""

    @pytest.mark.parametrize("name", ["tenant_acme", "public", "_private"])
    def test_accepts_plain_identifiers(self, name):
        assert is_valid_schema_name(name)

    @pytest.mark.parametrize(
        "name",
        ['tenant"; DROP SCHEMA public; --', "Tenant", "1tenant", "", "a" * 64, "x-y"],
    )
    def test_rejects_unsafe_names(self, name):
        assert not is_valid_schema_name(name)


class TestPlanLimits:
    """Tests for per-plan default limits."""

    def test_free_plan(self):
        assert PlanLimits.for_plan(TenantPlan.FREE).as_dict() == {
            "max_articles": 100,
            "max_users": 3,
            "max_storage_mb": 1000,
        }

    def test_pro_plan(self):
        assert PlanLimits.for_plan(TenantPlan.PRO).as_dict() == {
            "max_articles": 10000,
            "max_users": 10,
            "max_storage_mb": 10000,
        }

    def test_enterprise_plan_is_unlimited(self):
        limits = PlanLimits.for_plan(TenantPlan.ENTERPRISE)
        assert limits.max_articles == -1
        assert limits.max_users == -1
        assert limits.max_storage_mb == -1

    def test_accepts_plan_string(self):
        assert PlanLimits.for_plan("pro") == PlanLimits.for_plan(TenantPlan.PRO)


class TestTenantFilter:
    """Tests for TenantFilter."""

    def test_coerces_strings_to_enums(self):
        tenant_filter = TenantFilter(status="trial", plan="pro")

        assert tenant_filter.status is TenantStatus.TRIAL
        assert tenant_filter.plan is TenantPlan.PRO

    def test_defaults_leave_criteria_unset(self):
        tenant_filter = TenantFilter()

        assert tenant_filter.status is None
        assert tenant_filter.plan is None
        assert tenant_filter.include_deleted is False

    def test_rejects_unknown_status(self):
        """An unknown status is a validation error naming the field."""
        with pytest.raises(ValidationError) as exc_info:
            TenantFilter(status="bogus")

        assert exc_info.value.field == "status"

    def test_rejects_unknown_plan(self):
        with pytest.raises(ValidationError) as exc_info:
            TenantFilter(plan="platinum")

        assert exc_info.value.field == "plan"


class TestPagination:
    """Tests for PageRequest and Page."""

    def test_defaults(self):
        page = PageRequest()
        assert page.page == 1
        assert page.limit == 20
        assert page.offset == 0

    def test_offset(self):
        assert PageRequest(page=3, limit=10).offset == 20

    @pytest.mark.parametrize("limit", [0, 101])
    def test_rejects_limit_out_of_range(self, limit):
        with pytest.raises(ValidationError):
            PageRequest(limit=limit)

    def test_rejects_page_below_one(self):
        with pytest.raises(ValidationError):
            PageRequest(page=0)

    def test_page_metadata(self):
        page = Page(items=["a"] * 20, total=45, page=1, limit=20)

        assert page.pages == 3
        assert page.has_next is True
        assert page.has_prev is False

    def test_last_page_metadata(self):
        page = Page(items=["a"] * 5, total=45, page=3, limit=20)

        assert page.has_next is False
        assert page.has_prev is True

    def test_empty_result(self):
        page = Page(items=[], total=0, page=1, limit=20)

        assert page.pages == 0
        assert page.has_next is False
        assert page.has_prev is False
