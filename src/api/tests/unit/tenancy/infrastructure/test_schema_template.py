"""Unit tests for the tenant schema template."""

from unittest.mock import Mock, patch

from sqlalchemy import CheckConstraint, UniqueConstraint

from tenancy.infrastructure import schema_template
from tenancy.infrastructure.schema_template import (
    TENANT_SCHEMA_TOKEN,
    TENANT_TABLE_NAMES,
    TENANT_TABLES,
    article_tags,
    articles,
    categories,
    comments,
    materialize,
    media,
    schema_translate_map,
    tags,
    users,
)


def _unique_columns(table) -> set[tuple[str, ...]]:
    return {
        tuple(column.name for column in constraint.columns)
        for constraint in table.constraints
        if isinstance(constraint, UniqueConstraint)
    }


def _foreign_key(table, column_name):
    (fk,) = table.c[column_name].foreign_keys
    return fk


class TestTemplateLayout:
    """Tests for the table set and its order."""

    def test_contains_seven_tables_in_creation_order(self):
        assert TENANT_TABLE_NAMES == (
            "users",
            "categories",
            "articles",
            "tags",
            "article_tags",
            "comments",
            "media",
        )

    def test_tables_follow_their_dependencies(self):
        position = {table.name: index for index, table in enumerate(TENANT_TABLES)}
        for table in TENANT_TABLES:
            for fk in table.foreign_keys:
                assert position[fk.column.table.name] <= position[table.name]

    def test_all_tables_live_in_placeholder_schema(self):
        assert all(table.schema == TENANT_SCHEMA_TOKEN for table in TENANT_TABLES)

    def test_translate_map_targets_tenant_schema(self):
        assert schema_translate_map("tenant_acme") == {
            TENANT_SCHEMA_TOKEN: "tenant_acme"
        }


class TestTemplateConstraints:
    """Tests for per-tenant uniqueness and referential rules."""

    def test_unique_slugs_and_emails(self):
        assert ("email",) in _unique_columns(users)
        assert ("slug",) in _unique_columns(articles)
        assert ("slug",) in _unique_columns(categories)
        assert ("slug",) in _unique_columns(tags)

    def test_article_references(self):
        assert _foreign_key(articles, "author_id").column.table is users
        assert _foreign_key(articles, "category_id").column.table is categories

    def test_category_parent_is_self_reference(self):
        assert _foreign_key(categories, "parent_id").column.table is categories

    def test_article_tags_cascade_on_both_sides(self):
        assert {col.name for col in article_tags.primary_key.columns} == {
            "article_id",
            "tag_id",
        }
        assert _foreign_key(article_tags, "article_id").ondelete == "CASCADE"
        assert _foreign_key(article_tags, "tag_id").ondelete == "CASCADE"

    def test_comments_cascade(self):
        article_fk = _foreign_key(comments, "article_id")
        parent_fk = _foreign_key(comments, "parent_id")

        assert article_fk.column.table is articles
        assert article_fk.ondelete == "CASCADE"
        assert parent_fk.column.table is comments
        assert parent_fk.ondelete == "CASCADE"

    def test_media_uploader_references_users(self):
        assert _foreign_key(media, "uploaded_by").column.table is users

    def test_role_and_status_domains_are_checked(self):
        checks = {
            str(constraint.sqltext)
            for table in (users, articles, comments)
            for constraint in table.constraints
            if isinstance(constraint, CheckConstraint)
        }

        assert "role IN ('admin', 'editor', 'author', 'reviewer')" in checks
        assert "status IN ('active', 'inactive', 'pending')" in checks
        assert "status IN ('draft', 'published', 'scheduled', 'archived')" in checks
        assert "status IN ('pending', 'approved', 'rejected', 'spam')" in checks

    def test_user_defaults(self):
        assert users.c.role.server_default.arg == "author"
        assert users.c.status.server_default.arg == "active"


class TestMaterialize:
    """Tests for materialize()."""

    def test_creates_every_table_without_checkfirst(self):
        connection = Mock()

        with patch.object(schema_template.tenant_metadata, "create_all") as create_all:
            materialize(connection)

        create_all.assert_called_once_with(
            connection, tables=list(TENANT_TABLES), checkfirst=False
        )
