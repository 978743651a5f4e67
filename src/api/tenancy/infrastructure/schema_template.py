"""Table layout materialized inside every tenant schema.

The tables are declared once, against a placeholder schema, and bound to a
concrete tenant schema at execution time through SQLAlchemy's
``schema_translate_map``. Statements built from these tables therefore
compile to fully qualified names and never rely on ``search_path``.

Example:
    conn = await conn.execution_options(
        schema_translate_map=schema_translate_map("tenant_acme")
    )
    await conn.execute(select(func.count()).select_from(articles))
"""

from __future__ import annotations

from enum import StrEnum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.engine import Connection

from infrastructure.database.models import NAMING_CONVENTION
from tenancy.domain.value_objects import (
    ArticleStatus,
    CommentStatus,
    UserRole,
    UserStatus,
)

# Bumped whenever the table layout below changes. Existing tenant schemas
# are never altered, so the version only describes newly provisioned ones.
TENANT_SCHEMA_VERSION = 1

# Placeholder schema replaced by the tenant schema at execution time
TENANT_SCHEMA_TOKEN = "__tenant__"

tenant_metadata = MetaData(
    schema=TENANT_SCHEMA_TOKEN, naming_convention=NAMING_CONVENTION
)


def _id_column() -> Column:
    return Column("id", String(26), primary_key=True)


def _tenant_id_column() -> Column:
    return Column("tenant_id", String(26), nullable=False)


def _timestamp_columns() -> list[Column]:
    return [
        Column(
            "created_at",
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
        Column(
            "updated_at",
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    ]


def _counter(name: str) -> Column:
    return Column(name, Integer, nullable=False, server_default=text("0"))


def _one_of(column: str, values: type[StrEnum]) -> CheckConstraint:
    allowed = ", ".join(f"'{value}'" for value in values)
    return CheckConstraint(f"{column} IN ({allowed})", name=column)


users = Table(
    "users",
    tenant_metadata,
    _id_column(),
    _tenant_id_column(),
    Column("email", String(255), nullable=False),
    Column("password_hash", String(255), nullable=False),
    Column("name", String(255), nullable=False),
    Column("avatar_url", String(255)),
    Column("role", String(20), nullable=False, server_default="author"),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("last_login_at", DateTime(timezone=True)),
    *_timestamp_columns(),
    UniqueConstraint("email"),
    _one_of("role", UserRole),
    _one_of("status", UserStatus),
)

categories = Table(
    "categories",
    tenant_metadata,
    _id_column(),
    _tenant_id_column(),
    Column("name", String(255), nullable=False),
    Column("slug", String(255), nullable=False),
    Column("description", Text),
    Column("parent_id", String(26), ForeignKey("categories.id")),
    _counter("sort_order"),
    _counter("article_count"),
    *_timestamp_columns(),
    UniqueConstraint("slug"),
)

articles = Table(
    "articles",
    tenant_metadata,
    _id_column(),
    _tenant_id_column(),
    Column("title", String(255), nullable=False),
    Column("slug", String(255), nullable=False),
    Column("content", Text, nullable=False),
    Column("excerpt", Text),
    Column("featured_image", String(255)),
    Column("status", String(20), nullable=False, server_default="draft"),
    Column("published_at", DateTime(timezone=True)),
    Column("scheduled_at", DateTime(timezone=True)),
    Column("author_id", String(26), ForeignKey("users.id"), nullable=False),
    Column("category_id", String(26), ForeignKey("categories.id")),
    Column("meta_title", String(255)),
    Column("meta_description", Text),
    Column("meta_keywords", String(255)),
    _counter("view_count"),
    _counter("like_count"),
    _counter("comment_count"),
    _counter("reading_time_minutes"),
    *_timestamp_columns(),
    UniqueConstraint("slug"),
    _one_of("status", ArticleStatus),
)

tags = Table(
    "tags",
    tenant_metadata,
    _id_column(),
    _tenant_id_column(),
    Column("name", String(255), nullable=False),
    Column("slug", String(255), nullable=False),
    Column("color", String(20)),
    _counter("article_count"),
    *_timestamp_columns(),
    UniqueConstraint("slug"),
)

article_tags = Table(
    "article_tags",
    tenant_metadata,
    Column(
        "article_id",
        String(26),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "tag_id",
        String(26),
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
    ),
    PrimaryKeyConstraint("article_id", "tag_id"),
)

comments = Table(
    "comments",
    tenant_metadata,
    _id_column(),
    _tenant_id_column(),
    Column(
        "article_id",
        String(26),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("parent_id", String(26), ForeignKey("comments.id", ondelete="CASCADE")),
    Column("author_name", String(255), nullable=False),
    Column("author_email", String(255), nullable=False),
    Column("author_url", String(255)),
    Column("content", Text, nullable=False),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("ip_address", String(45)),
    Column("user_agent", Text),
    *_timestamp_columns(),
    _one_of("status", CommentStatus),
)

media = Table(
    "media",
    tenant_metadata,
    _id_column(),
    _tenant_id_column(),
    Column("filename", String(255), nullable=False),
    Column("original_name", String(255), nullable=False),
    Column("mime_type", String(100), nullable=False),
    Column("size_bytes", Integer, nullable=False),
    Column("url", String(255), nullable=False),
    Column("alt_text", String(255)),
    Column("caption", Text),
    Column("uploaded_by", String(26), ForeignKey("users.id"), nullable=False),
    Column(
        "created_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    ),
)

# Creation order; every table appears after the tables it references
TENANT_TABLES: tuple[Table, ...] = (
    users,
    categories,
    articles,
    tags,
    article_tags,
    comments,
    media,
)

TENANT_TABLE_NAMES: tuple[str, ...] = tuple(table.name for table in TENANT_TABLES)


def schema_translate_map(schema_name: str) -> dict[str | None, str]:
    """Build the translate map binding template tables to a tenant schema."""
    return {TENANT_SCHEMA_TOKEN: schema_name}


def materialize(connection: Connection) -> None:
    """Create every template table on a connection.

    The connection must already carry a ``schema_translate_map`` naming the
    target schema. Intended for ``AsyncConnection.run_sync``.
    """
    tenant_metadata.create_all(connection, tables=list(TENANT_TABLES), checkfirst=False)
